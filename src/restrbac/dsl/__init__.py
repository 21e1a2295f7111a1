from .lint import analyze_roles
from .validate import ROLES_SCHEMA, iter_errors, validate_roles

__all__ = ["ROLES_SCHEMA", "analyze_roles", "iter_errors", "validate_roles"]
