from .convention import RestConvention, resolve_action, split_path
from .engine import Guard, can_access
from .matcher import matches
from .model import Decision, Permission, RequestTarget, RoleDefinitions
from .roles import RoleDefinitionError, parse_role_definitions

__all__ = [
    "Decision",
    "Guard",
    "Permission",
    "RequestTarget",
    "RestConvention",
    "RoleDefinitionError",
    "RoleDefinitions",
    "can_access",
    "matches",
    "parse_role_definitions",
    "resolve_action",
    "split_path",
]
