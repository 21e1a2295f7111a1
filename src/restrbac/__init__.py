"""restrbac: role-based access control for REST-style HTTP APIs.

Roles are lists of allow/deny rules over actions (list, show, create, edit,
delete) and resource patterns. A :class:`Guard` holds the current role
snapshot and decides requests; deny rules always win and nothing matching
means deny.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from . import adapters, core, store
from .core.convention import RestConvention, resolve_action, split_path
from .core.engine import Guard, can_access
from .core.matcher import matches
from .core.model import Decision, Permission, RequestTarget, RoleDefinitions
from .core.roles import RoleDefinitionError, parse_role_definitions
from .store import FileRoleSource, HotReloader


def _detect_version() -> str:
    try:
        return version("restrbac")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "Decision",
    "FileRoleSource",
    "Guard",
    "HotReloader",
    "Permission",
    "RequestTarget",
    "RestConvention",
    "RoleDefinitionError",
    "RoleDefinitions",
    "__version__",
    "adapters",
    "can_access",
    "core",
    "matches",
    "parse_role_definitions",
    "resolve_action",
    "split_path",
    "store",
]
