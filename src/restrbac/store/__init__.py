from __future__ import annotations

from .file_store import FileRoleSource, atomic_write
from .reloader import HotReloader
from .role_loader import parse_roles_bytes, parse_roles_text
from .s3_store import S3RoleSource

__all__ = [
    "FileRoleSource",
    "HotReloader",
    "S3RoleSource",
    "atomic_write",
    "parse_roles_bytes",
    "parse_roles_text",
]
