from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from typing import Any, Dict, Optional, Tuple

from ..core.ports import RoleSource
from .role_loader import parse_roles_text

logger = logging.getLogger("restrbac.store")


def atomic_write(path: str, data: str, *, encoding: str = "utf-8") -> None:
    """Replace *path* with *data* so readers never see a half-written file."""
    fd, tmp = tempfile.mkstemp(prefix=".restrbac.tmp.", dir=os.path.dirname(path) or ".")
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(data)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


class FileRoleSource(RoleSource):
    """Role document stored in a local JSON or YAML file.

    ``etag()`` is the SHA-256 of the file content, or ``"<sha>:<mtime_ns>"``
    with ``include_mtime_in_etag`` so that touching the file forces a reload.
    The digest is only recomputed when size or mtime change.
    """

    def __init__(
        self,
        path: str,
        *,
        validate_schema: bool = False,
        include_mtime_in_etag: bool = False,
        chunk_size: int = 512 * 1024,
    ) -> None:
        self.path = path
        self.validate_schema = validate_schema
        self.include_mtime_in_etag = include_mtime_in_etag
        self._chunk_size = int(chunk_size)
        self._digest_for: Optional[Tuple[int, int]] = None
        self._digest: Optional[str] = None

    def _content_digest(self, size: int, mtime_ns: int) -> str:
        if self._digest is None or self._digest_for != (size, mtime_ns):
            h = hashlib.sha256()
            with open(self.path, "rb") as f:
                while chunk := f.read(self._chunk_size):
                    h.update(chunk)
            self._digest, self._digest_for = h.hexdigest(), (size, mtime_ns)
        return self._digest

    def etag(self) -> Optional[str]:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            self._digest = self._digest_for = None
            return None
        digest = self._content_digest(st.st_size, st.st_mtime_ns)
        return f"{digest}:{st.st_mtime_ns}" if self.include_mtime_in_etag else digest

    def load(self) -> Dict[str, Any]:
        # a change between etag() and load() shows up on the next check
        with open(self.path, "r", encoding="utf-8") as f:
            doc = parse_roles_text(f.read(), filename=self.path)

        if self.validate_schema:
            from ..dsl.validate import validate_roles

            try:
                validate_roles(doc)
            except Exception:
                logger.exception("restrbac: role document validation failed: %s", self.path)
                raise

        return doc


__all__ = ["atomic_write", "FileRoleSource"]
