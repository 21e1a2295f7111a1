from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Tuple

from ..core.ports import RoleSource
from .role_loader import parse_roles_bytes

logger = logging.getLogger("restrbac.store.s3")


_S3_URL_RE = re.compile(r"^s3://(?P<bucket>[^/]+)/(?P<key>.+)$")


@dataclass(frozen=True)
class _S3Location:
    bucket: str
    key: str


def _parse_s3_url(url: str) -> _S3Location:
    m = _S3_URL_RE.match(url)
    if not m:
        raise ValueError(f"Invalid S3 URL: {url!r} (expected s3://bucket/key)")
    return _S3Location(bucket=m.group("bucket"), key=m.group("key"))


class S3RoleSource(RoleSource):
    """
    Role source backed by an Amazon S3 object (JSON or YAML, picked from the key
    extension or the object's ContentType).

    Change detection strategies (``change_detector``):
      - "etag"       : HeadObject ETag (default).
      - "version_id" : HeadObject VersionId (needs bucket versioning); falls back to ETag.
      - "checksum"   : GetObjectAttributes checksum (sha256/crc32c/sha1); falls back to ETag.

    The source keeps no state between calls; HotReloader compares the values.
    """

    def __init__(
        self,
        url: str,
        *,
        validate_schema: bool = False,
        change_detector: Literal["etag", "version_id", "checksum"] = "etag",
        prefer_checksum: Optional[Literal["sha256", "crc32c", "sha1"]] = "sha256",
        session: Any | None = None,  # boto3.session.Session | None
        botocore_config: Any | None = None,  # botocore.config.Config | None
        client_params: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.loc = _parse_s3_url(url)
        self.path = url
        self.validate_schema = validate_schema
        self.change_detector = change_detector
        self.prefer_checksum = prefer_checksum
        self._client = self._build_client(session, botocore_config, client_params or {})

    @staticmethod
    def _build_client(session: Any | None, cfg: Any | None, extra: Dict[str, Any]) -> Any:
        try:
            import boto3  # type: ignore[import-untyped]
            from botocore.config import Config  # type: ignore[import-untyped]
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "S3RoleSource requires boto3. Install with: pip install restrbac[s3]"
            ) from e

        if cfg is None:
            cfg = Config(
                retries={"max_attempts": 4, "mode": "standard"},
                connect_timeout=3,
                read_timeout=8,
            )
        if session is None:
            session = boto3.session.Session()
        return session.client("s3", config=cfg, **extra)

    # --------------------------------------------------------------------- #
    # RoleSource interface
    # --------------------------------------------------------------------- #

    def etag(self) -> Optional[str]:
        """Return a namespaced identifier of the object's current state."""
        if self.change_detector == "version_id":
            vid = self._head_field("VersionId")
            if vid is not None:
                return f"vid:{vid}"
        elif self.change_detector == "checksum":
            cks = self._get_checksum()
            if cks is not None:
                algo, value = cks
                return f"ck:{algo}:{value}"
        etag = self._head_field("ETag")
        if etag is None:
            return None
        return "etag:" + etag.strip('"')

    def load(self) -> Dict[str, Any]:
        resp = self._client.get_object(Bucket=self.loc.bucket, Key=self.loc.key)
        body = resp["Body"].read()
        resp["Body"].close()
        doc = parse_roles_bytes(body, content_type=resp.get("ContentType"), filename=self.loc.key)

        if self.validate_schema:
            from ..dsl.validate import validate_roles

            try:
                validate_roles(doc)
            except Exception:
                logger.exception("restrbac: role document validation failed: %s", self.path)
                raise
        return doc

    # --------------------------------------------------------------------- #
    # S3 calls
    # --------------------------------------------------------------------- #

    def _head_field(self, field: str) -> Optional[str]:
        try:
            resp = self._client.head_object(Bucket=self.loc.bucket, Key=self.loc.key)
        except self._client.exceptions.NoSuchKey:
            return None
        value = resp.get(field)
        return value if isinstance(value, str) and value else None

    def _get_checksum(self) -> Optional[Tuple[str, str]]:
        try:
            resp = self._client.get_object_attributes(
                Bucket=self.loc.bucket,
                Key=self.loc.key,
                ObjectAttributes=["Checksum"],
            )
        except self._client.exceptions.NoSuchKey:
            return None
        except Exception:
            # older S3-compatible servers lack GetObjectAttributes
            logger.debug("restrbac: GetObjectAttributes failed for %s", self.path, exc_info=True)
            return None

        checksum = resp.get("Checksum") or {}
        candidates: Dict[str, Optional[str]] = {
            "sha256": checksum.get("ChecksumSHA256"),
            "crc32c": checksum.get("ChecksumCRC32C"),
            "sha1": checksum.get("ChecksumSHA1"),
        }
        if self.prefer_checksum and candidates.get(self.prefer_checksum):
            return self.prefer_checksum, candidates[self.prefer_checksum]  # type: ignore[return-value]
        for algo in ("sha256", "crc32c", "sha1"):
            val = candidates.get(algo)
            if val:
                return algo, val
        return None


__all__ = ["S3RoleSource"]
