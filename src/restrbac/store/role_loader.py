from __future__ import annotations

import json
from typing import Any, Dict, Literal, Optional

Format = Literal["json", "yaml"]


def _detect_format(
    *,
    fmt: Optional[str] = None,
    content_type: Optional[str] = None,
    filename: Optional[str] = None,
) -> Format:
    """Pick the document format.

    Explicit ``fmt`` wins, then the content type, then the file extension;
    JSON is the fallback.
    """
    if fmt:
        return "yaml" if fmt.lower() in ("yaml", "yml") else "json"
    if content_type:
        ct = content_type.lower()
        if "yaml" in ct:
            return "yaml"
        if "json" in ct:
            return "json"
    if filename:
        name = filename.lower()
        if name.endswith((".yaml", ".yml")):
            return "yaml"
    return "json"


def _parse_yaml(text: str) -> Dict[str, Any]:
    try:
        import yaml  # type: ignore[import-untyped]
    except Exception as e:
        raise ImportError(
            "YAML role documents require PyYAML. Install with: pip install restrbac[yaml]"
        ) from e

    doc = yaml.safe_load(text)
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ValueError("YAML role document must be a mapping at the top level")
    return doc


def parse_roles_text(
    text: str,
    *,
    fmt: Optional[str] = None,
    content_type: Optional[str] = None,
    filename: Optional[str] = None,
) -> Dict[str, Any]:
    """Decode a JSON or YAML role document into a plain mapping."""
    if _detect_format(fmt=fmt, content_type=content_type, filename=filename) == "yaml":
        return _parse_yaml(text)
    doc = json.loads(text)
    if not isinstance(doc, dict):
        raise ValueError("JSON role document must be an object at the top level")
    return doc


def parse_roles_bytes(
    data: bytes,
    *,
    fmt: Optional[str] = None,
    content_type: Optional[str] = None,
    filename: Optional[str] = None,
    encoding: str = "utf-8",
) -> Dict[str, Any]:
    return parse_roles_text(
        data.decode(encoding), fmt=fmt, content_type=content_type, filename=filename
    )


__all__ = ["parse_roles_text", "parse_roles_bytes"]
