from __future__ import annotations

from typing import Any, Dict, List

ROLES_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://restrbac.dev/schema/roles.json",
    "title": "restrbac role definitions",
    "type": "object",
    "additionalProperties": {
        "type": ["array", "null"],
        "items": {"$ref": "#/$defs/permission"},
    },
    "$defs": {
        "permission": {
            "type": "object",
            "properties": {
                "type": {"enum": ["allow", "deny"]},
                "action": {
                    "oneOf": [
                        {"type": "string", "minLength": 1},
                        {
                            "type": "array",
                            "items": {"type": "string", "minLength": 1},
                            "minItems": 1,
                        },
                    ]
                },
                "resource": {"type": "string", "minLength": 1},
            },
            "required": ["action", "resource"],
            "additionalProperties": False,
        }
    },
}


def _validator():
    try:
        from jsonschema import Draft202012Validator  # type: ignore[import-untyped]
    except Exception as e:
        raise ImportError(
            "Role document validation requires jsonschema. "
            "Install with: pip install restrbac[validate]"
        ) from e
    return Draft202012Validator(ROLES_SCHEMA)


def validate_roles(doc: Dict[str, Any]) -> None:
    """Raise ``jsonschema.ValidationError`` if ``doc`` is not a strict role document.

    Stricter than the parser: unknown keys, unknown ``type`` values and empty
    actions are rejected here.
    """
    _validator().validate(doc)


def iter_errors(doc: Dict[str, Any]) -> List[Dict[str, Any]]:
    """All schema violations as ``{"message", "path"}`` dicts, in document order."""
    errors = sorted(_validator().iter_errors(doc), key=lambda e: [str(p) for p in e.absolute_path])
    return [
        {
            "message": err.message,
            "path": "/" + "/".join(str(p) for p in err.absolute_path),
        }
        for err in errors
    ]


__all__ = ["ROLES_SCHEMA", "validate_roles", "iter_errors"]
