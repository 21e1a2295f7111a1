from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .model import EFFECT_ALLOW, EFFECT_DENY, Permission, RoleDefinitions


class RoleDefinitionError(ValueError):
    """Raised when a role document cannot be read as role -> list of rules."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def _parse_actions(raw: Any) -> frozenset[str]:
    # Scalar and list forms collapse into one set; anything else is no action.
    if isinstance(raw, str):
        return frozenset((raw,))
    if isinstance(raw, (list, tuple)):
        return frozenset(item for item in raw if isinstance(item, str))
    return frozenset()


def parse_permission(raw: Any, *, path: str = "") -> Permission:
    """Build a :class:`Permission` from one rule object.

    Only the shape of the rule is enforced. Unusual values are accepted:
    an unknown ``type`` means allow, a missing or empty ``action`` never
    matches a concrete action, a missing ``resource`` is an empty pattern.
    A ``null`` rule is read as an empty rule object.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise RoleDefinitionError(f"rule must be an object, got {type(raw).__name__}", path)
    effect = EFFECT_DENY if raw.get("type") == EFFECT_DENY else EFFECT_ALLOW
    resource = raw.get("resource")
    return Permission(
        effect=effect,
        actions=_parse_actions(raw.get("action")),
        resource=resource if isinstance(resource, str) else "",
    )


def parse_role_definitions(doc: Any) -> RoleDefinitions:
    """Parse a declarative role document into an immutable snapshot.

    ``doc`` maps role name to a list of rule objects. ``null`` in place of a
    rule list is an empty role. Raises :class:`RoleDefinitionError` when the
    document does not have that shape at all.
    """
    if isinstance(doc, RoleDefinitions):
        return doc
    if not isinstance(doc, Mapping):
        raise RoleDefinitionError(f"role document must be an object, got {type(doc).__name__}")

    roles = {}
    for name, rules in doc.items():
        if not isinstance(name, str):
            raise RoleDefinitionError(f"role name must be a string, got {name!r}")
        if rules is None:
            rules = []
        if not isinstance(rules, (list, tuple)):
            raise RoleDefinitionError(
                f"rules must be a list, got {type(rules).__name__}", f"/{name}"
            )
        roles[name] = tuple(
            parse_permission(rule, path=f"/{name}/{idx}") for idx, rule in enumerate(rules)
        )
    return RoleDefinitions(roles)


__all__ = ["RoleDefinitionError", "parse_permission", "parse_role_definitions"]
