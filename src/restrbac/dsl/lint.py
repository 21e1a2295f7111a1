"""Static checks for role documents.

The parser accepts anything shaped like ``role -> [rule, ...]``; these checks
point out rules that parse fine but will not behave as their author likely
intended.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List

from ..core.matcher import matches
from ..core.model import WILDCARD, Permission
from ..core.roles import parse_permission, parse_role_definitions

Issue = Dict[str, Any]


def _issue(code: str, message: str, path: str, role: str) -> Issue:
    return {"code": code, "message": message, "path": path, "role": role}


def _pattern_covers(outer: str, inner: str) -> bool:
    """True if every resource matched by ``inner`` is also matched by ``outer``."""
    if outer == WILDCARD:
        return True
    if inner == WILDCARD:
        return False
    if inner.endswith(WILDCARD):
        return outer.endswith(WILDCARD) and inner.startswith(outer[:-1])
    return matches(outer, inner)


def _actions_cover(outer: frozenset[str], inner: frozenset[str]) -> bool:
    if WILDCARD in outer:
        return True
    return bool(inner) and WILDCARD not in inner and inner <= outer


def _lint_rule(raw: Mapping[str, Any], perm: Permission, path: str, role: str) -> List[Issue]:
    issues: List[Issue] = []
    rtype = raw.get("type")
    if rtype is not None and rtype not in ("allow", "deny"):
        issues.append(
            _issue("UNKNOWN_TYPE", f"type {rtype!r} is treated as 'allow'", path, role)
        )

    no_actions = not perm.actions or perm.actions == {""}
    if "action" not in raw:
        issues.append(_issue("MISSING_ACTION", "rule has no action", path, role))
    elif no_actions:
        issues.append(
            _issue("EMPTY_ACTION", "action is empty and never matches a request", path, role)
        )
    if perm.is_deny and no_actions:
        issues.append(
            _issue(
                "DENY_WITHOUT_ACTION",
                "deny rule without actions still matches generic ('*' or empty) action "
                "queries and hides every allow rule for this resource there",
                path,
                role,
            )
        )

    resource = raw.get("resource")
    if not isinstance(resource, str) or not resource:
        issues.append(
            _issue("MISSING_RESOURCE", "rule has no resource and never matches", path, role)
        )
    elif WILDCARD in resource[:-1]:
        issues.append(
            _issue(
                "EMBEDDED_WILDCARD",
                f"'*' inside {resource!r} is matched literally; only a trailing '*' is a wildcard",
                path,
                role,
            )
        )
    return issues


def _lint_role(role: str, rules: List[Any]) -> List[Issue]:
    issues: List[Issue] = []
    if not rules:
        issues.append(_issue("EMPTY_ROLE", "role has no rules and denies everything", f"/{role}", role))
        return issues

    parsed: List[Permission] = []
    for idx, raw in enumerate(rules):
        path = f"/{role}/{idx}"
        if raw is None:
            raw = {}
        perm = parse_permission(raw, path=path)
        issues.extend(_lint_rule(raw, perm, path, role))
        if perm in parsed:
            issues.append(
                _issue(
                    "DUPLICATE_RULE",
                    f"same as rule {parsed.index(perm)}",
                    path,
                    role,
                )
            )
        parsed.append(perm)

    denies = [p for p in parsed if p.is_deny]
    for idx, perm in enumerate(parsed):
        if perm.is_deny or not perm.actions:
            continue
        for deny in denies:
            if _pattern_covers(deny.resource, perm.resource) and _actions_cover(
                deny.actions, perm.actions
            ):
                issues.append(
                    _issue(
                        "UNREACHABLE_ALLOW",
                        f"allow rule is fully overridden by deny rule {parsed.index(deny)}",
                        f"/{role}/{idx}",
                        role,
                    )
                )
                break
    return issues


def analyze_roles(doc: Mapping[str, Any]) -> List[Issue]:
    """Return lint issues for a role document.

    Each issue is a dict with ``code``, ``message``, ``path`` and ``role``.
    Raises :class:`~restrbac.core.roles.RoleDefinitionError` when the
    document does not have the role -> list of rules shape.
    """
    parse_role_definitions(doc)
    issues: List[Issue] = []
    for role, rules in doc.items():
        issues.extend(_lint_role(str(role), list(rules or [])))
    return issues


__all__ = ["analyze_roles"]
