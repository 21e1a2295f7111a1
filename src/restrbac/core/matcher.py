from __future__ import annotations

from collections.abc import Collection

from .model import WILDCARD, Permission


def matches(pattern: str, resource: str) -> bool:
    """Match a resource pattern against a concrete resource name.

    ``"*"`` matches anything, a pattern ending in ``"*"`` matches by prefix,
    anything else must be equal. Only a single trailing wildcard is honoured.
    """
    if pattern == WILDCARD:
        return True
    if pattern == resource:
        return True
    if pattern.endswith(WILDCARD):
        return resource.startswith(pattern[:-1])
    return False


def action_matches(actions: Collection[str], action: str) -> bool:
    # empty or "*" requests are generic "any access" queries
    if action == "" or action == WILDCARD:
        return True
    return WILDCARD in actions or action in actions


def rule_matches(permission: Permission, action: str, resource: str) -> bool:
    if not matches(permission.resource, resource):
        return False
    return action_matches(permission.actions, action)


__all__ = ["matches", "action_matches", "rule_matches"]
