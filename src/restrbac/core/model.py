from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Optional

WILDCARD = "*"

EFFECT_ALLOW = "allow"
EFFECT_DENY = "deny"

# Decision reasons
REASON_MATCHED = "matched"
REASON_EXPLICIT_DENY = "explicit_deny"
REASON_NO_MATCH = "no_match"
REASON_UNKNOWN_ROLE = "unknown_role"
REASON_UNSUPPORTED_METHOD = "unsupported_method"
REASON_NO_RESOURCE = "no_resource"


@dataclass(frozen=True)
class Permission:
    """A single allow/deny rule over a set of actions and a resource pattern."""

    effect: str = EFFECT_ALLOW
    actions: frozenset[str] = frozenset()
    resource: str = ""

    @property
    def is_deny(self) -> bool:
        return self.effect == EFFECT_DENY


RoleDefinition = tuple[Permission, ...]


class RoleDefinitions(Mapping[str, RoleDefinition]):
    """Read-only mapping of role name to its ordered rules.

    Instances are snapshots: they are built once per configuration load and
    replaced wholesale on reload, never patched.
    """

    __slots__ = ("_roles",)

    def __init__(self, roles: Mapping[str, RoleDefinition] | None = None) -> None:
        self._roles = MappingProxyType({name: tuple(rules) for name, rules in (roles or {}).items()})

    def __getitem__(self, name: str) -> RoleDefinition:
        return self._roles[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    def __repr__(self) -> str:
        return f"RoleDefinitions({sorted(self._roles)!r})"


@dataclass(frozen=True)
class RequestTarget:
    """What a request path/method resolves to.

    An empty ``resource`` means the path targets no protected resource; an
    empty ``action`` means the method is not supported by the convention.
    """

    resource: str = ""
    identifier: Optional[str] = None
    action: str = ""


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str
    role: Optional[str] = None
    action: str = ""
    resource: str = ""
    identifier: Optional[str] = None
    rule_index: Optional[int] = None

    @property
    def effect(self) -> str:
        return EFFECT_ALLOW if self.allowed else EFFECT_DENY
