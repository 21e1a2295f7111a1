from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Tuple

from .convention import RestConvention
from .matcher import rule_matches
from .model import (
    REASON_EXPLICIT_DENY,
    REASON_MATCHED,
    REASON_NO_MATCH,
    REASON_NO_RESOURCE,
    REASON_UNKNOWN_ROLE,
    REASON_UNSUPPORTED_METHOD,
    Decision,
    Permission,
    RoleDefinitions,
)
from .ports import DecisionLogSink, MetricsObserve, MetricsSink, RequestConvention
from .roles import parse_role_definitions

logger = logging.getLogger("restrbac.engine")


def _scan(
    rules: Sequence[Permission], action: str, resource: str
) -> Tuple[bool, str, Optional[int]]:
    # Deny pass first: any matching deny wins wherever it sits in the list.
    for idx, rule in enumerate(rules):
        if rule.is_deny and rule_matches(rule, action, resource):
            return False, REASON_EXPLICIT_DENY, idx
    for idx, rule in enumerate(rules):
        if not rule.is_deny and rule_matches(rule, action, resource):
            return True, REASON_MATCHED, idx
    return False, REASON_NO_MATCH, None


def can_access(rules: Sequence[Permission], action: str, resource: str) -> bool:
    """Decide whether ``rules`` grant ``action`` on ``resource``.

    Deny rules are checked before allow rules, and nothing matching means
    deny. An empty rule list therefore denies everything.
    """
    allowed, _, _ = _scan(rules, action, resource)
    return allowed


class Guard:
    """Holds the current role snapshot and answers access questions.

    The snapshot is swapped by reference in :meth:`set_roles`; readers take
    no lock and always see one complete snapshot.
    """

    def __init__(
        self,
        roles: Mapping[str, Any] | RoleDefinitions | None = None,
        *,
        convention: RequestConvention | None = None,
        metrics: MetricsSink | None = None,
        logger_sink: DecisionLogSink | None = None,
    ) -> None:
        self.convention: RequestConvention = convention or RestConvention()
        self.metrics = metrics
        self.logger_sink = logger_sink
        self._lock = threading.RLock()
        self._roles: RoleDefinitions = parse_role_definitions(roles or {})

    # ------------------------------------------------------------------ roles

    @property
    def roles(self) -> RoleDefinitions:
        return self._roles

    def set_roles(self, roles: Mapping[str, Any] | RoleDefinitions) -> None:
        """Parse ``roles`` and publish them as the new snapshot.

        Raises :class:`~restrbac.core.roles.RoleDefinitionError` on a
        malformed document, in which case the current snapshot is kept.
        """
        snapshot = parse_role_definitions(roles)
        with self._lock:
            self._roles = snapshot
        logger.debug("restrbac: published %d role(s)", len(snapshot))

    # -------------------------------------------------------------- decisions

    def evaluate(
        self,
        role: str,
        action: str,
        resource: str,
        identifier: Optional[str] = None,
    ) -> Decision:
        start = time.perf_counter()
        roles = self._roles
        rules = roles.get(role)
        if rules is None:
            logger.warning("restrbac: role not found: %s", role)
            decision = Decision(
                allowed=False,
                reason=REASON_UNKNOWN_ROLE,
                role=role,
                action=action,
                resource=resource,
                identifier=identifier,
            )
        else:
            allowed, reason, idx = _scan(rules, action, resource)
            decision = Decision(
                allowed=allowed,
                reason=reason,
                role=role,
                action=action,
                resource=resource,
                identifier=identifier,
                rule_index=idx,
            )
        self._emit(decision, time.perf_counter() - start)
        return decision

    def is_allowed(self, role: str, action: str, resource: str) -> bool:
        return self.evaluate(role, action, resource).allowed

    def authorize_request(self, role: str, method: str, path: str) -> Decision:
        """Run the full request flow: resolve the path, then decide.

        Paths without a resource are let through unchecked; methods the
        convention cannot map are refused without consulting the rules.
        """
        target = self.convention.resolve(method, path)
        if not target.resource:
            return Decision(allowed=True, reason=REASON_NO_RESOURCE, role=role)
        if not target.action:
            decision = Decision(
                allowed=False,
                reason=REASON_UNSUPPORTED_METHOD,
                role=role,
                resource=target.resource,
                identifier=target.identifier,
            )
            self._emit(decision, None)
            return decision
        return self.evaluate(role, target.action, target.resource, target.identifier)

    # ---------------------------------------------------------------- sinks

    def _emit(self, decision: Decision, elapsed: float | None) -> None:
        if self.logger_sink is not None:
            payload = {
                "role": decision.role,
                "action": decision.action,
                "resource": decision.resource,
                "identifier": decision.identifier,
                "decision": decision.effect,
                "allowed": decision.allowed,
                "reason": decision.reason,
                "rule_index": decision.rule_index,
            }
            try:
                self.logger_sink.log(payload)
            except Exception:
                logger.exception("restrbac: decision logging failed")

        if self.metrics is not None:
            labels = {"decision": decision.reason}
            try:
                self.metrics.inc("restrbac_decisions_total", labels)
                if elapsed is not None and isinstance(self.metrics, MetricsObserve):
                    self.metrics.observe("restrbac_decision_seconds", elapsed, labels)
            except Exception:
                logger.exception("restrbac: metrics sink failed")


__all__ = ["can_access", "Guard"]
