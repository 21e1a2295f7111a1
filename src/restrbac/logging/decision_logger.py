from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict

from ..core.ports import DecisionLogSink

_TEXT_FIELDS = ("role", "action", "resource", "identifier", "reason", "rule_index")


class DecisionLogger(DecisionLogSink):
    """Audit sink that writes one line per decision to the ``restrbac.audit`` logger.

    - ``sample_rate`` keeps that fraction of decisions (1.0 logs everything).
    - ``always_log_deny`` bypasses sampling for denied requests.
    - ``as_json`` emits the payload as a JSON object instead of
      ``Access granted role=... action=...`` text.
    """

    def __init__(
        self,
        *,
        sample_rate: float = 1.0,
        level: int = logging.INFO,
        as_json: bool = False,
        always_log_deny: bool = False,
        logger_name: str = "restrbac.audit",
    ) -> None:
        self.sample_rate = max(0.0, min(1.0, float(sample_rate)))
        self.level = level
        self.as_json = as_json
        self.always_log_deny = always_log_deny
        self.logger = logging.getLogger(logger_name)

    def _sampled(self, payload: Dict[str, Any]) -> bool:
        if self.always_log_deny and not payload.get("allowed", False):
            return True
        if self.sample_rate >= 1.0:
            return True
        if self.sample_rate <= 0.0:
            return False
        return random.random() < self.sample_rate

    def _format(self, payload: Dict[str, Any]) -> str:
        if self.as_json:
            return json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str)
        head = "Access granted" if payload.get("allowed") else "Access denied"
        fields = " ".join(
            f"{name}={payload[name]}" for name in _TEXT_FIELDS if payload.get(name) is not None
        )
        return f"{head} {fields}" if fields else head

    def log(self, payload: Dict[str, Any]) -> None:
        if not self._sampled(payload):
            return
        self.logger.log(self.level, self._format(payload))


__all__ = ["DecisionLogger"]
