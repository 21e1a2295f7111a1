from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.ports import MetricsSink

try:
    from opentelemetry.metrics import get_meter  # type: ignore
except Exception:  # pragma: no cover
    get_meter = None  # type: ignore


class OpenTelemetryMetrics(MetricsSink):
    """OpenTelemetry-based MetricsSink.

    Creates:
      - Counter: restrbac_decisions_total (attribute: decision)
      - Histogram: restrbac_decision_seconds (unit: s)
    """

    _counter: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, meter_name: str = "restrbac.metrics") -> None:
        self._counter = None
        self._hist = None

        if get_meter is None:  # pragma: no cover
            return

        meter = get_meter(meter_name)
        try:
            self._counter = meter.create_counter(
                name="restrbac_decisions_total",
                description="Total restrbac decisions by reason.",
            )
        except Exception:  # pragma: no cover
            self._counter = None

        try:
            self._hist = meter.create_histogram(
                name="restrbac_decision_seconds",
                description="restrbac decision evaluation duration in seconds.",
                unit="s",
            )
        except Exception:  # pragma: no cover
            self._hist = None

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        if self._counter is None:
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.add(1, {"decision": decision})
        except Exception:  # pragma: no cover
            pass

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:
            return
        try:
            self._hist.record(float(value), dict(labels or {}))
        except Exception:  # pragma: no cover
            pass


__all__ = ["OpenTelemetryMetrics"]
