from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.ports import MetricsSink

try:
    from prometheus_client import Counter, Histogram  # type: ignore
except Exception:  # pragma: no cover
    Counter = Histogram = None  # type: ignore

logger = logging.getLogger("restrbac.metrics")


class PrometheusMetrics(MetricsSink):
    """Decision counter and latency histogram on a Prometheus registry.

    ``restrbac_decisions_total`` is labelled with the decision reason
    (``matched``, ``explicit_deny``, ``no_match``, ...). Without
    ``prometheus_client`` installed the sink records nothing.
    """

    _counter: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, *, namespace: str = "", registry: Any | None = None) -> None:
        self._counter = self._hist = None
        if Counter is None or Histogram is None:  # pragma: no cover
            return

        opts: Dict[str, Any] = {"namespace": namespace}
        if registry is not None:
            opts["registry"] = registry
        self._counter = Counter(
            "restrbac_decisions_total",
            "Access decisions by reason.",
            labelnames=("decision",),
            **opts,
        )
        self._hist = Histogram(
            "restrbac_decision_seconds",
            "Time spent deciding one request.",
            **opts,
        )

    # both instruments are fixed, so the metric name argument is not used
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        if self._counter is None:
            return
        try:
            self._counter.labels(decision=(labels or {}).get("decision", "unknown")).inc()
        except Exception:  # pragma: no cover
            logger.debug("restrbac: prometheus counter update failed", exc_info=True)

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:
            return
        try:
            self._hist.observe(float(value))
        except Exception:  # pragma: no cover
            logger.debug("restrbac: prometheus histogram update failed", exc_info=True)


__all__ = ["PrometheusMetrics"]
