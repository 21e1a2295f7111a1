from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .model import RequestTarget


@runtime_checkable
class RoleSource(Protocol):
    """Where a role document comes from (file, S3, ...)."""

    def load(self) -> Dict[str, Any]: ...

    def etag(self) -> Optional[str]: ...


@runtime_checkable
class RequestConvention(Protocol):
    """Maps an HTTP method and path to the resource/action being requested."""

    def resolve(self, method: str, path: str) -> RequestTarget: ...


@runtime_checkable
class DecisionLogSink(Protocol):
    def log(self, payload: Dict[str, Any]) -> None: ...


@runtime_checkable
class MetricsSink(Protocol):
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...


@runtime_checkable
class MetricsObserve(Protocol):
    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None: ...


__all__ = ["RoleSource", "RequestConvention", "DecisionLogSink", "MetricsSink", "MetricsObserve"]
