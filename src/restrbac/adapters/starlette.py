from __future__ import annotations

import inspect
from typing import Any, Callable, Optional

try:
    from starlette.concurrency import run_in_threadpool  # type: ignore[import-not-found]
    from starlette.responses import JSONResponse  # type: ignore[import-not-found]
except Exception as e:  # pragma: no cover
    raise ImportError(
        "restrbac.adapters.starlette requires starlette. "
        "Install with: pip install restrbac[adapters]"
    ) from e

from ..core.engine import Guard
from ._common import RoleGetter, deny_response, resolve_role


def require_access(
    guard: Guard,
    role_getter: RoleGetter,
    add_headers: bool = False,
) -> Callable[..., Any]:
    """
    Starlette adapter that works both:
      - as a decorator on an endpoint (returns an async endpoint)
      - as a dependency-like callable: ``await require_access(...)(request)``
        returns a denial response or None.

    The resource and action come from ``request.method`` and ``request.url.path``.
    """

    async def _dependency(request: Any) -> Optional[JSONResponse]:
        role = resolve_role(role_getter, request)
        decision = guard.authorize_request(role, request.method, request.url.path)
        request.state.restrbac_decision = decision
        if decision.allowed:
            return None
        status, payload, headers = deny_response(decision, add_headers)
        return JSONResponse(payload, status_code=status, headers=headers)

    def _decorator_or_dependency(arg: Any) -> Any:
        if not callable(arg):
            return _dependency(arg)

        handler = arg
        if inspect.iscoroutinefunction(handler):

            async def _endpoint_async(request: Any) -> Any:
                deny = await _dependency(request)
                if deny is not None:
                    return deny
                return await handler(request)

            return _endpoint_async

        async def _endpoint_sync(request: Any) -> Any:
            deny = await _dependency(request)
            if deny is not None:
                return deny
            return await run_in_threadpool(handler, request)

        return _endpoint_sync

    return _decorator_or_dependency


__all__ = ["require_access"]
