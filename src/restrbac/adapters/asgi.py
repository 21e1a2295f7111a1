from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, MutableMapping

from ..core.engine import Guard
from ._common import RoleGetter, deny_response, resolve_role

logger = logging.getLogger("restrbac.adapters.asgi")

Scope = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]


class RestRbacMiddleware:
    """Pure ASGI middleware enforcing REST role permissions.

    ``role_getter`` receives the ASGI scope. Every HTTP request is resolved
    through ``guard.authorize_request``; the resulting decision is also
    stored in ``scope["restrbac_decision"]`` for downstream handlers.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        guard: Guard,
        role_getter: RoleGetter,
        add_headers: bool = False,
    ) -> None:
        self.app = app
        self.guard = guard
        self.role_getter = role_getter
        self.add_headers = add_headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        role = resolve_role(self.role_getter, scope)
        decision = self.guard.authorize_request(role, scope.get("method", ""), scope.get("path", ""))
        scope["restrbac_decision"] = decision
        if decision.allowed:
            await self.app(scope, receive, send)
            return

        logger.debug(
            "restrbac: refused %s %s for role %r (%s)",
            scope.get("method"),
            scope.get("path"),
            role,
            decision.reason,
        )
        status, payload, headers = deny_response(decision, self.add_headers)

        from starlette.responses import JSONResponse  # type: ignore[import-not-found]

        res = JSONResponse(payload, status_code=status, headers=headers)
        await res(scope, receive, send)


__all__ = ["RestRbacMiddleware"]
