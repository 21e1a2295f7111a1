import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, MutableMapping, cast

if TYPE_CHECKING:

    class _BaseMiddleware: ...

else:
    try:
        from litestar.middleware import (
            ASGIMiddleware as _BaseMiddleware,  # type: ignore[import-not-found]
        )
    except Exception:  # pragma: no cover
        try:
            from litestar.middleware import (
                AbstractMiddleware as _BaseMiddleware,  # type: ignore[import-not-found]
            )
        except Exception:  # pragma: no cover
            _BaseMiddleware = object  # type: ignore[assignment]

from ..core.engine import Guard
from ._common import RoleGetter, deny_response, resolve_role

logger = logging.getLogger(__name__)

_ASGIScope = MutableMapping[str, Any]
_ASGIReceive = Callable[[], Awaitable[MutableMapping[str, Any]]]
_ASGISend = Callable[[MutableMapping[str, Any]], Awaitable[None]]


class RestRbacMiddleware(_BaseMiddleware):
    """Litestar middleware enforcing REST role permissions.

    Built on ``ASGIMiddleware`` (Litestar >= 2.15), falling back to
    ``AbstractMiddleware`` on older releases.

    Register with ``DefineMiddleware(RestRbacMiddleware, guard=..., role_getter=...)``.
    ``role_getter`` receives the ASGI scope.
    """

    def __init__(
        self,
        app: Any,
        *,
        guard: Guard,
        role_getter: RoleGetter,
        add_headers: bool = False,
    ) -> None:
        # AbstractMiddleware takes app in __init__; ASGIMiddleware and object do not
        try:
            super().__init__(app=app)  # type: ignore[call-arg]
        except TypeError:
            self.app = app

        self.guard = guard
        self.role_getter = role_getter
        self.add_headers = add_headers

    async def _dispatch(self, scope: Any, receive: Any, send: Any, app: Any) -> None:
        if scope.get("type") != "http":
            await app(scope, receive, send)
            return

        role = resolve_role(self.role_getter, scope)
        decision = self.guard.authorize_request(role, scope.get("method", ""), scope.get("path", ""))
        if decision.allowed:
            await app(scope, receive, send)
            return

        logger.debug("restrbac: refused role %r (%s)", role, decision.reason)
        status, payload, headers = deny_response(decision, self.add_headers)

        from starlette.responses import JSONResponse  # type: ignore[import-not-found]

        res = JSONResponse(payload, status_code=status, headers=headers)
        await res(
            cast(_ASGIScope, scope), cast(_ASGIReceive, receive), cast(_ASGISend, send)
        )

    # ASGIMiddleware entry point
    async def handle(self, scope: Any, receive: Any, send: Any, next_app: Any) -> None:
        await self._dispatch(scope, receive, send, next_app)

    # AbstractMiddleware and DefineMiddleware entry point
    async def __call__(self, scope: Any, receive: Any, send: Any) -> None:
        await self._dispatch(scope, receive, send, self.app)


__all__ = ["RestRbacMiddleware"]
