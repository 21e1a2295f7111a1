from __future__ import annotations

from typing import Optional

from .model import RequestTarget
from .ports import RequestConvention

_METHOD_ACTIONS = {
    "POST": "create",
    "PUT": "edit",
    "PATCH": "edit",
    "DELETE": "delete",
}


def resolve_action(method: str, has_identifier: bool) -> str:
    """Map an HTTP method to a semantic action.

    Returns ``""`` for methods the REST convention does not cover (HEAD,
    OPTIONS, ...); callers must reject those requests outright.
    """
    if method == "GET":
        return "show" if has_identifier else "list"
    return _METHOD_ACTIONS.get(method, "")


def split_path(path: str) -> tuple[str, Optional[str]]:
    """Return ``(resource, identifier)`` from the first two path segments.

    ``/posts/1/comments`` gives ``("posts", "1")``; ``/`` gives ``("", None)``.
    """
    parts = path.strip("/").split("/")
    resource = parts[0]
    identifier = parts[1] if len(parts) > 1 and parts[1] else None
    return resource, identifier


class RestConvention(RequestConvention):
    """``/<resource>[/<identifier>[/...]]`` paths with CRUD-style methods."""

    def resolve(self, method: str, path: str) -> RequestTarget:
        resource, identifier = split_path(path)
        if not resource:
            return RequestTarget()
        return RequestTarget(
            resource=resource,
            identifier=identifier,
            action=resolve_action(method, identifier is not None),
        )


__all__ = ["resolve_action", "split_path", "RestConvention"]
