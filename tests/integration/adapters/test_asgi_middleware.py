import json

import pytest

pytest.importorskip("starlette")

from restrbac.adapters.asgi import RestRbacMiddleware
from restrbac.core.engine import Guard

ROLES = {
    "editor": [
        {"action": ["list", "show", "create"], "resource": "posts"},
        {"type": "deny", "action": "create", "resource": "posts"},
    ]
}


async def ok_app(scope, receive, send):
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"OK"})


def _role_from_header(scope):
    for name, value in scope.get("headers", []):
        if name == b"x-role":
            return value.decode()
    return None


async def _call(mw, method, path, role=None, scope_type="http"):
    sent = []
    headers = [(b"x-role", role.encode())] if role else []
    scope = {"type": scope_type, "method": method, "path": path, "headers": headers}

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        sent.append(message)

    await mw(scope, receive, send)
    start = next(m for m in sent if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
    return start["status"], dict(start["headers"]), body, scope


@pytest.mark.asyncio
async def test_allowed_request_reaches_app():
    mw = RestRbacMiddleware(ok_app, guard=Guard(ROLES), role_getter=_role_from_header)
    status, _, body, scope = await _call(mw, "GET", "/posts/1", role="editor")
    assert status == 200 and body == b"OK"
    assert scope["restrbac_decision"].action == "show"


@pytest.mark.asyncio
async def test_denied_request_gets_403():
    mw = RestRbacMiddleware(
        ok_app, guard=Guard(ROLES), role_getter=_role_from_header, add_headers=True
    )
    status, headers, body, _ = await _call(mw, "POST", "/posts", role="editor")
    assert status == 403
    assert json.loads(body) == {"detail": "Forbidden"}
    assert headers[b"x-restrbac-reason"] == b"explicit_deny"


@pytest.mark.asyncio
async def test_unknown_or_missing_role_gets_403():
    mw = RestRbacMiddleware(ok_app, guard=Guard(ROLES), role_getter=_role_from_header)
    status, headers, _, scope = await _call(mw, "GET", "/posts")
    assert status == 403
    assert b"x-restrbac-reason" not in headers
    assert scope["restrbac_decision"].reason == "unknown_role"


@pytest.mark.asyncio
async def test_unsupported_method_gets_405():
    mw = RestRbacMiddleware(ok_app, guard=Guard(ROLES), role_getter=_role_from_header)
    status, _, body, _ = await _call(mw, "HEAD", "/posts", role="editor")
    assert status == 405
    assert json.loads(body) == {"detail": "Method Not Allowed"}


@pytest.mark.asyncio
async def test_root_path_bypasses_authorization():
    mw = RestRbacMiddleware(ok_app, guard=Guard({}), role_getter=_role_from_header)
    status, _, _, _ = await _call(mw, "GET", "/")
    assert status == 200


@pytest.mark.asyncio
async def test_non_http_scope_passes_through():
    seen = {}

    async def app(scope, receive, send):
        seen["type"] = scope["type"]

    mw = RestRbacMiddleware(app, guard=Guard({}), role_getter=_role_from_header)
    await mw({"type": "lifespan"}, None, None)
    assert seen["type"] == "lifespan"
