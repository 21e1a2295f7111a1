from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from ..core.model import REASON_UNSUPPORTED_METHOD, Decision

# Returns the caller's role name for a request (or ASGI scope); None means anonymous.
RoleGetter = Callable[[Any], Optional[str]]

REASON_HEADER = "X-RestRBAC-Reason"


def deny_response(decision: Decision, add_headers: bool) -> Tuple[int, Dict[str, str], Dict[str, str]]:
    """Status code, JSON payload and headers for a refused request.

    Unsupported methods answer 405; unknown roles and denials answer 403.
    """
    if decision.reason == REASON_UNSUPPORTED_METHOD:
        status, detail = 405, "Method Not Allowed"
    else:
        status, detail = 403, "Forbidden"
    headers: Dict[str, str] = {}
    if add_headers:
        headers[REASON_HEADER] = decision.reason
    return status, {"detail": detail}, headers


def resolve_role(role_getter: RoleGetter, request: Any) -> str:
    # an anonymous caller is looked up as "" and ends up unknown_role
    return role_getter(request) or ""


__all__ = ["RoleGetter", "REASON_HEADER", "deny_response", "resolve_role"]
