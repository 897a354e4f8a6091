"""
Notes API — Request ID Middleware
===================================

What:  Assigns a short unique ID to each incoming request and returns it in
       the X-Request-ID response header.
Why:   Lets every log line from one request be correlated, and lets clients
       quote the ID when reporting a failure.
How:   Reuses a well-formed client X-Request-ID, else generates one; binds it
       to a ContextVar for the lifetime of the request.
When:  Runs before the logging middleware.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied IDs end up in log lines: accept only short token-like values
_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# ── Context Variable ──────────────────────────────────────────────────────
# Coroutine-local storage: concurrent requests on the same event loop each
# see their own request ID.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(supplied: str) -> str:
    """Return the client's ID if it is well formed, else a fresh 8-char one."""
    if supplied and _ACCEPTED_ID.match(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Resolve the ID (client header or generated)
        2. Bind it to request_id_var and request.state for the request
        3. Echo it back in the X-Request-ID response header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.request_id = resolve_request_id(
            request.headers.get(REQUEST_ID_HEADER, "")
        )
        token = request_id_var.set(request.state.request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response
