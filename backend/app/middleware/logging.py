"""
Notes API — Request Logging Middleware
========================================

What:  One access log line per HTTP request with status and duration.
Why:   Shows which note calls fail and how long the document store round
       trips take.
How:   Measures time around call_next and logs on completion.
When:  After RequestIDMiddleware (uses the request ID for correlation).

Log line:
    2024-01-15T12:00:00 [INFO] notes.access: POST /api/notes 201 12.3ms [a1b2c3d4] from 127.0.0.1

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID
    ❌ Don't log: request bodies (note contents)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("notes.access")

# Polled by probes and browsers; not worth an access line
QUIET_PATH_PREFIXES = ("/health", "/api-docs")

ACCESS_FORMAT = (
    "%(method)s %(path)s %(status)d %(duration_ms).1fms "
    "[%(request_id)s] from %(client_ip)s"
)


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status code, duration and request ID for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(QUIET_PATH_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": path,
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(level_for_status(response.status_code), ACCESS_FORMAT, fields, extra=fields)
        return response
