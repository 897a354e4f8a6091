"""
Notes API — Permissive CORS Middleware
========================================

What:  Adds cross-origin headers to every response and answers preflight
       requests directly.
Why:   The API is meant to be called from any browser origin. Starlette's
       CORSMiddleware only decorates requests that carry an Origin header
       and only answers preflights that carry Access-Control-Request-Method;
       this service sends the headers unconditionally.
How:   OPTIONS requests on any path get an empty 200 without reaching the
       router. All other responses get the headers appended on the way out.
When:  Outermost application middleware (added last in create_app).
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Origin, X-Requested-With, Content-Type, Accept",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}


class CORSMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. OPTIONS (any path): respond 200 with an empty body and CORS headers
        2. Anything else: dispatch normally, then set CORS headers on the response
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
