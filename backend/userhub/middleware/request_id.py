"""
UserHub Backend — Request ID Middleware
=========================================

What:  Assigns a correlation ID to each request and returns it in X-Request-ID.
How:   Uses the client-provided X-Request-ID when present, otherwise a short
       UUID; stores it in a ContextVar so loggers and exception handlers can
       include it.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Reuse the client's X-Request-ID header if sent
        2. Otherwise generate an 8-character UUID prefix
        3. Store in request_id_var and request.state.request_id
        4. Echo it on the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
