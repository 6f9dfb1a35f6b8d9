"""
UserHub Backend — CORS Middleware
===================================

What:  Adds the same CORS headers to every response and answers every
       OPTIONS request directly.
How:   Unlike Starlette's CORSMiddleware, headers do not depend on the
       request carrying an Origin header, and any OPTIONS request (not only
       a well-formed preflight) short-circuits with 200 and an empty body.
       Exceptions that escape the app are turned into the generic 500
       envelope here, since Starlette's ServerErrorMiddleware sits outside
       this middleware and would answer without the headers.

Headers:
    Access-Control-Allow-Origin:  settings.cors_origins (default "*")
    Access-Control-Allow-Methods: GET, POST, PUT, DELETE, OPTIONS
    Access-Control-Allow-Headers: Content-Type
"""

import logging
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from userhub.responses import UNEXPECTED_ERROR_MESSAGE, envelope_response

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOWED_HEADERS = "Content-Type"


class CORSMiddleware(BaseHTTPMiddleware):
    """Uniform CORS headers plus OPTIONS short-circuit."""

    def __init__(self, app: ASGIApp, allow_origin: str = "*"):
        super().__init__(app)
        self.headers: Dict[str, str] = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        }

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=self.headers)

        try:
            response = await call_next(request)
        except Exception as e:
            # Set by RequestIDMiddleware on the shared request state
            rid = getattr(request.state, "request_id", "")
            logger.error("[%s] Unexpected error: %s", rid, e, exc_info=True)
            response = envelope_response(500, UNEXPECTED_ERROR_MESSAGE)
            if rid:
                response.headers["X-Request-ID"] = rid

        response.headers.update(self.headers)
        return response
