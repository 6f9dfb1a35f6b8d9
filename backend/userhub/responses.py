"""
UserHub Backend — Envelope Responses
======================================

What:  Builds the JSON response for every endpoint and error handler.
How:   Wraps the payload as {success, code, message, data}, encodes it with
       FastAPI's jsonable_encoder and sets the HTTP status to the same code.
       If encoding fails, a fixed 500 envelope is returned instead.
"""

import logging
from typing import Any, Mapping, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

ENCODE_FAILURE_BODY = {
    "success": False,
    "code": 500,
    "message": "Failed to encode response",
    "data": None,
}


def envelope_response(
    code: int,
    message: str,
    data: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    """
    Return a JSONResponse carrying the envelope for `code`.

    success is derived from the status class (2xx/3xx); failures never carry
    a payload.
    """
    success = code < 400
    body = {
        "success": success,
        "code": code,
        "message": message,
        "data": data if success else None,
    }
    try:
        return JSONResponse(
            status_code=code,
            content=jsonable_encoder(body),
            headers=dict(headers) if headers else None,
        )
    except (TypeError, ValueError) as e:
        logger.error("Failed to encode %d response: %s", code, e, exc_info=True)
        return JSONResponse(status_code=500, content=ENCODE_FAILURE_BODY)
