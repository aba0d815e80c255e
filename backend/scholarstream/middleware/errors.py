"""
Scholar Stream Backend: Error Envelope & Unhandled Error Middleware
====================================================================

What:  Builds the JSON error body shared by every failure response, and
       turns exceptions no handler claimed into the 500 envelope.
When:  Innermost middleware (added first), so CORS, RequestID and the
       access log still wrap the 500 it returns.

Envelope:
    {"error": "<code>", "message": "<text>", "request_id": "<id>"[, "details": {...}]}
"""

import logging
from typing import Any, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from scholarstream.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."


def error_response(
    status_code: int, error: str, message: str, details: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def unexpected_error_response() -> JSONResponse:
    return error_response(500, "internal_server_error", UNEXPECTED_ERROR_MESSAGE)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Catches what the registered exception handlers let through.

    The stack trace goes to the log only; the client sees the generic
    message and the request id.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                str(e),
                exc_info=True,
            )
            return unexpected_error_response()
