"""
Scholar Stream Backend: Request ID Middleware
==============================================

What:  Assigns a short correlation id to each request and echoes it back in
       the `X-Request-ID` response header.
How:   Reuses the client's `X-Request-ID` when it is a short token of letters,
       digits, `.`, `_` or `-` (at most 64 characters), otherwise takes the
       first 8 characters of a UUID4. The client value ends up in log lines
       and error bodies, hence the restriction. The id is stored in a
       ContextVar (read by the access log and the exception handlers) and on
       `request.state`.
When:  First middleware in the chain.
"""

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Coroutine-local: concurrent requests share a thread but not this value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CLIENT_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(client_value: Optional[str]) -> str:
    """Client id when it is well formed, a fresh one otherwise."""
    if client_value and CLIENT_REQUEST_ID.fullmatch(client_value):
        return client_value
    rid = new_request_id()
    if client_value:
        logger.debug("Replaced malformed X-Request-ID (%d chars) with %s", len(client_value), rid)
    return rid


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take a well-formed X-Request-ID from the request, or generate one
        2. Store it in `request_id_var` and `request.state.request_id`
        3. Copy it onto the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID"))

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
