"""
Scholar Stream Backend: Request Logging Middleware
===================================================

What:  One access-log line per HTTP request: method, path, status,
       duration, request id, client address and (when authenticated) the
       caller's email.
When:  Runs inside RequestIDMiddleware, so the request id is already set.

Log line:
    PATCH /application/65f.../status 200 12.4ms [a1b2c3d4] from 10.0.0.7 user=mod@example.com

Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
GET /health is not logged.

Not logged: request bodies and the Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from scholarstream.middleware.request_id import request_id_var

logger = logging.getLogger("scholarstream.access")

SKIP_PATHS = frozenset({"/health"})


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request after the response is produced.

    The caller email comes from `request.state.user`, which the auth
    dependency sets once the bearer token is verified.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        user = getattr(request.state, "user", None) or {}
        email = user.get("email", "-")

        logger.log(
            _status_level(status),
            "%s %s %d %.1fms [%s] from %s user=%s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            email,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
