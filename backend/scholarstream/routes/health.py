"""
Scholar Stream Backend: Liveness & Health Routes
=================================================

What:  `GET /` answers with a fixed plain-text string (process is up).
       `GET /health` additionally pings MongoDB.
Who:   Load balancers, container health checks, uptime monitors.

Status levels:
    healthy:    store answered the ping (HTTP 200)
    unhealthy:  store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from scholarstream import __version__
from scholarstream.database import MongoStore, get_store
from scholarstream.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

LIVENESS_TEXT = "Scholar Stream Server is okay!"

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness probe")
async def root() -> str:
    return LIVENESS_TEXT


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Document store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response, store: MongoStore = Depends(get_store)) -> HealthResponse:
    """
    Ping the document store and report aggregate status with uptime.

    A failed ping is reported, not raised: the body is still a HealthResponse.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await store.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
