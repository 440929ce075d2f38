"""
Koalab Backend: Health Check Route
===================================

What:  GET /health for container health checks and load balancer probes.
How:   Runs SELECT 1 against the store. The identity verifier is a third-party
       service and is not probed.

Status levels:
    healthy:   store reachable (HTTP 200)
    unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text

from koalab import __version__
from koalab.context import AppContext, get_context
from koalab.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    response: Response,
    context: AppContext = Depends(get_context),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with context.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
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
