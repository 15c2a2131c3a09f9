"""
Notes Backend - Health Check Route
===================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the application's engine.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from notesapp import __version__
from notesapp.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Process start, for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    """
    Probe the database with a trivial query.

    Why lightweight:
        Health checks run every 10-30 seconds; SELECT 1 is essentially free.
    """
    db_status = "connected"
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    healthy = db_status == "connected"
    body = HealthResponse(
        success=healthy,
        status="healthy" if healthy else "unhealthy",
        message="Server is running!" if healthy else "Database unreachable",
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    if healthy:
        return body
    return JSONResponse(status_code=503, content=body.model_dump())
