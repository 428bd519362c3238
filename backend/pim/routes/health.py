"""
PIM Backend — Health Check Route
=================================

What:  GET /health for container and load balancer probes.
How:   Runs SELECT 1 through the application's Database.

    healthy:   database reachable (HTTP 200)
    unhealthy: database unreachable (HTTP 503)

No authentication; the response carries no user data.
"""

import logging
import time

from fastapi import APIRouter, Request, Response, status

from pim import __version__
from pim.database import Database
from pim.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    database: Database = request.app.state.database
    db_status = "connected"
    overall = "healthy"

    try:
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
