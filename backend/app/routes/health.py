"""
Notes API — Health Check Route
================================

What:  Health check endpoint for monitoring probes.
Why:   The service starts even when the document store is unreachable, so a
       process-level probe alone cannot tell whether requests will succeed.
How:   Pings the store through the gateway and reports the result.
Who:   Called by container health checks and monitoring systems.

Status levels:
    - healthy:   Document store reachable
    - unhealthy: Document store unreachable (note endpoints will return 500)

The endpoint itself always answers 200 so the process stays probeable.
"""

import logging
import time

from fastapi import APIRouter, Depends

from app import __version__
from app.database import NoteGateway, get_gateway
from app.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns service status and document store connectivity.",
)
async def health_check(gateway: NoteGateway = Depends(get_gateway)) -> HealthResponse:
    """
    Check the health of the service and its document store.

    Check details:
        Document store: `ping` admin command; bounded by the driver's
        server selection timeout.
    """
    if await gateway.ping():
        db_status, overall = "connected", "healthy"
    else:
        db_status, overall = "disconnected", "unhealthy"
        logger.warning("Health check: document store unreachable")

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
