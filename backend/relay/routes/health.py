"""
Arduino Relay - Health Check Route
===================================

What:  Health check endpoint for monitoring and container probes.
Why:   The relay is useless if it cannot reach Firebase, even when the
       process itself is up. The check reports that dependency explicitly.
How:   Asks the DataSink for a lightweight health probe.
Who:   Called by Docker health checks, load balancers, and uptime monitors.

Status levels:
    - healthy:   Firebase reachable with the configured credentials (HTTP 200)
    - unhealthy: Firebase unreachable or never configured (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from relay import __version__
from relay.dependencies import get_data_sink
from relay.schemas.ingest import HealthResponse
from relay.services.data_sink import DataSink

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Firebase unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    sink: DataSink = Depends(get_data_sink),
) -> HealthResponse:
    """Probe Firebase and return aggregate status."""
    firebase_status = "connected"
    overall = "healthy"

    if not await sink.health_check():
        firebase_status = "unavailable"
        overall = "unhealthy"
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        firebase=firebase_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
