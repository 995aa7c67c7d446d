"""
Health and metrics endpoints.

  GET /health   -- Liveness probe (always returns 200 if process is alive)
  GET /metrics  -- Classification counters since startup
"""

import logging
import time

from fastapi import APIRouter, Request

from ... import __version__
from ..models.responses import HealthResponse, MetricsResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def liveness(request: Request) -> HealthResponse:
    """Liveness probe -- returns 200 if the process is running."""
    engine = request.app.state.engine
    start_time = getattr(request.app.state, "start_time", time.time())
    return HealthResponse(
        status="healthy",
        version=__version__,
        patterns_registered=len(engine.library),
        uptime_seconds=round(time.time() - start_time, 1),
    )


@router.get("/metrics", response_model=MetricsResponse)
async def metrics(request: Request) -> MetricsResponse:
    """Classification counters since startup."""
    m = request.app.state.metrics
    return MetricsResponse(
        responses_classified=m["responses_classified"],
        non_compliant=m["non_compliant"],
        errors=m["errors"],
    )
