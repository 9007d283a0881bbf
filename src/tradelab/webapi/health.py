"""Health check endpoints for the messages proxy."""

import time

from fastapi import APIRouter, Response, status

from ..config.logging import get_logger
from ..config.settings import get_settings
from ..ormdb.database import check_database_health
from .models.responses import HealthResponse, ProbeResponse

logger = get_logger(__name__)
router = APIRouter()

# Track application start time for uptime calculation
_app_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Basic Health Check")
async def basic_health_check() -> HealthResponse:
    """Report that the proxy is up. Does not contact the oracle."""
    return HealthResponse()


@router.get("/health/live", response_model=ProbeResponse, summary="Liveness Probe")
async def liveness_probe() -> ProbeResponse:
    """Returns 200 while the application can serve requests."""
    return ProbeResponse(status="alive", uptime_seconds=time.time() - _app_start_time)


@router.get("/health/ready", response_model=ProbeResponse, summary="Readiness Probe")
async def readiness_probe(response: Response) -> ProbeResponse:
    """
    Ready when the document store answers and the oracle key is configured.
    Otherwise answers 503.
    """
    db_health = check_database_health()
    credential = bool(get_settings().anthropic_api_key)
    services = {
        "database": db_health,
        "oracle_credential": {"status": "healthy" if credential else "not_configured"},
    }

    if db_health["status"] != "healthy":
        reason = "Database not healthy"
    elif not credential:
        reason = "Anthropic API key not configured"
    else:
        return ProbeResponse(
            status="ready",
            uptime_seconds=time.time() - _app_start_time,
            services=services,
        )

    logger.warning("Readiness probe failed", reason=reason)
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ProbeResponse(status="not_ready", reason=reason, services=services)
