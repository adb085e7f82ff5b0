"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from pharmapos.api.dependencies import get_app_settings, get_connection_pool
from pharmapos.application.dto.responses import ComponentHealthResponse, HealthResponse
from pharmapos.config import Settings, get_logger
from pharmapos.infrastructure.storage.sqlite import ConnectionPool

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_start_time = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _start_time


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """Service status and uptime; does not touch the database."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        uptime_seconds=_uptime(),
    )


@router.get("/db", response_model=HealthResponse)
async def database_health(
    pool: ConnectionPool = Depends(get_connection_pool),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """
    Database health check.

    Pings through the connection pool and reports latency plus the applied
    schema version. A failing database degrades the service, it is not a 5xx.
    """
    start = time.perf_counter()
    try:
        healthy = await pool.ping()
        latency_ms = (time.perf_counter() - start) * 1000
        database = ComponentHealthResponse(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
            schema_version=await pool.schema_version(),
        )
    except Exception as e:
        logger.warning("database_health_failed", error=str(e))
        database = ComponentHealthResponse(status="unhealthy", error=str(e))

    return HealthResponse(
        status="healthy" if database.status == "healthy" else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        uptime_seconds=_uptime(),
        database=database,
    )
