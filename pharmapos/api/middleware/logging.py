"""
Request logging middleware.

Every request gets a short id that is bound into structlog's context, so
the saga and use case events logged while serving it carry the same id.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from pharmapos.config import get_logger, get_settings

logger = get_logger(__name__)

# Polled constantly by clients and load balancers
QUIET_PATHS = ("/health", "/api/health", "/api/refresh")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log request start, completion and timing; flag slow requests."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        path = request.url.path
        log = logger.debug if path.startswith(QUIET_PATHS) else logger.info
        start = time.perf_counter()

        log(
            "request_started",
            method=request.method,
            path=path,
            client=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=path,
                error=str(e),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms > get_settings().api.slow_request_ms:
            log = logger.warning

        log(
            "request_completed",
            method=request.method,
            path=path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
