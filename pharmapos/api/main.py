"""
FastAPI application factory.

Creates and configures the PharmaPOS application instance.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmapos.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from pharmapos.api.middleware.error_handler import setup_exception_handlers
from pharmapos.api.routes import (
    activity_router,
    credit_notes_router,
    health_router,
    invoices_router,
    pricing_router,
    products_router,
    refresh_router,
    reports_router,
    sales_router,
)
from pharmapos.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


async def _prepare_database() -> None:
    """Migrate, check required tables, then open the pool."""
    from pharmapos.infrastructure.storage.sqlite import get_pool
    from pharmapos.infrastructure.storage.sqlite.migrations.migrator import (
        run_migrations,
        verify_schema_integrity,
    )

    results = await run_migrations()
    failed = [r.version for r in results if not r.success]
    if failed:
        raise RuntimeError(f"Migrations failed: {', '.join(failed)}")
    logger.info("database_migrated", applied=[r.version for r in results])

    for check in await verify_schema_integrity():
        if check["status"] != "PASS":
            logger.warning("schema_check_failed", **check)

    pool = await get_pool()
    logger.info("connection_pool_ready", db_path=str(pool.db_path), pool_size=pool.pool_size)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Prepare storage on startup and release it on shutdown."""
    settings = get_settings()
    configure_logging()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        vat_rate=settings.pricing.default_vat_rate,
        minimum_margin_percent=settings.pricing.minimum_margin_percent,
    )

    # Stock writes are serialized by an in-process lock
    workers = int(os.environ.get("WEB_CONCURRENCY", "1"))
    if workers > 1:
        logger.warning("multiple_workers_unsafe_for_stock", workers=workers)

    try:
        await _prepare_database()
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    logger.info("application_started")

    yield

    logger.info("application_stopping")

    from pharmapos.application.services import reset_services
    from pharmapos.infrastructure.storage.sqlite import close_pool, reset_record_store

    try:
        await close_pool()
    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))
    reset_record_store()
    reset_services()

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title="PharmaPOS API",
        description="Pharmacy inventory, supplier invoices, credit notes and point of sale",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Last added runs first: errors are caught outside request logging
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    for router in (
        health_router,
        pricing_router,
        products_router,
        invoices_router,
        credit_notes_router,
        sales_router,
        activity_router,
        reports_router,
        refresh_router,
    ):
        app.include_router(router)

    return app


app = create_app()


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "healthy"}
