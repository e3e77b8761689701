"""Mess ledger HTTP application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from messledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from messledger.api.middleware.error_handler import setup_exception_handlers
from messledger.api.routes import (
    consumptions_router,
    health_router,
    periods_router,
    receipts_router,
    reports_router,
)
from messledger.config import configure_logging, get_logger, get_settings
from messledger.infrastructure.storage.sqlite import close_pool, get_pool
from messledger.infrastructure.storage.sqlite.migrations import (
    initialize_database,
    verify_schema_integrity,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Migrate the ledger database and open the pool; close it on shutdown.

    Failed integrity checks are logged but do not stop the server, so an
    operator can still read the ledger and void the offending entries.
    """
    settings = get_settings()
    logger.info(
        "application_starting",
        db_path=str(settings.storage.db_path),
        environment=settings.environment,
    )

    results = await initialize_database()
    if not all(r.success for r in results):
        failed = [r.version for r in results if not r.success]
        logger.error("database_migration_failed", versions=failed)
        raise RuntimeError(f"Ledger migrations failed: {', '.join(failed)}")

    checks = await verify_schema_integrity()
    if any(c["status"] != "PASS" for c in checks):
        logger.warning("ledger_integrity_degraded_at_startup")

    pool = await get_pool()
    logger.info("application_started", pool_size=pool.pool_size, migrations_applied=len(results))

    yield

    await close_pool()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the FastAPI app with middleware, error handlers and ledger routers."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Monthly stores ledger with FIFO lot costing and period close",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*", settings.api.actor_header],
            expose_headers=["X-Request-ID", "X-Response-Time"],
        )

    setup_exception_handlers(app)

    for router in (
        health_router,
        periods_router,
        receipts_router,
        consumptions_router,
        reports_router,
    ):
        app.include_router(router)

    # Liveness probe outside /api
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
