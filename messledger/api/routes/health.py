"""Liveness and database health endpoints."""

import time

from fastapi import APIRouter

from messledger.application.dto.responses import ComponentHealthResponse, HealthResponse
from messledger.config import get_logger, get_settings
from messledger.infrastructure.storage.sqlite import get_ledger_store

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _health(database: ComponentHealthResponse | None = None) -> HealthResponse:
    healthy = database is None or database.healthy
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.monotonic() - _started_at,
        database=database,
    )


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return _health()


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Read the open period on a snapshot to prove the ledger database answers."""
    started = time.perf_counter()
    try:
        store = await get_ledger_store()
        async with store.snapshot() as session:
            open_period = await session.get_open_period()
    except Exception as e:
        logger.warning("db_health_failed", error=str(e))
        return _health(ComponentHealthResponse(name="sqlite", healthy=False, error=str(e)))

    return _health(
        ComponentHealthResponse(
            name="sqlite",
            healthy=True,
            latency_ms=(time.perf_counter() - started) * 1000,
            details={"open_period": open_period.code if open_period else None},
        )
    )
