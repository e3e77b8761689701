"""
Dependency injection container for FastAPI.

Provides use case instances and request context to route handlers.
"""

from functools import lru_cache

from fastapi import Request

from messledger.application.use_cases import (
    ClosePeriodUseCase,
    CreateConsumptionUseCase,
    CreatePeriodUseCase,
    CreateReceiptUseCase,
    GetConsumptionUseCase,
    GetPeriodBalancesUseCase,
    GetPeriodUseCase,
    GetReceiptUseCase,
    ListConsumptionsUseCase,
    ListPeriodsUseCase,
    ListReceiptsUseCase,
    LockPeriodUseCase,
    ReopenPeriodUseCase,
    UpdateReceiptUseCase,
    VoidConsumptionUseCase,
    VoidReceiptUseCase,
)
from messledger.config import Settings, get_settings


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


def get_actor(request: Request) -> str | None:
    """Acting user name from the configured actor header, if sent."""
    actor = request.headers.get(get_app_settings().api.actor_header, "").strip()
    return actor or None


# Period use cases
def get_create_period_use_case() -> CreatePeriodUseCase:
    return CreatePeriodUseCase()


def get_close_period_use_case() -> ClosePeriodUseCase:
    return ClosePeriodUseCase()


def get_reopen_period_use_case() -> ReopenPeriodUseCase:
    return ReopenPeriodUseCase()


def get_lock_period_use_case() -> LockPeriodUseCase:
    return LockPeriodUseCase()


def get_list_periods_use_case() -> ListPeriodsUseCase:
    return ListPeriodsUseCase()


def get_period_use_case() -> GetPeriodUseCase:
    return GetPeriodUseCase()


# Receipt use cases
def get_create_receipt_use_case() -> CreateReceiptUseCase:
    return CreateReceiptUseCase()


def get_update_receipt_use_case() -> UpdateReceiptUseCase:
    return UpdateReceiptUseCase()


def get_void_receipt_use_case() -> VoidReceiptUseCase:
    return VoidReceiptUseCase()


def get_list_receipts_use_case() -> ListReceiptsUseCase:
    return ListReceiptsUseCase()


def get_receipt_use_case() -> GetReceiptUseCase:
    return GetReceiptUseCase()


# Consumption use cases
def get_create_consumption_use_case() -> CreateConsumptionUseCase:
    return CreateConsumptionUseCase()


def get_void_consumption_use_case() -> VoidConsumptionUseCase:
    return VoidConsumptionUseCase()


def get_list_consumptions_use_case() -> ListConsumptionsUseCase:
    return ListConsumptionsUseCase()


def get_consumption_use_case() -> GetConsumptionUseCase:
    return GetConsumptionUseCase()


# Reports
def get_period_balances_use_case() -> GetPeriodBalancesUseCase:
    return GetPeriodBalancesUseCase()
