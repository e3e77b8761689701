"""Application use cases."""

from messledger.application.use_cases.close_period import ClosePeriodResult, ClosePeriodUseCase
from messledger.application.use_cases.consumption_queries import (
    GetConsumptionUseCase,
    ListConsumptionsUseCase,
)
from messledger.application.use_cases.create_consumption import CreateConsumptionUseCase
from messledger.application.use_cases.create_period import CreatePeriodUseCase
from messledger.application.use_cases.create_receipt import CreateReceiptUseCase
from messledger.application.use_cases.get_period_balances import (
    GetPeriodBalancesUseCase,
    PeriodBalancesResult,
)
from messledger.application.use_cases.lock_period import LockPeriodUseCase
from messledger.application.use_cases.period_queries import GetPeriodUseCase, ListPeriodsUseCase
from messledger.application.use_cases.receipt_queries import (
    GetReceiptUseCase,
    ListReceiptsUseCase,
)
from messledger.application.use_cases.reopen_period import ReopenPeriodUseCase
from messledger.application.use_cases.update_receipt import UpdateReceiptUseCase
from messledger.application.use_cases.void_consumption import VoidConsumptionUseCase
from messledger.application.use_cases.void_receipt import VoidReceiptUseCase

__all__ = [
    # Periods
    "CreatePeriodUseCase",
    "ClosePeriodUseCase",
    "ClosePeriodResult",
    "ReopenPeriodUseCase",
    "LockPeriodUseCase",
    "ListPeriodsUseCase",
    "GetPeriodUseCase",
    # Receipts
    "CreateReceiptUseCase",
    "UpdateReceiptUseCase",
    "VoidReceiptUseCase",
    "ListReceiptsUseCase",
    "GetReceiptUseCase",
    # Consumptions
    "CreateConsumptionUseCase",
    "VoidConsumptionUseCase",
    "ListConsumptionsUseCase",
    "GetConsumptionUseCase",
    # Reports
    "GetPeriodBalancesUseCase",
    "PeriodBalancesResult",
]
