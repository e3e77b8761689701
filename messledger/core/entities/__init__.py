"""Core domain entities."""

from messledger.core.entities.balance import (
    BalanceBucket,
    BalanceFigures,
    ItemBalance,
    PeriodItemBalance,
)
from messledger.core.entities.consumption import (
    AllocationIntent,
    Consumption,
    ConsumptionAllocation,
    ConsumptionLine,
)
from messledger.core.entities.item import Item
from messledger.core.entities.period import (
    Period,
    PeriodStatus,
    format_period_code,
    parse_period_code,
)
from messledger.core.entities.receipt import AvailableLot, Receipt, ReceiptLine

__all__ = [
    # Items and periods
    "Item",
    "Period",
    "PeriodStatus",
    "parse_period_code",
    "format_period_code",
    # Receipts
    "Receipt",
    "ReceiptLine",
    "AvailableLot",
    # Consumptions
    "Consumption",
    "ConsumptionLine",
    "ConsumptionAllocation",
    "AllocationIntent",
    # Balances
    "BalanceBucket",
    "BalanceFigures",
    "ItemBalance",
    "PeriodItemBalance",
]
