"""Consumption entities and their FIFO allocations."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from messledger.core.numeric import ZERO_MONEY, round_qty


class AllocationIntent(BaseModel):
    """How much of a consumption line the allocator drew from one lot."""

    receipt_line_id: int
    qty: Decimal
    rate: Decimal
    amount: Decimal


class ConsumptionAllocation(BaseModel):
    """Persisted link between a consumption line and a receipt line."""

    id: int | None = None
    consumption_line_id: int | None = None
    receipt_line_id: int
    qty: Decimal
    rate: Decimal
    amount: Decimal
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ConsumptionLine(BaseModel):
    """Quantity of one item consumed; split across lots by allocations."""

    id: int | None = None
    consumption_id: int | None = None
    item_id: int
    entered_qty: Decimal
    allocations: list[ConsumptionAllocation] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def allocated_qty(self) -> Decimal:
        return round_qty(sum((a.qty for a in self.allocations), Decimal(0)))

    @property
    def amount(self) -> Decimal:
        return sum((a.amount for a in self.allocations), ZERO_MONEY)


class Consumption(BaseModel):
    """Header of a consumption recorded in a period."""

    id: int | None = None
    period_id: int
    period_code: str | None = None
    notes: str | None = None
    is_void: bool = False
    void_reason: str | None = None
    voided_at: datetime | None = None
    voided_by: str | None = None
    created_by: str | None = None
    lines: list[ConsumptionLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def allocations(self) -> list[ConsumptionAllocation]:
        return [a for line in self.lines for a in line.allocations]

    @property
    def total_amount(self) -> Decimal:
        return sum((line.amount for line in self.lines), ZERO_MONEY)
