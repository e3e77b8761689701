"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
Ledger numbers are Decimal and serialize to JSON strings, so no
precision is lost on the wire.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field


class PeriodResponse(BaseModel):
    """Accounting period."""

    id: int
    code: str = Field(..., description="Period code YYYY-MM")
    year: int
    month: int
    status: str = Field(..., description="OPEN, CLOSED or LOCKED")
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    closed_by: str | None = None
    locked_at: datetime | None = None
    locked_by: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class PeriodListResponse(BaseModel):
    """Periods, newest first."""

    periods: list[PeriodResponse]
    total: int


class ClosePeriodResponse(BaseModel):
    """Result of closing a period."""

    period: PeriodResponse
    balances_saved: int = Field(..., description="Item balance rows frozen for the period")


class ReceiptLineResponse(BaseModel):
    """Received lot."""

    id: int
    item_id: int
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    remaining_qty: Decimal = Field(..., description="Quantity still available for FIFO")
    lot_no: str | None = None


class ReceiptResponse(BaseModel):
    """Goods receipt with its lines."""

    id: int
    period_code: str | None = None
    ref_no: str | None = None
    notes: str | None = None
    is_void: bool = False
    void_reason: str | None = None
    voided_at: datetime | None = None
    voided_by: str | None = None
    created_by: str | None = None
    total_quantity: Decimal
    total_amount: Decimal
    lines: list[ReceiptLineResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ReceiptListResponse(BaseModel):
    """Receipts of a period."""

    receipts: list[ReceiptResponse]
    total: int


class AllocationResponse(BaseModel):
    """Part of a consumption line drawn from one lot."""

    id: int | None = None
    receipt_line_id: int
    qty: Decimal
    rate: Decimal
    amount: Decimal


class ConsumptionLineResponse(BaseModel):
    """Consumed item with its FIFO allocations."""

    id: int
    item_id: int
    entered_qty: Decimal
    amount: Decimal
    allocations: list[AllocationResponse] = Field(default_factory=list)


class ConsumptionResponse(BaseModel):
    """Consumption with lines and allocations."""

    id: int
    period_code: str | None = None
    notes: str | None = None
    is_void: bool = False
    void_reason: str | None = None
    voided_at: datetime | None = None
    voided_by: str | None = None
    created_by: str | None = None
    total_amount: Decimal
    lines: list[ConsumptionLineResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ConsumptionListResponse(BaseModel):
    """Consumptions of a period."""

    consumptions: list[ConsumptionResponse]
    total: int


class BucketResponse(BaseModel):
    """Quantity, amount and average rate of one balance bucket."""

    qty: Decimal
    amt: Decimal
    avg_rate: Decimal


class ConsumedResponse(BaseModel):
    """Consumption split by lot origin."""

    from_opening: BucketResponse
    from_current: BucketResponse
    total: BucketResponse


class BalanceFiguresResponse(BaseModel):
    """Opening, received, consumed and closing buckets with the tally check."""

    opening: BucketResponse
    received: BucketResponse
    consumed: ConsumedResponse
    closing: BucketResponse
    gross_total: Decimal = Field(..., description="opening.amt + received.amt")
    tally_check: Decimal = Field(..., description="Zero when the item reconciles")


class ItemBalanceResponse(BalanceFiguresResponse):
    """Balance figures of one item."""

    item_id: int
    item_name: str
    uom: str


class PeriodBalancesResponse(BaseModel):
    """Item balances of a period."""

    period: str
    status: str
    source: Literal["live", "snapshot"]
    balances: list[ItemBalanceResponse]
    totals: BalanceFiguresResponse


class ComponentHealthResponse(BaseModel):
    """Health of a dependency."""

    name: str
    healthy: bool
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - details: context fields the caller can act on (item_id, available, ...)
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    details: dict[str, Any] = Field(default_factory=dict, description="Error context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
