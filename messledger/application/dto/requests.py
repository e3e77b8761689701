"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
Malformed input is rejected here, before any transaction starts.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from messledger.core.numeric import MAX_QTY, MAX_RATE, MONEY_PLACES, QTY_PLACES, has_places

PERIOD_CODE_PATTERN = r"^\d{4}-\d{2}$"


def _check_places(value: Decimal, places: int) -> Decimal:
    if not has_places(value, places):
        raise ValueError(f"must be a finite number with at most {places} decimal places")
    return value


class CreatePeriodRequest(BaseModel):
    """Request to open a new accounting period."""

    code: str = Field(
        ...,
        pattern=PERIOD_CODE_PATTERN,
        description="Period code YYYY-MM",
        examples=["2024-01"],
    )


class ReceiptLineRequest(BaseModel):
    """One received lot."""

    item_id: int = Field(..., gt=0, description="Item ID")
    quantity: Decimal = Field(..., gt=0, le=MAX_QTY, description="Quantity received (3 decimals)")
    rate: Decimal = Field(..., ge=0, le=MAX_RATE, description="Rate per unit (2 decimals)")
    lot_no: str | None = Field(default=None, max_length=255, description="Supplier lot number")

    @field_validator("quantity")
    @classmethod
    def quantity_places(cls, v: Decimal) -> Decimal:
        return _check_places(v, QTY_PLACES)

    @field_validator("rate")
    @classmethod
    def rate_places(cls, v: Decimal) -> Decimal:
        return _check_places(v, MONEY_PLACES)


class CreateReceiptRequest(BaseModel):
    """Request to record goods received in a period."""

    period_code: str = Field(..., pattern=PERIOD_CODE_PATTERN, examples=["2024-01"])
    ref_no: str | None = Field(default=None, max_length=255, description="Invoice or GRN number")
    notes: str | None = Field(default=None, description="Free text notes")
    lines: list[ReceiptLineRequest] = Field(..., min_length=1)


class UpdateReceiptRequest(BaseModel):
    """Header fields of a receipt that may change. Lines are immutable."""

    ref_no: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None)


class ConsumptionLineRequest(BaseModel):
    """Quantity of one item consumed."""

    item_id: int = Field(..., gt=0, description="Item ID")
    qty: Decimal = Field(..., gt=0, le=MAX_QTY, description="Quantity consumed (3 decimals)")

    @field_validator("qty")
    @classmethod
    def qty_places(cls, v: Decimal) -> Decimal:
        return _check_places(v, QTY_PLACES)


class CreateConsumptionRequest(BaseModel):
    """Request to record consumption in a period, allocated FIFO."""

    period_code: str = Field(..., pattern=PERIOD_CODE_PATTERN, examples=["2024-01"])
    notes: str | None = Field(default=None)
    lines: list[ConsumptionLineRequest] = Field(..., min_length=1)


class VoidRequest(BaseModel):
    """Request to void a receipt or consumption."""

    reason: str = Field(default="", max_length=500, description="Why the entry is voided")
