"""Receipt entities: goods received into stock, one lot per line."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from messledger.core.numeric import ZERO_MONEY, line_amount, round_qty


class ReceiptLine(BaseModel):
    """A lot: quantity of one item received at one rate.

    quantity never changes after creation; remaining_qty is what is still
    available for FIFO allocation and always stays within [0, quantity].
    """

    id: int | None = None
    receipt_id: int | None = None
    item_id: int
    quantity: Decimal
    rate: Decimal
    amount: Decimal = ZERO_MONEY
    remaining_qty: Decimal | None = None
    lot_no: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def model_post_init(self, __context) -> None:
        if self.remaining_qty is None:
            self.remaining_qty = self.quantity
        if self.amount == ZERO_MONEY and self.quantity and self.rate:
            self.amount = line_amount(self.quantity, self.rate)

    @property
    def allocated_qty(self) -> Decimal:
        """Quantity currently drawn from this lot by active consumptions."""
        return round_qty(self.quantity - (self.remaining_qty or 0))

    @property
    def is_untouched(self) -> bool:
        return self.remaining_qty == self.quantity


class Receipt(BaseModel):
    """Header of a goods receipt recorded in a period."""

    id: int | None = None
    period_id: int
    period_code: str | None = None
    ref_no: str | None = None
    notes: str | None = None
    is_void: bool = False
    void_reason: str | None = None
    voided_at: datetime | None = None
    voided_by: str | None = None
    created_by: str | None = None
    lines: list[ReceiptLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def total_quantity(self) -> Decimal:
        return round_qty(sum((line.quantity for line in self.lines), Decimal(0)))

    @property
    def total_amount(self) -> Decimal:
        return sum((line.amount for line in self.lines), ZERO_MONEY)


class AvailableLot(BaseModel):
    """A receipt line with stock left, as seen by the FIFO allocator."""

    receipt_line_id: int
    receipt_id: int
    item_id: int
    remaining_qty: Decimal
    rate: Decimal
    period_year: int
    period_month: int
