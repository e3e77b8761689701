"""Period balance entities."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from messledger.core.numeric import ZERO_MONEY, ZERO_QTY, avg_rate, round_money, round_qty


class BalanceBucket(BaseModel):
    """A quantity and its value."""

    qty: Decimal = ZERO_QTY
    amt: Decimal = ZERO_MONEY

    @property
    def avg_rate(self) -> Decimal:
        return avg_rate(self.amt, self.qty)

    def rounded(self) -> "BalanceBucket":
        return BalanceBucket(qty=round_qty(self.qty), amt=round_money(self.amt))

    def __add__(self, other: "BalanceBucket") -> "BalanceBucket":
        return BalanceBucket(
            qty=round_qty(self.qty + other.qty), amt=round_money(self.amt + other.amt)
        )

    def __sub__(self, other: "BalanceBucket") -> "BalanceBucket":
        return BalanceBucket(
            qty=round_qty(self.qty - other.qty), amt=round_money(self.amt - other.amt)
        )


class BalanceFigures(BaseModel):
    """Opening, received, consumed and closing buckets."""

    opening: BalanceBucket = Field(default_factory=BalanceBucket)
    received: BalanceBucket = Field(default_factory=BalanceBucket)
    consumed_from_opening: BalanceBucket = Field(default_factory=BalanceBucket)
    consumed_from_current: BalanceBucket = Field(default_factory=BalanceBucket)
    closing: BalanceBucket = Field(default_factory=BalanceBucket)

    @property
    def consumed_total(self) -> BalanceBucket:
        return self.consumed_from_opening + self.consumed_from_current

    @property
    def tally_check(self) -> Decimal:
        """(opening + received) - (consumed + closing) in amount; zero when reconciled."""
        gross = self.opening.amt + self.received.amt
        out = self.consumed_from_opening.amt + self.consumed_from_current.amt + self.closing.amt
        return round_money(gross - out)

    def __add__(self, other: "BalanceFigures") -> "BalanceFigures":
        return BalanceFigures(
            opening=self.opening + other.opening,
            received=self.received + other.received,
            consumed_from_opening=self.consumed_from_opening + other.consumed_from_opening,
            consumed_from_current=self.consumed_from_current + other.consumed_from_current,
            closing=self.closing + other.closing,
        )


class ItemBalance(BalanceFigures):
    """Balance figures of one item in one period."""

    item_id: int
    item_name: str = ""
    uom: str = ""


class PeriodItemBalance(ItemBalance):
    """Balance row frozen when a period is closed."""

    id: int | None = None
    period_id: int
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
