"""
Fixed-point column encoding.

SQLite has no exact decimal type, so ledger numbers are stored as scaled
integers: quantities in thousandths, rates and amounts in hundredths.
Sums over these columns stay exact integers. A quantity times a rate
lands at scale 10^5.
"""

from decimal import Decimal

from messledger.core.numeric import MONEY_PLACES, QTY_PLACES, round_money, round_qty

QTY_RATE_PLACES = QTY_PLACES + MONEY_PLACES


def qty_to_db(value: Decimal) -> int:
    return int(round_qty(value).scaleb(QTY_PLACES))


def qty_from_db(value: int | None) -> Decimal:
    return round_qty(Decimal(value or 0).scaleb(-QTY_PLACES))


def money_to_db(value: Decimal) -> int:
    return int(round_money(value).scaleb(MONEY_PLACES))


def money_from_db(value: int | None) -> Decimal:
    return round_money(Decimal(value or 0).scaleb(-MONEY_PLACES))


def qty_rate_from_db(value: int | None) -> Decimal:
    """Decode SUM(qty * rate). Returned unrounded; callers round to cents."""
    return Decimal(value or 0).scaleb(-QTY_RATE_PLACES)
