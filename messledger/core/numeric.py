"""Fixed-point rounding rules for ledger quantities and money."""

from decimal import ROUND_HALF_UP, Decimal

QTY_PLACES = 3
MONEY_PLACES = 2

QTY_QUANTUM = Decimal(1).scaleb(-QTY_PLACES)
MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_PLACES)

ZERO_QTY = Decimal("0.000")
ZERO_MONEY = Decimal("0.00")

# Upper bounds for one line. Stored scaled, qty * rate stays near 10^17,
# far enough under the SQLite INTEGER limit for sums over many lots.
MAX_QTY = Decimal("1000000")
MAX_RATE = Decimal("1000000")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a number to Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_qty(value: Decimal | int | float | str) -> Decimal:
    """Round a quantity to 3 fraction digits."""
    return to_decimal(value).quantize(QTY_QUANTUM, rounding=ROUND_HALF_UP)


def round_money(value: Decimal | int | float | str) -> Decimal:
    """Round a rate or amount to 2 fraction digits."""
    return to_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def line_amount(qty: Decimal, rate: Decimal) -> Decimal:
    """Amount of qty units at rate, rounded to cents."""
    return round_money(qty * rate)


def avg_rate(amount: Decimal, qty: Decimal) -> Decimal:
    """Average rate amount/qty; zero when there is no quantity."""
    if qty <= 0:
        return ZERO_MONEY
    return round_money(amount / qty)


def has_places(value: Decimal, places: int) -> bool:
    """True if value is finite and has no more than `places` fraction digits."""
    if not value.is_finite():
        return False
    exponent = value.normalize().as_tuple().exponent
    return isinstance(exponent, int) and exponent >= -places
