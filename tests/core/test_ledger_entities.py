"""Tests for ledger entities."""

from decimal import Decimal

import pytest

from messledger.core.entities import (
    BalanceBucket,
    BalanceFigures,
    Consumption,
    ConsumptionAllocation,
    ConsumptionLine,
    Period,
    PeriodStatus,
    Receipt,
    ReceiptLine,
)
from messledger.core.entities.period import format_period_code, parse_period_code


class TestPeriod:
    """Tests for Period entity."""

    def test_from_code(self):
        period = Period.from_code("2024-01")
        assert period.code == "2024-01"
        assert period.year == 2024
        assert period.month == 1
        assert period.status == PeriodStatus.OPEN
        assert period.is_open

    @pytest.mark.parametrize("code", ["2024-13", "2024-00", "24-01", "2024/01", ""])
    def test_from_code_rejects_malformed(self, code):
        with pytest.raises(ValueError):
            Period.from_code(code)

    def test_parse_and_format(self):
        assert parse_period_code("2023-12") == (2023, 12)
        assert format_period_code(2024, 3) == "2024-03"

    def test_closed_is_not_open(self):
        period = Period.from_code("2024-01", status=PeriodStatus.CLOSED)
        assert not period.is_open


class TestReceiptLine:
    """Tests for ReceiptLine lots."""

    def test_remaining_starts_at_quantity(self):
        line = ReceiptLine(item_id=1, quantity=Decimal("100.000"), rate=Decimal("10.00"))
        assert line.remaining_qty == Decimal("100.000")
        assert line.is_untouched
        assert line.allocated_qty == Decimal("0")

    def test_amount_derived_from_quantity_and_rate(self):
        line = ReceiptLine(item_id=1, quantity=Decimal("2.500"), rate=Decimal("3.33"))
        assert line.amount == Decimal("8.33")

    def test_stored_values_are_kept(self):
        line = ReceiptLine(
            item_id=1,
            quantity=Decimal("10.000"),
            rate=Decimal("2.00"),
            amount=Decimal("20.00"),
            remaining_qty=Decimal("4.000"),
        )
        assert line.remaining_qty == Decimal("4.000")
        assert line.allocated_qty == Decimal("6.000")
        assert not line.is_untouched

    def test_zero_rate_line(self):
        line = ReceiptLine(item_id=1, quantity=Decimal("5.000"), rate=Decimal("0.00"))
        assert line.amount == Decimal("0")


class TestReceipt:
    def test_totals(self):
        receipt = Receipt(
            period_id=1,
            lines=[
                ReceiptLine(item_id=1, quantity=Decimal("10.000"), rate=Decimal("10.00")),
                ReceiptLine(item_id=2, quantity=Decimal("2.500"), rate=Decimal("4.00")),
            ],
        )
        assert receipt.total_quantity == Decimal("12.500")
        assert receipt.total_amount == Decimal("110.00")

    def test_empty_receipt_totals(self):
        receipt = Receipt(period_id=1)
        assert receipt.total_quantity == Decimal("0")
        assert receipt.total_amount == Decimal("0")


class TestConsumption:
    def test_allocations_flatten_lines(self):
        consumption = Consumption(
            period_id=1,
            lines=[
                ConsumptionLine(
                    item_id=1,
                    entered_qty=Decimal("15.000"),
                    allocations=[
                        ConsumptionAllocation(
                            receipt_line_id=1,
                            qty=Decimal("10.000"),
                            rate=Decimal("10.00"),
                            amount=Decimal("100.00"),
                        ),
                        ConsumptionAllocation(
                            receipt_line_id=2,
                            qty=Decimal("5.000"),
                            rate=Decimal("12.00"),
                            amount=Decimal("60.00"),
                        ),
                    ],
                ),
            ],
        )
        assert len(consumption.allocations) == 2
        assert consumption.lines[0].allocated_qty == Decimal("15.000")
        assert consumption.lines[0].amount == Decimal("160.00")
        assert consumption.total_amount == Decimal("160.00")


class TestBalanceBucket:
    def test_avg_rate(self):
        bucket = BalanceBucket(qty=Decimal("4.000"), amt=Decimal("10.00"))
        assert bucket.avg_rate == Decimal("2.50")

    def test_avg_rate_empty(self):
        assert BalanceBucket().avg_rate == Decimal("0")

    def test_arithmetic_rounds(self):
        a = BalanceBucket(qty=Decimal("1.0005"), amt=Decimal("1.005"))
        b = BalanceBucket(qty=Decimal("1.000"), amt=Decimal("1.00"))
        assert (a + b) == BalanceBucket(qty=Decimal("2.001"), amt=Decimal("2.01"))
        assert (a - b).qty == Decimal("0.001")

    def test_rounded(self):
        bucket = BalanceBucket(qty=Decimal("1.23456"), amt=Decimal("9.87654")).rounded()
        assert bucket.qty == Decimal("1.235")
        assert bucket.amt == Decimal("9.88")


class TestBalanceFigures:
    def test_tally_check_zero_when_reconciled(self):
        figures = BalanceFigures(
            opening=BalanceBucket(qty=Decimal("10"), amt=Decimal("100.00")),
            received=BalanceBucket(qty=Decimal("5"), amt=Decimal("60.00")),
            consumed_from_opening=BalanceBucket(qty=Decimal("10"), amt=Decimal("100.00")),
            consumed_from_current=BalanceBucket(qty=Decimal("2"), amt=Decimal("24.00")),
            closing=BalanceBucket(qty=Decimal("3"), amt=Decimal("36.00")),
        )
        assert figures.tally_check == Decimal("0")
        assert figures.consumed_total == BalanceBucket(qty=Decimal("12"), amt=Decimal("124.00"))

    def test_tally_check_reports_difference(self):
        figures = BalanceFigures(
            received=BalanceBucket(qty=Decimal("5"), amt=Decimal("60.00")),
            closing=BalanceBucket(qty=Decimal("5"), amt=Decimal("59.99")),
        )
        assert figures.tally_check == Decimal("0.01")

    def test_sum(self):
        a = BalanceFigures(received=BalanceBucket(qty=Decimal("1"), amt=Decimal("2.00")))
        b = BalanceFigures(received=BalanceBucket(qty=Decimal("3"), amt=Decimal("4.00")))
        assert (a + b).received == BalanceBucket(qty=Decimal("4"), amt=Decimal("6.00"))
