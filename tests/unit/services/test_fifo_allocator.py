"""Tests for FifoAllocator."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from messledger.core.entities.receipt import AvailableLot
from messledger.core.exceptions import InsufficientStockError, ValidationError
from messledger.core.interfaces.ledger_store import ILedgerSession
from messledger.core.services.fifo_allocator import FifoAllocator


def _lot(line_id: int, remaining: str, rate: str, year: int = 2024, month: int = 1):
    return AvailableLot(
        receipt_line_id=line_id,
        receipt_id=line_id,
        item_id=1,
        remaining_qty=Decimal(remaining),
        rate=Decimal(rate),
        period_year=year,
        period_month=month,
    )


@pytest.fixture
def mock_session():
    return AsyncMock(spec=ILedgerSession)


@pytest.fixture
def allocator(mock_session):
    return FifoAllocator(mock_session)


class TestFifoAllocator:
    """Tests for FIFO lot allocation."""

    async def test_single_lot_partial(self, allocator, mock_session):
        mock_session.find_available_lots.return_value = [_lot(1, "100.000", "10.00")]

        intents = await allocator.allocate(1, Decimal("30"))

        assert len(intents) == 1
        assert intents[0].receipt_line_id == 1
        assert intents[0].qty == Decimal("30.000")
        assert intents[0].rate == Decimal("10.00")
        assert intents[0].amount == Decimal("300.00")
        mock_session.set_remaining_qty.assert_awaited_once_with(1, Decimal("70.000"))

    async def test_spans_lots_oldest_first(self, allocator, mock_session):
        mock_session.find_available_lots.return_value = [
            _lot(1, "10.000", "10.00", month=1),
            _lot(2, "10.000", "12.00", month=2),
        ]

        intents = await allocator.allocate(1, Decimal("15.000"))

        assert [(i.receipt_line_id, i.qty) for i in intents] == [
            (1, Decimal("10.000")),
            (2, Decimal("5.000")),
        ]
        assert [i.amount for i in intents] == [Decimal("100.00"), Decimal("60.00")]
        calls = [c.args for c in mock_session.set_remaining_qty.await_args_list]
        assert calls == [(1, Decimal("0.000")), (2, Decimal("5.000"))]

    async def test_exact_depletion_stops_walk(self, allocator, mock_session):
        mock_session.find_available_lots.return_value = [
            _lot(1, "5.000", "1.00"),
            _lot(2, "5.000", "2.00"),
        ]

        intents = await allocator.allocate(1, Decimal("5.000"))

        assert len(intents) == 1
        assert mock_session.set_remaining_qty.await_count == 1

    async def test_quantities_sum_to_request(self, allocator, mock_session):
        mock_session.find_available_lots.return_value = [
            _lot(1, "0.333", "3.00"),
            _lot(2, "0.333", "3.00"),
            _lot(3, "1.000", "3.00"),
        ]

        intents = await allocator.allocate(1, Decimal("1.001"))

        assert sum(i.qty for i in intents) == Decimal("1.001")

    async def test_insufficient_stock_touches_nothing(self, allocator, mock_session):
        mock_session.find_available_lots.return_value = [
            _lot(1, "5.000", "1.00"),
            _lot(2, "2.500", "1.00"),
        ]

        with pytest.raises(InsufficientStockError) as exc_info:
            await allocator.allocate(1, Decimal("10"))

        assert exc_info.value.available == Decimal("7.500")
        assert exc_info.value.requested == Decimal("10.000")
        mock_session.set_remaining_qty.assert_not_awaited()

    async def test_no_lots(self, allocator, mock_session):
        mock_session.find_available_lots.return_value = []

        with pytest.raises(InsufficientStockError):
            await allocator.allocate(1, Decimal("1"))

    @pytest.mark.parametrize("qty", ["0", "-1", "0.0004"])
    async def test_non_positive_quantity_rejected(self, allocator, mock_session, qty):
        with pytest.raises(ValidationError):
            await allocator.allocate(1, Decimal(qty))
        mock_session.find_available_lots.assert_not_awaited()
