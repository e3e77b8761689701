"""Tests for CreateConsumptionUseCase."""

from decimal import Decimal

import pytest

from messledger.application.dto.requests import CreateConsumptionRequest
from messledger.application.use_cases.create_consumption import CreateConsumptionUseCase
from messledger.core.entities.consumption import ConsumptionLine
from messledger.core.entities.item import Item
from messledger.core.entities.period import Period, PeriodStatus
from messledger.core.entities.receipt import AvailableLot
from messledger.core.exceptions import (
    InsufficientStockError,
    ItemNotFoundError,
    PeriodNotOpenError,
)


def _lot(line_id: int, remaining: str, rate: str) -> AvailableLot:
    return AvailableLot(
        receipt_line_id=line_id,
        receipt_id=1,
        item_id=1,
        remaining_qty=Decimal(remaining),
        rate=Decimal(rate),
        period_year=2024,
        period_month=1,
    )


@pytest.fixture
def use_case(mock_store):
    return CreateConsumptionUseCase(ledger_store=mock_store)


@pytest.fixture
def open_period(mock_session):
    period = Period.from_code("2024-01", id=1)
    mock_session.get_period_by_code.return_value = period
    mock_session.get_items.return_value = {1: Item(id=1, name="Rice")}
    mock_session.create_consumption.side_effect = lambda c: c.model_copy(update={"id": 10})
    mock_session.add_consumption_line.side_effect = lambda line: line.model_copy(
        update={"id": 20}
    )
    mock_session.add_allocation.side_effect = lambda a: a
    return period


class TestCreateConsumptionUseCase:
    async def test_allocates_each_line(self, use_case, mock_session, open_period):
        mock_session.find_available_lots.return_value = [
            _lot(1, "10.000", "10.00"),
            _lot(2, "10.000", "12.00"),
        ]
        request = CreateConsumptionRequest(
            period_code="2024-01", lines=[{"item_id": 1, "qty": "15"}]
        )

        consumption = await use_case.execute(request, actor="cook")

        assert consumption.id == 10
        assert consumption.created_by == "cook"
        assert consumption.period_code == "2024-01"
        line = consumption.lines[0]
        assert isinstance(line, ConsumptionLine)
        assert line.entered_qty == Decimal("15.000")
        assert [(a.receipt_line_id, a.qty) for a in line.allocations] == [
            (1, Decimal("10.000")),
            (2, Decimal("5.000")),
        ]
        assert consumption.total_amount == Decimal("160.00")
        assert all(a.consumption_line_id == 20 for a in line.allocations)

    async def test_response(self, use_case, mock_session, open_period):
        mock_session.find_available_lots.return_value = [_lot(1, "100", "10.00")]
        request = CreateConsumptionRequest(
            period_code="2024-01", lines=[{"item_id": 1, "qty": "30"}]
        )

        response = use_case.to_response(await use_case.execute(request))

        assert response.total_amount == Decimal("300.00")
        assert response.lines[0].allocations[0].rate == Decimal("10.00")

    async def test_insufficient_stock_propagates(self, use_case, mock_session, open_period):
        mock_session.find_available_lots.return_value = [_lot(1, "5", "10.00")]
        request = CreateConsumptionRequest(
            period_code="2024-01", lines=[{"item_id": 1, "qty": "6"}]
        )

        with pytest.raises(InsufficientStockError):
            await use_case.execute(request)
        mock_session.add_allocation.assert_not_awaited()

    async def test_unknown_item(self, use_case, mock_session, open_period):
        request = CreateConsumptionRequest(
            period_code="2024-01", lines=[{"item_id": 2, "qty": "1"}]
        )

        with pytest.raises(ItemNotFoundError):
            await use_case.execute(request)
        mock_session.create_consumption.assert_not_awaited()

    async def test_closed_period(self, use_case, mock_session):
        mock_session.get_period_by_code.return_value = Period.from_code(
            "2024-01", id=1, status=PeriodStatus.CLOSED
        )
        request = CreateConsumptionRequest(
            period_code="2024-01", lines=[{"item_id": 1, "qty": "1"}]
        )

        with pytest.raises(PeriodNotOpenError):
            await use_case.execute(request)
