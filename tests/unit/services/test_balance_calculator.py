"""Tests for PeriodBalanceCalculator."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from messledger.core.entities.balance import BalanceBucket
from messledger.core.entities.item import Item
from messledger.core.entities.period import Period
from messledger.core.exceptions import PeriodNotFoundError
from messledger.core.interfaces.ledger_store import ILedgerSession
from messledger.core.services.balance_calculator import (
    PeriodBalanceCalculator,
    build_item_balance,
    total_balances,
)


def _bucket(qty: str, amt: str) -> BalanceBucket:
    return BalanceBucket(qty=Decimal(qty), amt=Decimal(amt))


@pytest.fixture
def period():
    return Period.from_code("2024-02", id=2)


@pytest.fixture
def mock_session(period):
    session = AsyncMock(spec=ILedgerSession)
    session.get_period_by_code.return_value = period
    session.list_items.return_value = [
        Item(id=1, name="Oil", uom="l"),
        Item(id=2, name="Rice", uom="kg"),
    ]
    session.aggregate_opening.return_value = {2: _bucket("10", "100.00")}
    session.aggregate_received.return_value = {
        1: _bucket("4", "30.00"),
        2: _bucket("10", "120.00"),
    }
    session.aggregate_consumed_from_opening.return_value = {2: _bucket("10", "100.00")}
    session.aggregate_consumed_from_current.return_value = {
        1: _bucket("1", "7.50"),
        2: _bucket("5", "60.00"),
    }
    return session


class TestBuildItemBalance:
    def test_closing_derived_from_rounded_parts(self):
        balance = build_item_balance(
            item_id=1,
            opening=_bucket("1.0004", "3.333"),
            received=_bucket("2.0004", "6.666"),
            consumed_from_opening=_bucket("0", "0"),
            consumed_from_current=_bucket("0.0004", "1.114"),
        )
        assert balance.opening == _bucket("1.000", "3.33")
        assert balance.received == _bucket("2.000", "6.67")
        assert balance.consumed_from_current == _bucket("0.000", "1.11")
        assert balance.closing == _bucket("3.000", "8.89")
        assert balance.tally_check == Decimal("0")

    def test_empty_item(self):
        empty = BalanceBucket()
        balance = build_item_balance(1, empty, empty, empty, empty)
        assert balance.closing == BalanceBucket()
        assert balance.closing.avg_rate == Decimal("0")


class TestPeriodBalanceCalculator:
    """Tests for the per-item balance computation."""

    async def test_every_active_item_gets_a_row(self, mock_session):
        balances = await PeriodBalanceCalculator(mock_session).compute("2024-02")

        assert [b.item_name for b in balances] == ["Oil", "Rice"]
        mock_session.list_items.assert_awaited_once_with(active_only=True)

    async def test_figures(self, mock_session):
        balances = await PeriodBalanceCalculator(mock_session).compute("2024-02")
        oil, rice = balances

        assert oil.opening == BalanceBucket()
        assert oil.closing == _bucket("3", "22.50")
        assert rice.opening == _bucket("10", "100.00")
        assert rice.consumed_total == _bucket("15", "160.00")
        assert rice.closing == _bucket("5", "60.00")
        assert rice.closing.avg_rate == Decimal("12.00")
        assert all(b.tally_check == 0 for b in balances)

    async def test_totals(self, mock_session):
        balances = await PeriodBalanceCalculator(mock_session).compute("2024-02")

        totals = total_balances(balances)

        assert totals.received == _bucket("14", "150.00")
        assert totals.closing == _bucket("8", "82.50")
        assert totals.tally_check == 0

    async def test_aggregates_use_loaded_period(self, mock_session, period):
        await PeriodBalanceCalculator(mock_session).compute("2024-02")

        mock_session.aggregate_opening.assert_awaited_once_with(period)
        mock_session.aggregate_consumed_from_current.assert_awaited_once_with(period)

    async def test_unknown_period(self, mock_session):
        mock_session.get_period_by_code.return_value = None

        with pytest.raises(PeriodNotFoundError):
            await PeriodBalanceCalculator(mock_session).compute("1999-01")
