"""API tests for the period item balances report."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from messledger.api.dependencies import get_period_balances_use_case
from messledger.api.main import app
from messledger.application.use_cases import GetPeriodBalancesUseCase, PeriodBalancesResult
from messledger.core.entities.balance import BalanceBucket
from messledger.core.entities.period import Period
from messledger.core.exceptions import BalanceSnapshotNotFoundError
from messledger.core.services.balance_calculator import build_item_balance


@pytest.fixture
def balances_use_case():
    rice = build_item_balance(
        item_id=1,
        item_name="Rice",
        uom="kg",
        opening=BalanceBucket(),
        received=BalanceBucket(qty=Decimal("100"), amt=Decimal("1000.00")),
        consumed_from_opening=BalanceBucket(),
        consumed_from_current=BalanceBucket(),
    )
    result = PeriodBalancesResult(
        period=Period.from_code("2024-01", id=1), source="live", balances=[rice]
    )
    uc = AsyncMock(spec=GetPeriodBalancesUseCase)
    uc.execute.return_value = result
    uc.to_response.return_value = GetPeriodBalancesUseCase().to_response(result)
    return uc


@pytest.fixture
async def client(balances_use_case):
    app.dependency_overrides[get_period_balances_use_case] = lambda: balances_use_case
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_period_balances_use_case, None)


class TestPeriodItemBalancesAPI:
    async def test_live_report(self, client: AsyncClient, balances_use_case):
        response = await client.get(
            "/api/reports/period-item-balances", params={"period": "2024-01"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "2024-01"
        assert data["source"] == "live"
        rice = data["balances"][0]
        assert rice["item_name"] == "Rice"
        assert Decimal(rice["received"]["qty"]) == Decimal("100")
        assert Decimal(rice["consumed"]["total"]["amt"]) == Decimal("0")
        assert Decimal(rice["closing"]["avg_rate"]) == Decimal("10.00")
        assert Decimal(rice["tally_check"]) == Decimal("0")
        assert Decimal(data["totals"]["gross_total"]) == Decimal("1000.00")
        balances_use_case.execute.assert_awaited_once_with("2024-01", "live")

    async def test_snapshot_source_is_passed(self, client: AsyncClient, balances_use_case):
        await client.get(
            "/api/reports/period-item-balances",
            params={"period": "2024-01", "source": "snapshot"},
        )

        balances_use_case.execute.assert_awaited_once_with("2024-01", "snapshot")

    async def test_unknown_source_is_422(self, client: AsyncClient):
        response = await client.get(
            "/api/reports/period-item-balances",
            params={"period": "2024-01", "source": "cached"},
        )

        assert response.status_code == 422

    async def test_snapshot_of_open_period_is_404(self, client: AsyncClient, balances_use_case):
        balances_use_case.execute.side_effect = BalanceSnapshotNotFoundError("2024-01")

        response = await client.get(
            "/api/reports/period-item-balances",
            params={"period": "2024-01", "source": "snapshot"},
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "BALANCE_SNAPSHOT_NOT_FOUND"
