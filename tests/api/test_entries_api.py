"""API tests for receipt and consumption endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from messledger.api.dependencies import (
    get_consumption_use_case,
    get_create_consumption_use_case,
    get_create_receipt_use_case,
    get_list_receipts_use_case,
    get_update_receipt_use_case,
    get_void_consumption_use_case,
    get_void_receipt_use_case,
)
from messledger.api.main import app
from messledger.application.use_cases import (
    CreateConsumptionUseCase,
    CreateReceiptUseCase,
    GetConsumptionUseCase,
    ListReceiptsUseCase,
    UpdateReceiptUseCase,
    VoidConsumptionUseCase,
    VoidReceiptUseCase,
)
from messledger.core.entities import (
    Consumption,
    ConsumptionAllocation,
    ConsumptionLine,
    Receipt,
    ReceiptLine,
)
from messledger.core.exceptions import (
    ConsumptionNotFoundError,
    InsufficientStockError,
    ItemNotFoundError,
    PartiallyConsumedError,
)


def _mock_use_case(use_case_cls, result):
    uc = AsyncMock(spec=use_case_cls)
    uc.execute.return_value = result
    uc.to_response.return_value = use_case_cls().to_response(result)
    return uc


def _provide(uc):
    return lambda: uc


@pytest.fixture
def receipt():
    return Receipt(
        id=1,
        period_id=1,
        period_code="2024-01",
        ref_no="GRN-1",
        lines=[
            ReceiptLine(
                id=1,
                receipt_id=1,
                item_id=1,
                quantity=Decimal("100.000"),
                rate=Decimal("10.00"),
                remaining_qty=Decimal("70.000"),
            )
        ],
    )


@pytest.fixture
def consumption():
    return Consumption(
        id=1,
        period_id=1,
        period_code="2024-01",
        lines=[
            ConsumptionLine(
                id=1,
                consumption_id=1,
                item_id=1,
                entered_qty=Decimal("30.000"),
                allocations=[
                    ConsumptionAllocation(
                        id=1,
                        consumption_line_id=1,
                        receipt_line_id=1,
                        qty=Decimal("30.000"),
                        rate=Decimal("10.00"),
                        amount=Decimal("300.00"),
                    )
                ],
            )
        ],
    )


@pytest.fixture
def use_cases(receipt, consumption):
    voided_receipt = receipt.model_copy(update={"is_void": True, "void_reason": "dup"})
    voided_consumption = consumption.model_copy(update={"is_void": True})
    return {
        get_create_receipt_use_case: _mock_use_case(CreateReceiptUseCase, receipt),
        get_list_receipts_use_case: _mock_use_case(ListReceiptsUseCase, [receipt]),
        get_update_receipt_use_case: _mock_use_case(UpdateReceiptUseCase, receipt),
        get_void_receipt_use_case: _mock_use_case(VoidReceiptUseCase, voided_receipt),
        get_create_consumption_use_case: _mock_use_case(CreateConsumptionUseCase, consumption),
        get_consumption_use_case: _mock_use_case(GetConsumptionUseCase, consumption),
        get_void_consumption_use_case: _mock_use_case(
            VoidConsumptionUseCase, voided_consumption
        ),
    }


@pytest.fixture
async def client(use_cases):
    for dependency, uc in use_cases.items():
        app.dependency_overrides[dependency] = _provide(uc)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in use_cases:
        app.dependency_overrides.pop(dependency, None)


class TestReceiptsAPI:
    async def test_create_returns_201(self, client: AsyncClient, use_cases):
        response = await client.post(
            "/api/receipts",
            json={
                "period_code": "2024-01",
                "lines": [{"item_id": 1, "quantity": "100", "rate": "10.00"}],
            },
            headers={"X-Actor": "clerk"},
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["total_amount"]) == Decimal("1000.00")
        assert Decimal(data["lines"][0]["remaining_qty"]) == Decimal("70.000")
        request, actor = use_cases[get_create_receipt_use_case].execute.call_args[0]
        assert request.lines[0].quantity == Decimal("100")
        assert actor == "clerk"

    @pytest.mark.parametrize(
        "line",
        [
            {"item_id": 1, "quantity": "0", "rate": "1"},
            {"item_id": 1, "quantity": "1.0001", "rate": "1"},
            {"item_id": 1, "quantity": "1", "rate": "1.001"},
            {"item_id": 1, "quantity": "1", "rate": "-1"},
            {"item_id": 1, "quantity": "100000000000000000000", "rate": "10.00"},
            {"item_id": 1, "quantity": "1", "rate": "1000000.01"},
        ],
    )
    async def test_bad_line_is_422(self, client: AsyncClient, use_cases, line):
        response = await client.post(
            "/api/receipts", json={"period_code": "2024-01", "lines": [line]}
        )

        assert response.status_code == 422
        use_cases[get_create_receipt_use_case].execute.assert_not_awaited()

    async def test_empty_lines_is_422(self, client: AsyncClient):
        response = await client.post("/api/receipts", json={"period_code": "2024-01", "lines": []})

        assert response.status_code == 422

    async def test_unknown_item_is_404(self, client: AsyncClient, use_cases):
        use_cases[get_create_receipt_use_case].execute.side_effect = ItemNotFoundError([9])

        response = await client.post(
            "/api/receipts",
            json={"period_code": "2024-01", "lines": [{"item_id": 9, "quantity": "1", "rate": "1"}]},
        )

        assert response.status_code == 404
        assert response.json()["details"] == {"item_ids": [9]}

    async def test_list_requires_period(self, client: AsyncClient):
        response = await client.get("/api/receipts")

        assert response.status_code == 422

    async def test_list_passes_include_void(self, client: AsyncClient, use_cases):
        response = await client.get("/api/receipts", params={"period": "2024-01", "include_void": "true"})

        assert response.status_code == 200
        use_cases[get_list_receipts_use_case].execute.assert_awaited_once_with("2024-01", True)

    async def test_patch(self, client: AsyncClient, use_cases):
        response = await client.patch("/api/receipts/1", json={"notes": "late"})

        assert response.status_code == 200
        receipt_id, request = use_cases[get_update_receipt_use_case].execute.call_args[0]
        assert receipt_id == 1
        assert request.model_fields_set == {"notes"}

    async def test_void(self, client: AsyncClient):
        response = await client.post("/api/receipts/1/void", json={"reason": "dup"})

        assert response.status_code == 200
        assert response.json()["is_void"] is True

    async def test_void_consumed_receipt_is_400(self, client: AsyncClient, use_cases):
        use_cases[get_void_receipt_use_case].execute.side_effect = PartiallyConsumedError(1, [1])

        response = await client.post("/api/receipts/1/void", json={"reason": "dup"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "PARTIALLY_CONSUMED"


class TestConsumptionsAPI:
    async def test_create_returns_allocations(self, client: AsyncClient):
        response = await client.post(
            "/api/consumptions",
            json={"period_code": "2024-01", "lines": [{"item_id": 1, "qty": "30"}]},
        )

        assert response.status_code == 201
        allocation = response.json()["lines"][0]["allocations"][0]
        assert allocation["receipt_line_id"] == 1
        assert Decimal(allocation["qty"]) == Decimal("30")
        assert Decimal(allocation["amount"]) == Decimal("300.00")

    async def test_oversized_qty_is_422(self, client: AsyncClient, use_cases):
        response = await client.post(
            "/api/consumptions",
            json={"period_code": "2024-01", "lines": [{"item_id": 1, "qty": "100000000000000000000"}]},
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert any("qty" in error for error in data["details"]["errors"])
        use_cases[get_create_consumption_use_case].execute.assert_not_awaited()

    async def test_insufficient_stock_is_409(self, client: AsyncClient, use_cases):
        use_cases[get_create_consumption_use_case].execute.side_effect = InsufficientStockError(
            1, Decimal("500.000"), Decimal("70.000")
        )

        response = await client.post(
            "/api/consumptions",
            json={"period_code": "2024-01", "lines": [{"item_id": 1, "qty": "500"}]},
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "INSUFFICIENT_STOCK"
        assert data["details"] == {"item_id": 1, "requested": "500.000", "available": "70.000"}

    async def test_get_missing_is_404(self, client: AsyncClient, use_cases):
        use_cases[get_consumption_use_case].execute.side_effect = ConsumptionNotFoundError(42)

        response = await client.get("/api/consumptions/42")

        assert response.status_code == 404
        assert response.json()["error_code"] == "CONSUMPTION_NOT_FOUND"

    async def test_void_passes_reason_and_actor(self, client: AsyncClient, use_cases):
        response = await client.post(
            "/api/consumptions/1/void",
            json={"reason": "entered twice"},
            headers={"X-Actor": "cook"},
        )

        assert response.status_code == 200
        consumption_id, request, actor = use_cases[
            get_void_consumption_use_case
        ].execute.call_args[0]
        assert consumption_id == 1
        assert request.reason == "entered twice"
        assert actor == "cook"
