"""Fixtures for end-to-end ledger flows on a real database."""

from decimal import Decimal

import pytest

from messledger.application.dto.requests import (
    CreateConsumptionRequest,
    CreatePeriodRequest,
    CreateReceiptRequest,
)
from messledger.application.use_cases import (
    ClosePeriodUseCase,
    CreateConsumptionUseCase,
    CreatePeriodUseCase,
    CreateReceiptUseCase,
    GetPeriodBalancesUseCase,
)
from messledger.core.entities.item import Item


class Ledger:
    """Thin driver over the use cases, bound to one store."""

    def __init__(self, store, items: dict[str, Item]):
        self.store = store
        self.items = items

    async def open(self, code: str):
        return await CreatePeriodUseCase(self.store).execute(CreatePeriodRequest(code=code))

    async def close(self, code: str):
        return await ClosePeriodUseCase(self.store).execute(code, actor="manager")

    async def receive(self, code: str, *lines: tuple[str, str, str]):
        return await CreateReceiptUseCase(self.store).execute(
            CreateReceiptRequest(
                period_code=code,
                lines=[
                    {"item_id": self.items[name].id, "quantity": qty, "rate": rate}
                    for name, qty, rate in lines
                ],
            )
        )

    async def consume(self, code: str, *lines: tuple[str, str]):
        return await CreateConsumptionUseCase(self.store).execute(
            CreateConsumptionRequest(
                period_code=code,
                lines=[{"item_id": self.items[name].id, "qty": qty} for name, qty in lines],
            )
        )

    async def balance(self, code: str, name: str, source: str = "live"):
        result = await GetPeriodBalancesUseCase(self.store).execute(code, source)
        item_id = self.items[name].id
        return next(b for b in result.balances if b.item_id == item_id)

    async def remaining(self, receipt_line_id: int) -> Decimal:
        async with self.store.snapshot() as session:
            line = await session.get_receipt_line(receipt_line_id)
        return line.remaining_qty


@pytest.fixture
async def ledger(ledger_store) -> Ledger:
    """Ledger driver with Rice and Oil seeded."""
    async with ledger_store.transaction() as session:
        rice = await session.create_item(Item(name="Rice", uom="kg"))
        oil = await session.create_item(Item(name="Oil", uom="l"))
    return Ledger(ledger_store, {"Rice": rice, "Oil": oil})
