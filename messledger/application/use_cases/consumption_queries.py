"""Consumption read use cases."""

from messledger.application.dto.responses import (
    ConsumptionListResponse,
    ConsumptionResponse,
)
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import consumption_to_response
from messledger.core.entities.consumption import Consumption
from messledger.core.exceptions import ConsumptionNotFoundError, PeriodNotFoundError


class ListConsumptionsUseCase(LedgerUseCase):
    """List consumptions of a period, non-void only unless asked."""

    async def execute(self, period_code: str, include_void: bool = False) -> list[Consumption]:
        store = await self._get_ledger_store()
        async with store.snapshot() as session:
            period = await session.get_period_by_code(period_code)
            if period is None:
                raise PeriodNotFoundError(period_code)
            return await session.list_consumptions(period.id, include_void)  # type: ignore[arg-type]

    def to_response(self, consumptions: list[Consumption]) -> ConsumptionListResponse:
        return ConsumptionListResponse(
            consumptions=[consumption_to_response(c) for c in consumptions],
            total=len(consumptions),
        )


class GetConsumptionUseCase(LedgerUseCase):
    """Fetch one consumption with lines and allocations."""

    async def execute(self, consumption_id: int) -> Consumption:
        store = await self._get_ledger_store()
        async with store.snapshot() as session:
            consumption = await session.get_consumption(consumption_id)
        if consumption is None:
            raise ConsumptionNotFoundError(consumption_id)
        return consumption

    def to_response(self, consumption: Consumption) -> ConsumptionResponse:
        return consumption_to_response(consumption)
