"""Void Consumption Use Case - reverse FIFO allocations."""

from messledger.application.dto.requests import VoidRequest
from messledger.application.dto.responses import ConsumptionResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import consumption_to_response
from messledger.core.entities.consumption import Consumption
from messledger.core.services.allocation_reversal import AllocationReversal


class VoidConsumptionUseCase(LedgerUseCase):
    """Void a consumption and give its allocated quantities back to their lots."""

    async def execute(
        self, consumption_id: int, request: VoidRequest, actor: str | None = None
    ) -> Consumption:
        """Execute void consumption use case."""
        store = await self._get_ledger_store()
        async with store.transaction() as session:
            return await AllocationReversal(session).reverse_consumption(
                consumption_id, request.reason, actor
            )

    def to_response(self, consumption: Consumption) -> ConsumptionResponse:
        """Convert result to API response."""
        return consumption_to_response(consumption)
