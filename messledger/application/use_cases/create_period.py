"""Create Period Use Case - open a new accounting month."""

from messledger.application.dto.requests import CreatePeriodRequest
from messledger.application.dto.responses import PeriodResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import period_to_response
from messledger.core.entities.period import Period
from messledger.core.services.period_lifecycle import PeriodLifecycle


class CreatePeriodUseCase(LedgerUseCase):
    """Create a period in OPEN status. Fails while another period is open."""

    async def execute(self, request: CreatePeriodRequest, actor: str | None = None) -> Period:
        """Execute create period use case."""
        store = await self._get_ledger_store()
        async with store.transaction() as session:
            return await PeriodLifecycle(session).create(request.code, actor)

    def to_response(self, period: Period) -> PeriodResponse:
        """Convert result to API response."""
        return period_to_response(period)
