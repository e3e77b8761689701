"""Reopen Period Use Case."""

from messledger.application.dto.responses import PeriodResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import period_to_response
from messledger.core.entities.period import Period
from messledger.core.services.period_lifecycle import PeriodLifecycle


class ReopenPeriodUseCase(LedgerUseCase):
    """Move a CLOSED period back to OPEN if no other period is open."""

    async def execute(self, code: str, actor: str | None = None) -> Period:
        """Execute reopen period use case."""
        store = await self._get_ledger_store()
        async with store.transaction() as session:
            return await PeriodLifecycle(session).reopen(code, actor)

    def to_response(self, period: Period) -> PeriodResponse:
        """Convert result to API response."""
        return period_to_response(period)
