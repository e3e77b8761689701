"""Period read use cases."""

from messledger.application.dto.responses import PeriodListResponse, PeriodResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import period_to_response
from messledger.core.entities.period import Period
from messledger.core.exceptions import PeriodNotFoundError


class ListPeriodsUseCase(LedgerUseCase):
    """List all periods, newest first."""

    async def execute(self) -> list[Period]:
        store = await self._get_ledger_store()
        async with store.snapshot() as session:
            return await session.list_periods()

    def to_response(self, periods: list[Period]) -> PeriodListResponse:
        return PeriodListResponse(
            periods=[period_to_response(p) for p in periods],
            total=len(periods),
        )


class GetPeriodUseCase(LedgerUseCase):
    """Fetch one period by code."""

    async def execute(self, code: str) -> Period:
        store = await self._get_ledger_store()
        async with store.snapshot() as session:
            period = await session.get_period_by_code(code)
        if period is None:
            raise PeriodNotFoundError(code)
        return period

    def to_response(self, period: Period) -> PeriodResponse:
        return period_to_response(period)
