"""Close Period Use Case - verify, freeze balances, mark CLOSED."""

from dataclasses import dataclass

from messledger.application.dto.responses import ClosePeriodResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import period_to_response
from messledger.core.entities.balance import PeriodItemBalance
from messledger.core.entities.period import Period
from messledger.core.services.period_lifecycle import PeriodLifecycle


@dataclass
class ClosePeriodResult:
    """Result of closing a period."""

    period: Period
    balances: list[PeriodItemBalance]


class ClosePeriodUseCase(LedgerUseCase):
    """
    Close an OPEN period.

    Lot quantities are checked and item balances are frozen into
    period_item_balances in the same transaction as the status change.
    """

    async def execute(self, code: str, actor: str | None = None) -> ClosePeriodResult:
        """Execute close period use case."""
        store = await self._get_ledger_store()
        async with store.transaction() as session:
            period, balances = await PeriodLifecycle(session).close(code, actor)
        return ClosePeriodResult(period=period, balances=balances)

    def to_response(self, result: ClosePeriodResult) -> ClosePeriodResponse:
        """Convert result to API response."""
        return ClosePeriodResponse(
            period=period_to_response(result.period),
            balances_saved=len(result.balances),
        )
