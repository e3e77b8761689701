"""Get Period Balances Use Case - opening/received/consumed/closing per item."""

from dataclasses import dataclass
from typing import Literal

from messledger.application.dto.responses import PeriodBalancesResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import (
    figures_to_response,
    item_balance_to_response,
)
from messledger.config import get_logger
from messledger.core.entities.balance import ItemBalance
from messledger.core.entities.period import Period
from messledger.core.exceptions import BalanceSnapshotNotFoundError
from messledger.core.services.balance_calculator import (
    PeriodBalanceCalculator,
    total_balances,
)
from messledger.core.services.period_lifecycle import PeriodLifecycle

logger = get_logger(__name__)

BalanceSource = Literal["live", "snapshot"]


@dataclass
class PeriodBalancesResult:
    """Balances of a period and where they came from."""

    period: Period
    source: BalanceSource
    balances: list[ItemBalance]


class GetPeriodBalancesUseCase(LedgerUseCase):
    """
    Report item balances of a period.

    source="live" recomputes from ledger entries on one read snapshot.
    source="snapshot" returns the rows frozen when the period was closed;
    an OPEN period has none.
    """

    async def execute(
        self, period_code: str, source: BalanceSource = "live"
    ) -> PeriodBalancesResult:
        """Execute get period balances use case."""
        store = await self._get_ledger_store()
        async with store.snapshot() as session:
            period = await PeriodLifecycle(session).get(period_code)

            if source == "snapshot":
                if period.is_open:
                    raise BalanceSnapshotNotFoundError(period.code)
                balances: list[ItemBalance] = list(
                    await session.list_period_item_balances(period.id)  # type: ignore[arg-type]
                )
            else:
                balances = await PeriodBalanceCalculator(session).compute_for_period(period)

        logger.debug(
            "period_balances_read",
            period_code=period.code,
            source=source,
            items=len(balances),
        )
        return PeriodBalancesResult(period=period, source=source, balances=balances)

    def to_response(self, result: PeriodBalancesResult) -> PeriodBalancesResponse:
        """Convert result to API response."""
        return PeriodBalancesResponse(
            period=result.period.code,
            status=result.period.status.value,
            source=result.source,
            balances=[item_balance_to_response(b) for b in result.balances],
            totals=figures_to_response(total_balances(result.balances)),
        )
