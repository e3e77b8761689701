"""
Period balance calculator.

For one period and every active item:

    opening              stock of non-void lots from earlier periods as it stood
                         when the period began
    received             non-void receipt lines of the period
    consumed_from_opening  allocations of the period's consumptions on earlier lots
    consumed_from_current  allocations of the period's consumptions on its own lots
    closing              opening + received - consumed_from_opening - consumed_from_current

Opening is rebuilt from the lots' current remaining_qty plus what this and
later periods have drawn from them since, so it moves when an earlier lot
is voided or a consumption against it is reversed after close. Closing a
period freezes the figures in PeriodItemBalance rows for a stable
historical view.
"""

from messledger.config import get_logger
from messledger.core.entities.balance import BalanceBucket, BalanceFigures, ItemBalance
from messledger.core.entities.period import Period
from messledger.core.exceptions import PeriodNotFoundError
from messledger.core.interfaces.ledger_store import ILedgerSession

logger = get_logger(__name__)


def build_item_balance(
    item_id: int,
    opening: BalanceBucket,
    received: BalanceBucket,
    consumed_from_opening: BalanceBucket,
    consumed_from_current: BalanceBucket,
    item_name: str = "",
    uom: str = "",
) -> ItemBalance:
    """
    Round raw aggregates and derive closing from the rounded components.

    Deriving closing after rounding keeps tally_check at exactly zero.
    """
    opening = opening.rounded()
    received = received.rounded()
    consumed_from_opening = consumed_from_opening.rounded()
    consumed_from_current = consumed_from_current.rounded()
    closing = opening + received - consumed_from_opening - consumed_from_current

    return ItemBalance(
        item_id=item_id,
        item_name=item_name,
        uom=uom,
        opening=opening,
        received=received,
        consumed_from_opening=consumed_from_opening,
        consumed_from_current=consumed_from_current,
        closing=closing,
    )


def total_balances(balances: list[ItemBalance]) -> BalanceFigures:
    """Sum balance figures across items."""
    totals = BalanceFigures()
    for balance in balances:
        totals = totals + balance
    return totals


class PeriodBalanceCalculator:
    """Compute per-item balances of a period from ledger entries. Read only."""

    def __init__(self, session: ILedgerSession) -> None:
        self._session = session

    async def compute(self, period_code: str) -> list[ItemBalance]:
        """
        Compute balances of every active item for the period with this code.

        Raises:
            PeriodNotFoundError: No period with that code.
        """
        period = await self._session.get_period_by_code(period_code)
        if period is None:
            raise PeriodNotFoundError(period_code)
        return await self.compute_for_period(period)

    async def compute_for_period(self, period: Period) -> list[ItemBalance]:
        """Compute balances of every active item for an already loaded period."""
        items = await self._session.list_items(active_only=True)

        opening = await self._session.aggregate_opening(period)
        received = await self._session.aggregate_received(period)
        from_opening = await self._session.aggregate_consumed_from_opening(period)
        from_current = await self._session.aggregate_consumed_from_current(period)

        empty = BalanceBucket()
        balances = [
            build_item_balance(
                item_id=item.id,  # type: ignore[arg-type]
                item_name=item.name,
                uom=item.uom,
                opening=opening.get(item.id, empty),
                received=received.get(item.id, empty),
                consumed_from_opening=from_opening.get(item.id, empty),
                consumed_from_current=from_current.get(item.id, empty),
            )
            for item in items
        ]

        logger.debug(
            "period_balances_computed",
            period_code=period.code,
            items=len(balances),
        )
        return balances
