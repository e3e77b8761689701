"""
FIFO allocation service.

Splits a consumption quantity across receipt lots, oldest first, and
depletes each lot it draws from inside the caller's transaction.
"""

from decimal import Decimal

from messledger.config import get_logger
from messledger.core.entities.consumption import AllocationIntent
from messledger.core.exceptions import InsufficientStockError, ValidationError
from messledger.core.interfaces.ledger_store import ILedgerSession
from messledger.core.numeric import ZERO_QTY, line_amount, round_qty

logger = get_logger(__name__)


class FifoAllocator:
    """
    Allocate consumption against receipt lots in first-in-first-out order.

    Candidate lots are every receipt line of the item with remaining stock on
    a non-void receipt, from any period. The session returns them ordered by
    receipt period (year, month) then receipt line id, so allocation is
    deterministic.

    Lot depletion is written through the session as the walk proceeds, so a
    later line of the same consumption sees what earlier lines took. Nothing
    is committed here: if a later line fails the caller's transaction rolls
    everything back.
    """

    def __init__(self, session: ILedgerSession) -> None:
        self._session = session

    async def allocate(
        self,
        item_id: int,
        requested_qty: Decimal,
        period_id: int | None = None,
    ) -> list[AllocationIntent]:
        """
        Allocate requested_qty of item_id across available lots.

        Args:
            item_id: Item being consumed.
            requested_qty: Quantity to consume, > 0.
            period_id: Period the consumption is recorded in. Lots are not
                filtered by it; it is only carried into log context.

        Returns:
            Allocation intents in FIFO order whose quantities sum to
            requested_qty exactly.

        Raises:
            ValidationError: requested_qty is not positive.
            InsufficientStockError: candidate lots hold less than requested.
                No lot is touched in that case.
        """
        requested = round_qty(requested_qty)
        if requested <= 0:
            raise ValidationError("qty", "must be greater than zero", requested_qty)

        lots = await self._session.find_available_lots(item_id)
        available = round_qty(sum((lot.remaining_qty for lot in lots), ZERO_QTY))
        if available < requested:
            logger.warning(
                "fifo_insufficient_stock",
                item_id=item_id,
                period_id=period_id,
                requested=str(requested),
                available=str(available),
            )
            raise InsufficientStockError(item_id, requested, available)

        intents: list[AllocationIntent] = []
        outstanding = requested

        for lot in lots:
            if outstanding <= 0:
                break

            take = min(outstanding, lot.remaining_qty)
            if take <= 0:
                continue

            await self._session.set_remaining_qty(
                lot.receipt_line_id, round_qty(lot.remaining_qty - take)
            )
            intents.append(
                AllocationIntent(
                    receipt_line_id=lot.receipt_line_id,
                    qty=take,
                    rate=lot.rate,
                    amount=line_amount(take, lot.rate),
                )
            )
            outstanding = round_qty(outstanding - take)

        logger.debug(
            "fifo_allocated",
            item_id=item_id,
            period_id=period_id,
            requested=str(requested),
            lots=len(intents),
        )
        return intents
