"""
Allocation reversal service.

Voiding a consumption hands every allocated quantity back to the lot it
came from. Voiding a receipt is only possible while none of its lots has
been drawn from.
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from messledger.config import get_logger
from messledger.core.entities.consumption import Consumption
from messledger.core.entities.receipt import Receipt
from messledger.core.exceptions import (
    AlreadyVoidedError,
    ConsumptionNotFoundError,
    LedgerIntegrityError,
    PartiallyConsumedError,
    ReceiptLineNotFoundError,
    ReceiptNotFoundError,
)
from messledger.core.interfaces.ledger_store import ILedgerSession
from messledger.core.numeric import ZERO_QTY, round_qty

logger = get_logger(__name__)


class AllocationReversal:
    """
    Void consumptions and receipts inside the caller's transaction.

    Allocation and consumption line rows are kept for audit; once their
    consumption is void they no longer count in any balance.
    """

    def __init__(self, session: ILedgerSession) -> None:
        self._session = session

    async def reverse_consumption(
        self,
        consumption_id: int,
        reason: str,
        actor: str | None = None,
    ) -> Consumption:
        """
        Restore allocated quantities to their lots and mark the consumption void.

        All target lots are resolved before the first write, so a missing lot
        fails the call without touching anything.

        Raises:
            ConsumptionNotFoundError: No consumption with that id.
            AlreadyVoidedError: Consumption is already void.
            ReceiptLineNotFoundError: An allocation points at a missing lot.
            LedgerIntegrityError: Restoring would push a lot above its quantity.
        """
        consumption = await self._session.get_consumption(consumption_id)
        if consumption is None:
            raise ConsumptionNotFoundError(consumption_id)
        if consumption.is_void:
            raise AlreadyVoidedError("consumption", consumption_id)

        # Several lines may draw on the same lot
        restore: dict[int, Decimal] = defaultdict(lambda: ZERO_QTY)
        for allocation in consumption.allocations:
            restore[allocation.receipt_line_id] += allocation.qty

        updates: list[tuple[int, Decimal]] = []
        for receipt_line_id, qty in restore.items():
            lot = await self._session.get_receipt_line(receipt_line_id)
            if lot is None:
                raise ReceiptLineNotFoundError(receipt_line_id)

            new_remaining = round_qty(lot.remaining_qty + qty)
            if new_remaining > lot.quantity:
                raise LedgerIntegrityError(
                    "restored quantity exceeds lot quantity",
                    {
                        "receipt_line_id": receipt_line_id,
                        "quantity": str(lot.quantity),
                        "remaining_qty": str(lot.remaining_qty),
                        "restore_qty": str(qty),
                    },
                )
            updates.append((receipt_line_id, new_remaining))

        for receipt_line_id, new_remaining in updates:
            await self._session.set_remaining_qty(receipt_line_id, new_remaining)

        consumption.is_void = True
        consumption.void_reason = reason
        consumption.voided_at = datetime.utcnow()
        consumption.voided_by = actor
        consumption = await self._session.update_consumption(consumption)

        logger.info(
            "consumption_reversed",
            consumption_id=consumption_id,
            lots_restored=len(updates),
            voided_by=actor,
        )
        return consumption

    async def void_receipt(
        self,
        receipt_id: int,
        reason: str,
        actor: str | None = None,
    ) -> Receipt:
        """
        Mark a receipt void. Every line must still be untouched.

        Raises:
            ReceiptNotFoundError: No receipt with that id.
            AlreadyVoidedError: Receipt is already void.
            PartiallyConsumedError: Some line has remaining_qty below quantity.
        """
        receipt = await self._session.get_receipt(receipt_id)
        if receipt is None:
            raise ReceiptNotFoundError(receipt_id)
        if receipt.is_void:
            raise AlreadyVoidedError("receipt", receipt_id)

        touched = [line.id for line in receipt.lines if not line.is_untouched]
        if touched:
            raise PartiallyConsumedError(receipt_id, touched)  # type: ignore[arg-type]

        receipt.is_void = True
        receipt.void_reason = reason
        receipt.voided_at = datetime.utcnow()
        receipt.voided_by = actor
        receipt = await self._session.update_receipt(receipt)

        logger.info("receipt_voided", receipt_id=receipt_id, voided_by=actor)
        return receipt
