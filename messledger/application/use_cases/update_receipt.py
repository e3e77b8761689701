"""Update Receipt Use Case - edit header fields of a live receipt."""

from messledger.application.dto.requests import UpdateReceiptRequest
from messledger.application.dto.responses import ReceiptResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import receipt_to_response
from messledger.config import get_logger
from messledger.core.entities.receipt import Receipt
from messledger.core.exceptions import (
    AlreadyVoidedError,
    PeriodNotFoundError,
    ReceiptNotFoundError,
)
from messledger.core.services.period_lifecycle import ensure_open_for_entries

logger = get_logger(__name__)


class UpdateReceiptUseCase(LedgerUseCase):
    """
    Update ref_no and notes of a receipt.

    Only fields present in the request change. Lines are immutable since
    their lots may already be allocated.
    """

    async def execute(self, receipt_id: int, request: UpdateReceiptRequest) -> Receipt:
        """Execute update receipt use case."""
        store = await self._get_ledger_store()
        async with store.transaction() as session:
            receipt = await session.get_receipt(receipt_id)
            if receipt is None:
                raise ReceiptNotFoundError(receipt_id)
            if receipt.is_void:
                raise AlreadyVoidedError("receipt", receipt_id)

            period = await session.get_period(receipt.period_id)
            if period is None:
                raise PeriodNotFoundError(str(receipt.period_id))
            ensure_open_for_entries(period)

            if "ref_no" in request.model_fields_set:
                receipt.ref_no = request.ref_no
            if "notes" in request.model_fields_set:
                receipt.notes = request.notes
            receipt = await session.update_receipt(receipt)

        logger.info("receipt_updated", receipt_id=receipt_id)
        return receipt

    def to_response(self, receipt: Receipt) -> ReceiptResponse:
        """Convert result to API response."""
        return receipt_to_response(receipt)
