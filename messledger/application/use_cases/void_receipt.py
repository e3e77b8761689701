"""Void Receipt Use Case."""

from messledger.application.dto.requests import VoidRequest
from messledger.application.dto.responses import ReceiptResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import receipt_to_response
from messledger.core.entities.receipt import Receipt
from messledger.core.services.allocation_reversal import AllocationReversal


class VoidReceiptUseCase(LedgerUseCase):
    """Void a receipt none of whose lots has been drawn from."""

    async def execute(
        self, receipt_id: int, request: VoidRequest, actor: str | None = None
    ) -> Receipt:
        """Execute void receipt use case."""
        store = await self._get_ledger_store()
        async with store.transaction() as session:
            return await AllocationReversal(session).void_receipt(
                receipt_id, request.reason, actor
            )

    def to_response(self, receipt: Receipt) -> ReceiptResponse:
        """Convert result to API response."""
        return receipt_to_response(receipt)
