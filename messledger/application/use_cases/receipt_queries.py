"""Receipt read use cases."""

from messledger.application.dto.responses import ReceiptListResponse, ReceiptResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import receipt_to_response
from messledger.core.entities.receipt import Receipt
from messledger.core.exceptions import PeriodNotFoundError, ReceiptNotFoundError


class ListReceiptsUseCase(LedgerUseCase):
    """List receipts of a period, non-void only unless asked."""

    async def execute(self, period_code: str, include_void: bool = False) -> list[Receipt]:
        store = await self._get_ledger_store()
        async with store.snapshot() as session:
            period = await session.get_period_by_code(period_code)
            if period is None:
                raise PeriodNotFoundError(period_code)
            return await session.list_receipts(period.id, include_void)  # type: ignore[arg-type]

    def to_response(self, receipts: list[Receipt]) -> ReceiptListResponse:
        return ReceiptListResponse(
            receipts=[receipt_to_response(r) for r in receipts],
            total=len(receipts),
        )


class GetReceiptUseCase(LedgerUseCase):
    """Fetch one receipt with its lines."""

    async def execute(self, receipt_id: int) -> Receipt:
        store = await self._get_ledger_store()
        async with store.snapshot() as session:
            receipt = await session.get_receipt(receipt_id)
        if receipt is None:
            raise ReceiptNotFoundError(receipt_id)
        return receipt

    def to_response(self, receipt: Receipt) -> ReceiptResponse:
        return receipt_to_response(receipt)
