"""Create Receipt Use Case - record goods received as new FIFO lots."""

from messledger.application.dto.requests import CreateReceiptRequest
from messledger.application.dto.responses import ReceiptResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import receipt_to_response
from messledger.config import get_logger
from messledger.core.entities.receipt import Receipt, ReceiptLine
from messledger.core.exceptions import ItemNotFoundError
from messledger.core.numeric import round_money, round_qty
from messledger.core.services.period_lifecycle import PeriodLifecycle

logger = get_logger(__name__)


class CreateReceiptUseCase(LedgerUseCase):
    """Create a receipt in an OPEN period. Each line becomes a lot with remaining = quantity."""

    async def execute(self, request: CreateReceiptRequest, actor: str | None = None) -> Receipt:
        """Execute create receipt use case."""
        logger.info(
            "create_receipt_started",
            period_code=request.period_code,
            lines=len(request.lines),
        )

        store = await self._get_ledger_store()
        async with store.transaction() as session:
            period = await PeriodLifecycle(session).get_open_for_entries(request.period_code)

            item_ids = [line.item_id for line in request.lines]
            items = await session.get_items(item_ids)
            missing = [item_id for item_id in item_ids if item_id not in items]
            if missing:
                raise ItemNotFoundError(missing)

            receipt = Receipt(
                period_id=period.id,  # type: ignore[arg-type]
                period_code=period.code,
                ref_no=request.ref_no,
                notes=request.notes,
                created_by=actor,
                lines=[
                    ReceiptLine(
                        item_id=line.item_id,
                        quantity=round_qty(line.quantity),
                        rate=round_money(line.rate),
                        lot_no=line.lot_no,
                    )
                    for line in request.lines
                ],
            )
            receipt = await session.create_receipt(receipt)

        logger.info(
            "receipt_created",
            receipt_id=receipt.id,
            period_code=period.code,
            total_amount=str(receipt.total_amount),
        )
        return receipt

    def to_response(self, receipt: Receipt) -> ReceiptResponse:
        """Convert result to API response."""
        return receipt_to_response(receipt)
