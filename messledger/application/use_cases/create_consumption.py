"""Create Consumption Use Case - FIFO allocation against receipt lots."""

from messledger.application.dto.requests import CreateConsumptionRequest
from messledger.application.dto.responses import ConsumptionResponse
from messledger.application.use_cases.base import LedgerUseCase
from messledger.application.use_cases.mappers import consumption_to_response
from messledger.config import get_logger
from messledger.core.entities.consumption import (
    Consumption,
    ConsumptionAllocation,
    ConsumptionLine,
)
from messledger.core.exceptions import ItemNotFoundError
from messledger.core.numeric import round_qty
from messledger.core.services.fifo_allocator import FifoAllocator
from messledger.core.services.period_lifecycle import PeriodLifecycle

logger = get_logger(__name__)


class CreateConsumptionUseCase(LedgerUseCase):
    """
    Record consumption in an OPEN period.

    Lines are allocated in request order inside one transaction, so a later
    line sees the lots depleted by earlier ones. Any failure, including
    InsufficientStockError on the last line, rolls back the whole
    consumption and every lot change made for it.
    """

    async def execute(
        self, request: CreateConsumptionRequest, actor: str | None = None
    ) -> Consumption:
        """Execute create consumption use case."""
        logger.info(
            "create_consumption_started",
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

            consumption = await session.create_consumption(
                Consumption(
                    period_id=period.id,  # type: ignore[arg-type]
                    period_code=period.code,
                    notes=request.notes,
                    created_by=actor,
                )
            )

            allocator = FifoAllocator(session)
            for line_request in request.lines:
                entered_qty = round_qty(line_request.qty)
                intents = await allocator.allocate(line_request.item_id, entered_qty, period.id)

                line = await session.add_consumption_line(
                    ConsumptionLine(
                        consumption_id=consumption.id,
                        item_id=line_request.item_id,
                        entered_qty=entered_qty,
                    )
                )
                for intent in intents:
                    allocation = await session.add_allocation(
                        ConsumptionAllocation(
                            consumption_line_id=line.id,
                            receipt_line_id=intent.receipt_line_id,
                            qty=intent.qty,
                            rate=intent.rate,
                            amount=intent.amount,
                        )
                    )
                    line.allocations.append(allocation)
                consumption.lines.append(line)

        logger.info(
            "consumption_created",
            consumption_id=consumption.id,
            period_code=period.code,
            allocations=len(consumption.allocations),
            total_amount=str(consumption.total_amount),
        )
        return consumption

    def to_response(self, consumption: Consumption) -> ConsumptionResponse:
        """Convert result to API response."""
        return consumption_to_response(consumption)
