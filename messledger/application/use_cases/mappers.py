"""Entity to response DTO conversion shared by use cases."""

from messledger.application.dto.responses import (
    AllocationResponse,
    BalanceFiguresResponse,
    BucketResponse,
    ConsumedResponse,
    ConsumptionLineResponse,
    ConsumptionResponse,
    ItemBalanceResponse,
    PeriodResponse,
    ReceiptLineResponse,
    ReceiptResponse,
)
from messledger.core.entities.balance import BalanceBucket, BalanceFigures, ItemBalance
from messledger.core.entities.consumption import Consumption
from messledger.core.entities.period import Period
from messledger.core.entities.receipt import Receipt


def period_to_response(period: Period) -> PeriodResponse:
    return PeriodResponse(
        id=period.id,  # type: ignore[arg-type]
        code=period.code,
        year=period.year,
        month=period.month,
        status=period.status.value,
        opened_at=period.opened_at,
        closed_at=period.closed_at,
        closed_by=period.closed_by,
        locked_at=period.locked_at,
        locked_by=period.locked_by,
        created_by=period.created_by,
        created_at=period.created_at,
        updated_at=period.updated_at,
    )


def receipt_to_response(receipt: Receipt) -> ReceiptResponse:
    return ReceiptResponse(
        id=receipt.id,  # type: ignore[arg-type]
        period_code=receipt.period_code,
        ref_no=receipt.ref_no,
        notes=receipt.notes,
        is_void=receipt.is_void,
        void_reason=receipt.void_reason,
        voided_at=receipt.voided_at,
        voided_by=receipt.voided_by,
        created_by=receipt.created_by,
        total_quantity=receipt.total_quantity,
        total_amount=receipt.total_amount,
        lines=[
            ReceiptLineResponse(
                id=line.id,  # type: ignore[arg-type]
                item_id=line.item_id,
                quantity=line.quantity,
                rate=line.rate,
                amount=line.amount,
                remaining_qty=line.remaining_qty,  # type: ignore[arg-type]
                lot_no=line.lot_no,
            )
            for line in receipt.lines
        ],
        created_at=receipt.created_at,
        updated_at=receipt.updated_at,
    )


def consumption_to_response(consumption: Consumption) -> ConsumptionResponse:
    return ConsumptionResponse(
        id=consumption.id,  # type: ignore[arg-type]
        period_code=consumption.period_code,
        notes=consumption.notes,
        is_void=consumption.is_void,
        void_reason=consumption.void_reason,
        voided_at=consumption.voided_at,
        voided_by=consumption.voided_by,
        created_by=consumption.created_by,
        total_amount=consumption.total_amount,
        lines=[
            ConsumptionLineResponse(
                id=line.id,  # type: ignore[arg-type]
                item_id=line.item_id,
                entered_qty=line.entered_qty,
                amount=line.amount,
                allocations=[
                    AllocationResponse(
                        id=a.id,
                        receipt_line_id=a.receipt_line_id,
                        qty=a.qty,
                        rate=a.rate,
                        amount=a.amount,
                    )
                    for a in line.allocations
                ],
            )
            for line in consumption.lines
        ],
        created_at=consumption.created_at,
        updated_at=consumption.updated_at,
    )


def bucket_to_response(bucket: BalanceBucket) -> BucketResponse:
    return BucketResponse(qty=bucket.qty, amt=bucket.amt, avg_rate=bucket.avg_rate)


def _figures(figures: BalanceFigures) -> dict:
    return {
        "opening": bucket_to_response(figures.opening),
        "received": bucket_to_response(figures.received),
        "consumed": ConsumedResponse(
            from_opening=bucket_to_response(figures.consumed_from_opening),
            from_current=bucket_to_response(figures.consumed_from_current),
            total=bucket_to_response(figures.consumed_total),
        ),
        "closing": bucket_to_response(figures.closing),
        "gross_total": figures.opening.amt + figures.received.amt,
        "tally_check": figures.tally_check,
    }


def figures_to_response(figures: BalanceFigures) -> BalanceFiguresResponse:
    return BalanceFiguresResponse(**_figures(figures))


def item_balance_to_response(balance: ItemBalance) -> ItemBalanceResponse:
    return ItemBalanceResponse(
        item_id=balance.item_id,
        item_name=balance.item_name,
        uom=balance.uom,
        **_figures(balance),
    )
