"""Goods receipt endpoints."""

from fastapi import APIRouter, Depends, Query, status

from messledger.api.dependencies import (
    get_actor,
    get_create_receipt_use_case,
    get_list_receipts_use_case,
    get_receipt_use_case,
    get_update_receipt_use_case,
    get_void_receipt_use_case,
)
from messledger.application.dto.requests import (
    CreateReceiptRequest,
    UpdateReceiptRequest,
    VoidRequest,
)
from messledger.application.dto.responses import (
    ErrorResponse,
    ReceiptListResponse,
    ReceiptResponse,
)
from messledger.application.use_cases import (
    CreateReceiptUseCase,
    GetReceiptUseCase,
    ListReceiptsUseCase,
    UpdateReceiptUseCase,
    VoidReceiptUseCase,
)

router = APIRouter(prefix="/api/receipts", tags=["receipts"])


@router.get(
    "",
    response_model=ReceiptListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_receipts(
    period: str = Query(..., description="Period code YYYY-MM"),
    include_void: bool = False,
    use_case: ListReceiptsUseCase = Depends(get_list_receipts_use_case),
) -> ReceiptListResponse:
    """List receipts of a period."""
    receipts = await use_case.execute(period, include_void)
    return use_case.to_response(receipts)


@router.post(
    "",
    response_model=ReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_receipt(
    request: CreateReceiptRequest,
    actor: str | None = Depends(get_actor),
    use_case: CreateReceiptUseCase = Depends(get_create_receipt_use_case),
) -> ReceiptResponse:
    """Record received lots in an OPEN period."""
    receipt = await use_case.execute(request, actor)
    return use_case.to_response(receipt)


@router.get(
    "/{receipt_id}",
    response_model=ReceiptResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_receipt(
    receipt_id: int,
    use_case: GetReceiptUseCase = Depends(get_receipt_use_case),
) -> ReceiptResponse:
    """Get a receipt with its lines."""
    receipt = await use_case.execute(receipt_id)
    return use_case.to_response(receipt)


@router.patch(
    "/{receipt_id}",
    response_model=ReceiptResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_receipt(
    receipt_id: int,
    request: UpdateReceiptRequest,
    use_case: UpdateReceiptUseCase = Depends(get_update_receipt_use_case),
) -> ReceiptResponse:
    """Edit receipt header fields. Lines are immutable."""
    receipt = await use_case.execute(receipt_id, request)
    return use_case.to_response(receipt)


@router.post(
    "/{receipt_id}/void",
    response_model=ReceiptResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def void_receipt(
    receipt_id: int,
    request: VoidRequest,
    actor: str | None = Depends(get_actor),
    use_case: VoidReceiptUseCase = Depends(get_void_receipt_use_case),
) -> ReceiptResponse:
    """Void a receipt whose lots are untouched."""
    receipt = await use_case.execute(receipt_id, request, actor)
    return use_case.to_response(receipt)
