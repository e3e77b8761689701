"""Consumption endpoints."""

from fastapi import APIRouter, Depends, Query, status

from messledger.api.dependencies import (
    get_actor,
    get_consumption_use_case,
    get_create_consumption_use_case,
    get_list_consumptions_use_case,
    get_void_consumption_use_case,
)
from messledger.application.dto.requests import CreateConsumptionRequest, VoidRequest
from messledger.application.dto.responses import (
    ConsumptionListResponse,
    ConsumptionResponse,
    ErrorResponse,
)
from messledger.application.use_cases import (
    CreateConsumptionUseCase,
    GetConsumptionUseCase,
    ListConsumptionsUseCase,
    VoidConsumptionUseCase,
)

router = APIRouter(prefix="/api/consumptions", tags=["consumptions"])


@router.get(
    "",
    response_model=ConsumptionListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_consumptions(
    period: str = Query(..., description="Period code YYYY-MM"),
    include_void: bool = False,
    use_case: ListConsumptionsUseCase = Depends(get_list_consumptions_use_case),
) -> ConsumptionListResponse:
    """List consumptions of a period."""
    consumptions = await use_case.execute(period, include_void)
    return use_case.to_response(consumptions)


@router.post(
    "",
    response_model=ConsumptionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_consumption(
    request: CreateConsumptionRequest,
    actor: str | None = Depends(get_actor),
    use_case: CreateConsumptionUseCase = Depends(get_create_consumption_use_case),
) -> ConsumptionResponse:
    """Record consumption, allocating each line to lots in FIFO order."""
    consumption = await use_case.execute(request, actor)
    return use_case.to_response(consumption)


@router.get(
    "/{consumption_id}",
    response_model=ConsumptionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_consumption(
    consumption_id: int,
    use_case: GetConsumptionUseCase = Depends(get_consumption_use_case),
) -> ConsumptionResponse:
    """Get a consumption with its allocations."""
    consumption = await use_case.execute(consumption_id)
    return use_case.to_response(consumption)


@router.post(
    "/{consumption_id}/void",
    response_model=ConsumptionResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def void_consumption(
    consumption_id: int,
    request: VoidRequest,
    actor: str | None = Depends(get_actor),
    use_case: VoidConsumptionUseCase = Depends(get_void_consumption_use_case),
) -> ConsumptionResponse:
    """Void a consumption and return its quantities to the source lots."""
    consumption = await use_case.execute(consumption_id, request, actor)
    return use_case.to_response(consumption)
