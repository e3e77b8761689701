"""Period lifecycle endpoints."""

from fastapi import APIRouter, Depends, status

from messledger.api.dependencies import (
    get_actor,
    get_close_period_use_case,
    get_create_period_use_case,
    get_list_periods_use_case,
    get_lock_period_use_case,
    get_period_use_case,
    get_reopen_period_use_case,
)
from messledger.application.dto.requests import CreatePeriodRequest
from messledger.application.dto.responses import (
    ClosePeriodResponse,
    ErrorResponse,
    PeriodListResponse,
    PeriodResponse,
)
from messledger.application.use_cases import (
    ClosePeriodUseCase,
    CreatePeriodUseCase,
    GetPeriodUseCase,
    ListPeriodsUseCase,
    LockPeriodUseCase,
    ReopenPeriodUseCase,
)

router = APIRouter(prefix="/api/periods", tags=["periods"])


@router.get("", response_model=PeriodListResponse)
async def list_periods(
    use_case: ListPeriodsUseCase = Depends(get_list_periods_use_case),
) -> PeriodListResponse:
    """List all periods, newest first."""
    periods = await use_case.execute()
    return use_case.to_response(periods)


@router.post(
    "",
    response_model=PeriodResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_period(
    request: CreatePeriodRequest,
    actor: str | None = Depends(get_actor),
    use_case: CreatePeriodUseCase = Depends(get_create_period_use_case),
) -> PeriodResponse:
    """Open a new period. Fails while another period is open."""
    period = await use_case.execute(request, actor)
    return use_case.to_response(period)


@router.get(
    "/{code}",
    response_model=PeriodResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_period(
    code: str,
    use_case: GetPeriodUseCase = Depends(get_period_use_case),
) -> PeriodResponse:
    """Get a period by code."""
    period = await use_case.execute(code)
    return use_case.to_response(period)


@router.post(
    "/{code}/close",
    response_model=ClosePeriodResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def close_period(
    code: str,
    actor: str | None = Depends(get_actor),
    use_case: ClosePeriodUseCase = Depends(get_close_period_use_case),
) -> ClosePeriodResponse:
    """Close an OPEN period and freeze its item balances."""
    result = await use_case.execute(code, actor)
    return use_case.to_response(result)


@router.post(
    "/{code}/reopen",
    response_model=PeriodResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def reopen_period(
    code: str,
    actor: str | None = Depends(get_actor),
    use_case: ReopenPeriodUseCase = Depends(get_reopen_period_use_case),
) -> PeriodResponse:
    """Reopen a CLOSED period. Locked periods stay final."""
    period = await use_case.execute(code, actor)
    return use_case.to_response(period)


@router.post(
    "/{code}/lock",
    response_model=PeriodResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def lock_period(
    code: str,
    actor: str | None = Depends(get_actor),
    use_case: LockPeriodUseCase = Depends(get_lock_period_use_case),
) -> PeriodResponse:
    """Lock a CLOSED period permanently."""
    period = await use_case.execute(code, actor)
    return use_case.to_response(period)
