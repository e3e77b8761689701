"""Ledger report endpoints."""

from fastapi import APIRouter, Depends, Query

from messledger.api.dependencies import get_period_balances_use_case
from messledger.application.dto.responses import ErrorResponse, PeriodBalancesResponse
from messledger.application.use_cases import GetPeriodBalancesUseCase
from messledger.application.use_cases.get_period_balances import BalanceSource

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get(
    "/period-item-balances",
    response_model=PeriodBalancesResponse,
    responses={404: {"model": ErrorResponse}},
)
async def period_item_balances(
    period: str = Query(..., description="Period code YYYY-MM"),
    source: BalanceSource = Query("live", description="live or snapshot"),
    use_case: GetPeriodBalancesUseCase = Depends(get_period_balances_use_case),
) -> PeriodBalancesResponse:
    """Opening, received, consumed and closing per item, with tally check."""
    result = await use_case.execute(period, source)
    return use_case.to_response(result)
