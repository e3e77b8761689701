"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from messledger.application.dto.requests import (
    ConsumptionLineRequest,
    CreateConsumptionRequest,
    CreatePeriodRequest,
    CreateReceiptRequest,
    ReceiptLineRequest,
    UpdateReceiptRequest,
    VoidRequest,
)
from messledger.application.dto.responses import (
    AllocationResponse,
    BalanceFiguresResponse,
    BucketResponse,
    ClosePeriodResponse,
    ComponentHealthResponse,
    ConsumedResponse,
    ConsumptionLineResponse,
    ConsumptionListResponse,
    ConsumptionResponse,
    ErrorResponse,
    HealthResponse,
    ItemBalanceResponse,
    PeriodBalancesResponse,
    PeriodListResponse,
    PeriodResponse,
    ReceiptLineResponse,
    ReceiptListResponse,
    ReceiptResponse,
)

__all__ = [
    # Requests
    "CreatePeriodRequest",
    "CreateReceiptRequest",
    "ReceiptLineRequest",
    "UpdateReceiptRequest",
    "CreateConsumptionRequest",
    "ConsumptionLineRequest",
    "VoidRequest",
    # Responses
    "PeriodResponse",
    "PeriodListResponse",
    "ClosePeriodResponse",
    "ReceiptResponse",
    "ReceiptLineResponse",
    "ReceiptListResponse",
    "ConsumptionResponse",
    "ConsumptionLineResponse",
    "ConsumptionListResponse",
    "AllocationResponse",
    "BucketResponse",
    "ConsumedResponse",
    "BalanceFiguresResponse",
    "ItemBalanceResponse",
    "PeriodBalancesResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
