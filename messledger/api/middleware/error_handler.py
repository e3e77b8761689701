"""
Ledger error responses.

Every failure leaves the API as an ErrorResponse envelope
(error_code, message, hint, details, path):

    NotFoundError        404
    ConflictError        409   duplicate period, second open period, stock short
    InvalidStateError    400   period not open / locked, lot already drawn
    ValidationError      400
    StorageError         500   message and details withheld
    request body errors  422   VALIDATION_ERROR with one line per field
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from messledger.application.dto.responses import ErrorResponse
from messledger.config import get_logger
from messledger.core.exceptions import (
    ConflictError,
    InvalidStateError,
    LedgerError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)

# Checked in order; the first matching base class wins
STATUS_BY_ERROR: list[tuple[type[LedgerError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]

HINTS: dict[str, str] = {
    "PERIOD_NOT_FOUND": "List periods with GET /api/periods.",
    "ITEM_NOT_FOUND": "Create the item with 'manage.py seed-items name:uom'.",
    "RECEIPT_NOT_FOUND": "List receipts with GET /api/receipts?period=YYYY-MM.",
    "RECEIPT_LINE_NOT_FOUND": "An allocation points to a missing lot. Run 'manage.py verify'.",
    "CONSUMPTION_NOT_FOUND": "List consumptions with GET /api/consumptions?period=YYYY-MM.",
    "BALANCE_SNAPSHOT_NOT_FOUND": "Snapshots exist once a period is closed; use source=live.",
    "DUPLICATE_PERIOD": "The period already exists; fetch it with GET /api/periods/{code}.",
    "DUPLICATE_ITEM": "An item with this name already exists.",
    "ANOTHER_PERIOD_OPEN": "Close the open period first.",
    "ALREADY_VOIDED": "The entry is already void.",
    "INSUFFICIENT_STOCK": "Record a receipt for the item or consume less.",
    "PERIOD_NOT_OPEN": "Receipts, consumptions and closing need an OPEN period.",
    "PERIOD_LOCKED": "Locked periods are final.",
    "INVALID_PERIOD_TRANSITION": "Allowed: close OPEN, reopen CLOSED, lock CLOSED.",
    "PARTIALLY_CONSUMED": "Void the consumptions that drew on this receipt first.",
    "LEDGER_INTEGRITY_ERROR": "Stored quantities disagree. Run 'manage.py verify'.",
    "VALIDATION_ERROR": "Check the request fields against /docs.",
    "NOT_FOUND": "No such route.",
    "METHOD_NOT_ALLOWED": "This route does not accept that method.",
}

HTTP_ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "UNPROCESSABLE_ENTITY",
}

_SERVER_ERROR_HINT = "An internal error occurred. Check server logs."


def status_for(exc: LedgerError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _envelope(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    hint = _SERVER_ERROR_HINT if status_code >= 500 else HINTS.get(error_code, "")
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=hint,
        details=details or {},
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def ledger_error_response(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("ledger_error", path=request.url.path, code=exc.code, error=exc.message)
        return _envelope(request, status_code, exc.code, "Internal server error")

    logger.warning("ledger_rejected", path=request.url.path, code=exc.code, details=exc.details)
    return _envelope(request, status_code, exc.code, exc.message, exc.details)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last resort for exceptions no handler claimed: log with traceback, answer 500."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except LedgerError as e:
            return ledger_error_response(request, e)
        except Exception as e:
            logger.exception("unhandled_exception", path=request.url.path, error_type=type(e).__name__)
            return _envelope(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "Internal server error",
            )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for ledger errors, request validation and routing errors."""

    @app.exception_handler(LedgerError)
    async def handle_ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
        return ledger_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _envelope(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": errors},
        )

    @app.exception_handler(HTTPException)
    async def handle_http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return _envelope(
            request,
            exc.status_code,
            HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail) if exc.detail else "An error occurred",
        )
