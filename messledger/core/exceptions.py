"""
Domain exceptions for the mess ledger.

Every failure surfaced to callers is one of these typed errors. Each
carries a machine-readable code and a details dict with the context a
caller needs to react (ids, requested and available quantities, ...).
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


def _num(value: Decimal) -> str:
    """Render a decimal for error details without float conversion."""
    return format(value, "f")


# Not Found
class NotFoundError(LedgerError):
    """Base exception for missing entities."""

    pass


class PeriodNotFoundError(NotFoundError):
    """Period not found."""

    def __init__(self, period_code: str):
        super().__init__(
            f"Period not found: {period_code}",
            code="PERIOD_NOT_FOUND",
            details={"period_code": period_code},
        )


class ItemNotFoundError(NotFoundError):
    """One or more items referenced by a request do not exist."""

    def __init__(self, item_ids: list[int]):
        ids = sorted(set(item_ids))
        super().__init__(
            f"Item(s) not found: {', '.join(str(i) for i in ids)}",
            code="ITEM_NOT_FOUND",
            details={"item_ids": ids},
        )


class ReceiptNotFoundError(NotFoundError):
    """Receipt not found."""

    def __init__(self, receipt_id: int):
        super().__init__(
            f"Receipt not found: {receipt_id}",
            code="RECEIPT_NOT_FOUND",
            details={"receipt_id": receipt_id},
        )


class ReceiptLineNotFoundError(NotFoundError):
    """Receipt line referenced by an allocation is missing."""

    def __init__(self, receipt_line_id: int):
        super().__init__(
            f"Receipt line not found: {receipt_line_id}",
            code="RECEIPT_LINE_NOT_FOUND",
            details={"receipt_line_id": receipt_line_id},
        )


class ConsumptionNotFoundError(NotFoundError):
    """Consumption not found."""

    def __init__(self, consumption_id: int):
        super().__init__(
            f"Consumption not found: {consumption_id}",
            code="CONSUMPTION_NOT_FOUND",
            details={"consumption_id": consumption_id},
        )


class BalanceSnapshotNotFoundError(NotFoundError):
    """Period has no frozen balances (never closed, or reopened since)."""

    def __init__(self, period_code: str):
        super().__init__(
            f"No balance snapshot for open period {period_code}",
            code="BALANCE_SNAPSHOT_NOT_FOUND",
            details={"period_code": period_code},
        )


# Conflicts
class ConflictError(LedgerError):
    """Base exception for requests that collide with existing state."""

    pass


class DuplicatePeriodError(ConflictError):
    """Period with the same year and month already exists."""

    def __init__(self, period_code: str):
        super().__init__(
            f"Period already exists: {period_code}",
            code="DUPLICATE_PERIOD",
            details={"period_code": period_code},
        )


class AnotherPeriodOpenError(ConflictError):
    """Only one period may be open at a time."""

    def __init__(self, open_period_code: str | None):
        super().__init__(
            "Another period is already open. Close it first."
            + (f" (open: {open_period_code})" if open_period_code else ""),
            code="ANOTHER_PERIOD_OPEN",
            details={"open_period_code": open_period_code},
        )


class AlreadyVoidedError(ConflictError):
    """Receipt or consumption is already voided."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(
            f"{entity.capitalize()} {entity_id} is already voided",
            code="ALREADY_VOIDED",
            details={"entity": entity, "id": entity_id},
        )


class InsufficientStockError(ConflictError):
    """Not enough remaining lot quantity to satisfy a consumption line."""

    def __init__(self, item_id: int, requested: Decimal, available: Decimal):
        super().__init__(
            f"Insufficient stock for item {item_id}. "
            f"Required: {_num(requested)}, Available: {_num(available)}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "requested": _num(requested),
                "available": _num(available),
            },
        )
        self.item_id = item_id
        self.requested = requested
        self.available = available


# Invalid state
class InvalidStateError(LedgerError):
    """Base exception for operations not allowed in the current state."""

    pass


class PeriodNotOpenError(InvalidStateError):
    """Period is not open for entries or for closing."""

    def __init__(self, period_code: str, status: str):
        super().__init__(
            f"Period {period_code} is not open (status: {status})",
            code="PERIOD_NOT_OPEN",
            details={"period_code": period_code, "status": status},
        )


class PeriodLockedError(InvalidStateError):
    """Locked periods can never be reopened."""

    def __init__(self, period_code: str):
        super().__init__(
            f"Period {period_code} is locked and cannot be reopened",
            code="PERIOD_LOCKED",
            details={"period_code": period_code},
        )


class PeriodTransitionError(InvalidStateError):
    """Requested lifecycle transition is not allowed from the current status."""

    def __init__(self, period_code: str, status: str, action: str):
        super().__init__(
            f"Cannot {action} period {period_code} in status {status}",
            code="INVALID_PERIOD_TRANSITION",
            details={"period_code": period_code, "status": status, "action": action},
        )


class PartiallyConsumedError(InvalidStateError):
    """Receipt has lines that were already allocated to consumptions."""

    def __init__(self, receipt_id: int, receipt_line_ids: list[int]):
        super().__init__(
            f"Cannot void receipt {receipt_id} with partially consumed lines",
            code="PARTIALLY_CONSUMED",
            details={"receipt_id": receipt_id, "receipt_line_ids": receipt_line_ids},
        )


class LedgerIntegrityError(InvalidStateError):
    """Stored quantities violate a ledger invariant."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Ledger integrity check failed: {reason}",
            code="LEDGER_INTEGRITY_ERROR",
            details={"reason": reason, **(details or {})},
        )


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )
