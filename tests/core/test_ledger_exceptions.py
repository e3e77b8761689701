"""Unit tests for ledger exceptions."""

from decimal import Decimal

import pytest

from messledger.core.exceptions import (
    AlreadyVoidedError,
    AnotherPeriodOpenError,
    BalanceSnapshotNotFoundError,
    ConflictError,
    ConsumptionNotFoundError,
    DatabaseError,
    DuplicatePeriodError,
    InsufficientStockError,
    InvalidStateError,
    ItemNotFoundError,
    LedgerError,
    LedgerIntegrityError,
    NotFoundError,
    PartiallyConsumedError,
    PeriodLockedError,
    PeriodNotFoundError,
    PeriodNotOpenError,
    PeriodTransitionError,
    ReceiptNotFoundError,
    StorageError,
    ValidationError,
)


class TestLedgerError:
    """Tests for base LedgerError exception."""

    def test_basic_initialization(self):
        error = LedgerError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "LedgerError"
        assert error.details == {}

    def test_to_dict(self):
        error = LedgerError("Test error", code="TEST_CODE", details={"extra": "info"})
        assert error.to_dict() == {
            "error": "TEST_CODE",
            "message": "Test error",
            "details": {"extra": "info"},
        }


class TestNotFoundErrors:
    @pytest.mark.parametrize(
        "error,code",
        [
            (PeriodNotFoundError("2024-01"), "PERIOD_NOT_FOUND"),
            (ReceiptNotFoundError(7), "RECEIPT_NOT_FOUND"),
            (ConsumptionNotFoundError(7), "CONSUMPTION_NOT_FOUND"),
            (BalanceSnapshotNotFoundError("2024-01"), "BALANCE_SNAPSHOT_NOT_FOUND"),
        ],
    )
    def test_codes_and_hierarchy(self, error, code):
        assert isinstance(error, NotFoundError)
        assert error.code == code

    def test_item_not_found_sorts_and_dedupes_ids(self):
        error = ItemNotFoundError([5, 2, 5])
        assert error.details == {"item_ids": [2, 5]}
        assert "2, 5" in error.message


class TestConflictErrors:
    def test_insufficient_stock_details_are_exact_strings(self):
        error = InsufficientStockError(3, Decimal("15.000"), Decimal("12.500"))
        assert isinstance(error, ConflictError)
        assert error.code == "INSUFFICIENT_STOCK"
        assert error.details == {"item_id": 3, "requested": "15.000", "available": "12.500"}
        assert error.requested == Decimal("15.000")
        assert "Required: 15.000, Available: 12.500" in error.message

    def test_another_period_open_names_open_period(self):
        error = AnotherPeriodOpenError("2024-01")
        assert error.details["open_period_code"] == "2024-01"
        assert "2024-01" in error.message

    def test_duplicate_and_voided(self):
        assert isinstance(DuplicatePeriodError("2024-01"), ConflictError)
        error = AlreadyVoidedError("receipt", 4)
        assert isinstance(error, ConflictError)
        assert error.message == "Receipt 4 is already voided"


class TestInvalidStateErrors:
    @pytest.mark.parametrize(
        "error",
        [
            PeriodNotOpenError("2024-01", "CLOSED"),
            PeriodLockedError("2024-01"),
            PeriodTransitionError("2024-01", "OPEN", "lock"),
            PartiallyConsumedError(1, [10]),
            LedgerIntegrityError("bad"),
        ],
    )
    def test_hierarchy(self, error):
        assert isinstance(error, InvalidStateError)
        assert isinstance(error, LedgerError)

    def test_integrity_error_merges_details(self):
        error = LedgerIntegrityError("negative closing quantity", {"item_ids": [1]})
        assert error.details == {"reason": "negative closing quantity", "item_ids": [1]}


class TestOtherErrors:
    def test_validation_error_truncates_value(self):
        error = ValidationError("qty", "too long", "x" * 500)
        assert error.code == "VALIDATION_ERROR"
        assert len(error.details["value"]) == 100

    def test_validation_error_without_value(self):
        assert ValidationError("qty", "required").details["value"] is None

    def test_database_error(self):
        error = DatabaseError("insert", "disk full")
        assert isinstance(error, StorageError)
        assert error.details == {"operation": "insert", "error": "disk full"}
