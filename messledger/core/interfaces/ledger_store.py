"""Abstract interface for ledger storage."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from decimal import Decimal

from messledger.core.entities.balance import BalanceBucket, PeriodItemBalance
from messledger.core.entities.consumption import (
    Consumption,
    ConsumptionAllocation,
    ConsumptionLine,
)
from messledger.core.entities.item import Item
from messledger.core.entities.period import Period
from messledger.core.entities.receipt import AvailableLot, Receipt, ReceiptLine


class ILedgerSession(ABC):
    """
    Repository calls bound to one store transaction.

    Every mutation made through a session commits or rolls back together
    with the enclosing ILedgerStore.transaction() block.
    """

    # Items

    @abstractmethod
    async def create_item(self, item: Item) -> Item:
        """Create a new item."""
        pass

    @abstractmethod
    async def get_item_by_name(self, name: str) -> Item | None:
        """Get item by its unique name."""
        pass

    @abstractmethod
    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        """Get the existing items among item_ids, keyed by id."""
        pass

    @abstractmethod
    async def list_items(self, active_only: bool = True) -> list[Item]:
        """List items ordered by name."""
        pass

    # Periods

    @abstractmethod
    async def create_period(self, period: Period) -> Period:
        """Create a period. Fails with a conflict on duplicate code or second open period."""
        pass

    @abstractmethod
    async def get_period(self, period_id: int) -> Period | None:
        """Get period by ID."""
        pass

    @abstractmethod
    async def get_period_by_code(self, code: str) -> Period | None:
        """Get period by its YYYY-MM code."""
        pass

    @abstractmethod
    async def get_open_period(self) -> Period | None:
        """Get the single open period, if any."""
        pass

    @abstractmethod
    async def list_periods(self) -> list[Period]:
        """List periods, newest first."""
        pass

    @abstractmethod
    async def update_period(self, period: Period) -> Period:
        """Persist status and lifecycle timestamps of a period."""
        pass

    # Receipts

    @abstractmethod
    async def create_receipt(self, receipt: Receipt) -> Receipt:
        """Create a receipt with its lines."""
        pass

    @abstractmethod
    async def get_receipt(self, receipt_id: int) -> Receipt | None:
        """Get receipt by ID, with lines."""
        pass

    @abstractmethod
    async def list_receipts(
        self, period_id: int, include_void: bool = False
    ) -> list[Receipt]:
        """List receipts of a period, with lines, oldest first."""
        pass

    @abstractmethod
    async def update_receipt(self, receipt: Receipt) -> Receipt:
        """Persist header fields (ref_no, notes, void state) of a receipt."""
        pass

    @abstractmethod
    async def get_receipt_line(self, receipt_line_id: int) -> ReceiptLine | None:
        """Get a receipt line by ID."""
        pass

    @abstractmethod
    async def find_available_lots(self, item_id: int) -> list[AvailableLot]:
        """
        Lots of an item with remaining quantity on non-void receipts.

        Ordered oldest first: receipt period year, month, then receipt line id.
        """
        pass

    @abstractmethod
    async def set_remaining_qty(self, receipt_line_id: int, remaining_qty: Decimal) -> None:
        """Overwrite the remaining quantity of a lot."""
        pass

    @abstractmethod
    async def find_remaining_violations(self) -> list[int]:
        """IDs of receipt lines whose remaining_qty is outside [0, quantity]."""
        pass

    # Consumptions

    @abstractmethod
    async def create_consumption(self, consumption: Consumption) -> Consumption:
        """Create a consumption header. Lines are added separately."""
        pass

    @abstractmethod
    async def add_consumption_line(self, line: ConsumptionLine) -> ConsumptionLine:
        """Add a line to an existing consumption."""
        pass

    @abstractmethod
    async def add_allocation(
        self, allocation: ConsumptionAllocation
    ) -> ConsumptionAllocation:
        """Record an allocation of a consumption line against a lot."""
        pass

    @abstractmethod
    async def get_consumption(self, consumption_id: int) -> Consumption | None:
        """Get consumption by ID, with lines and allocations."""
        pass

    @abstractmethod
    async def list_consumptions(
        self, period_id: int, include_void: bool = False
    ) -> list[Consumption]:
        """List consumptions of a period, with lines and allocations, oldest first."""
        pass

    @abstractmethod
    async def update_consumption(self, consumption: Consumption) -> Consumption:
        """Persist header fields (notes, void state) of a consumption."""
        pass

    # Balances

    @abstractmethod
    async def aggregate_opening(self, period: Period) -> dict[int, BalanceBucket]:
        """Stock of non-void lots from earlier periods as it stood when period began."""
        pass

    @abstractmethod
    async def aggregate_received(self, period: Period) -> dict[int, BalanceBucket]:
        """Quantity and amount of non-void receipt lines in period."""
        pass

    @abstractmethod
    async def aggregate_consumed_from_opening(
        self, period: Period
    ) -> dict[int, BalanceBucket]:
        """Allocations of non-void consumptions in period against earlier lots."""
        pass

    @abstractmethod
    async def aggregate_consumed_from_current(
        self, period: Period
    ) -> dict[int, BalanceBucket]:
        """Allocations of non-void consumptions in period against lots of period."""
        pass

    @abstractmethod
    async def save_period_item_balances(
        self, period_id: int, balances: list[PeriodItemBalance]
    ) -> None:
        """Replace the stored balance rows of a period."""
        pass

    @abstractmethod
    async def list_period_item_balances(self, period_id: int) -> list[PeriodItemBalance]:
        """Stored balance rows of a period, ordered by item name."""
        pass


class ILedgerStore(ABC):
    """Interface for transactional ledger persistence."""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[ILedgerSession]:
        """
        Open a write transaction.

        Writers are serialized. Commits when the block exits normally,
        rolls back every mutation when it raises. SQLite failures surface
        as DatabaseError.
        """
        pass

    @abstractmethod
    def snapshot(self) -> AbstractAsyncContextManager[ILedgerSession]:
        """Open a read-only session that sees one consistent snapshot."""
        pass
