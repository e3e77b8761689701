"""SQLite ledger storage."""

from messledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from messledger.infrastructure.storage.sqlite.ledger_store import (
    SQLiteLedgerSession,
    SQLiteLedgerStore,
)

_ledger_store: SQLiteLedgerStore | None = None


async def get_ledger_store() -> SQLiteLedgerStore:
    """Process-wide ledger store over the global pool."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


__all__ = [
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "SQLiteLedgerStore",
    "SQLiteLedgerSession",
    "get_ledger_store",
]
