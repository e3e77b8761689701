"""Ledger storage backends."""

from messledger.infrastructure.storage.sqlite import SQLiteLedgerStore, get_ledger_store

__all__ = ["SQLiteLedgerStore", "get_ledger_store"]
