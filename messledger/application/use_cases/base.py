"""Shared wiring for ledger use cases."""

from messledger.core.interfaces.ledger_store import ILedgerStore


class LedgerUseCase:
    """Base for use cases that run against the ledger store.

    The store is injected for tests; otherwise the SQLite singleton is
    loaded lazily on first use.
    """

    def __init__(self, ledger_store: ILedgerStore | None = None):
        self._ledger_store = ledger_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from messledger.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store
