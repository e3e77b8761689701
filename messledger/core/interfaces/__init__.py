"""Ports the ledger services depend on."""

from messledger.core.interfaces.ledger_store import ILedgerSession, ILedgerStore

__all__ = ["ILedgerStore", "ILedgerSession"]
