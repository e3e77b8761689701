"""Adapters behind the core ledger interfaces."""

from messledger.infrastructure import storage

__all__ = ["storage"]
