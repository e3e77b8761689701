"""Ledger domain: entities, store interfaces, services and errors."""

from messledger.core import entities, exceptions, interfaces

__all__ = ["entities", "exceptions", "interfaces"]
