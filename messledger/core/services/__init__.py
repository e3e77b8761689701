"""
Core ledger services.

Layer-pure services that depend only on:
- messledger/core/entities/*
- messledger/core/interfaces/*
- messledger/core/exceptions.py

NO infrastructure imports. Each service works on an ILedgerSession
injected via constructor, inside a transaction owned by the caller.
"""

from messledger.core.services.allocation_reversal import AllocationReversal
from messledger.core.services.balance_calculator import (
    PeriodBalanceCalculator,
    build_item_balance,
    total_balances,
)
from messledger.core.services.fifo_allocator import FifoAllocator
from messledger.core.services.period_lifecycle import (
    PeriodLifecycle,
    can_transition,
    ensure_open_for_entries,
)

__all__ = [
    # FIFO Allocator
    "FifoAllocator",
    # Allocation Reversal
    "AllocationReversal",
    # Balance Calculator
    "PeriodBalanceCalculator",
    "build_item_balance",
    "total_balances",
    # Period Lifecycle
    "PeriodLifecycle",
    "can_transition",
    "ensure_open_for_entries",
]
