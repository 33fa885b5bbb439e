"""Ledger store package: state container, reducer and sync lifecycle."""

from expense_ledger.store.reducer import initial_state, reduce
from expense_ledger.store.store import LedgerStore, month_bounds
from expense_ledger.store.sync import (
    CancellationToken,
    SyncController,
    SyncOutcome,
)

__all__ = [
    "CancellationToken",
    "LedgerStore",
    "SyncController",
    "SyncOutcome",
    "initial_state",
    "month_bounds",
    "reduce",
]
