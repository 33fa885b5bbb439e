"""
Ledger Reducer

Pure function from (state, action) to the next state. This is the
only code that decides what a transition does to the ledger.

Rules:
- pending: status loading, last error cleared, request marked in flight
- fulfilled: status succeeded, result applied
- rejected: status failed, message stored, items untouched
- discarded: request no longer in flight, nothing applied
"""

from expense_ledger.models.expense import Expense
from expense_ledger.models.ledger import (
    LedgerAction,
    LedgerState,
    LedgerStatus,
    OperationKind,
    SyncPhase,
)


def initial_state() -> LedgerState:
    """Empty ledger, nothing loaded yet."""
    return LedgerState()


def reduce(state: LedgerState, action: LedgerAction) -> LedgerState:
    """Apply one action and return the new state."""
    if action.kind == OperationKind.CLEAR_ERROR:
        status = LedgerStatus.IDLE if state.status == LedgerStatus.FAILED else state.status
        return state.model_copy(update={"last_error": None, "status": status})

    in_flight = state.in_flight
    if action.request_id is not None:
        if action.phase == SyncPhase.PENDING:
            in_flight = in_flight | {action.request_id}
        else:
            in_flight = in_flight - {action.request_id}

    if action.phase == SyncPhase.PENDING:
        return state.model_copy(update={
            "status": LedgerStatus.LOADING,
            "last_error": None,
            "in_flight": in_flight,
        })

    if action.phase == SyncPhase.REJECTED:
        return state.model_copy(update={
            "status": LedgerStatus.FAILED,
            "last_error": action.error or "Request failed",
            "in_flight": in_flight,
        })

    if action.phase == SyncPhase.DISCARDED:
        status = state.status
        if status == LedgerStatus.LOADING and not in_flight:
            status = LedgerStatus.IDLE
        return state.model_copy(update={"status": status, "in_flight": in_flight})

    if action.phase == SyncPhase.FULFILLED:
        return state.model_copy(update={
            "items": _apply(state.items, action),
            "status": LedgerStatus.SUCCEEDED,
            "last_error": None,
            "in_flight": in_flight,
        })

    raise ValueError(f"Unhandled action: {action.name}")


def _apply(items: tuple[Expense, ...], action: LedgerAction) -> tuple[Expense, ...]:
    """Apply a fulfilled result to the item list."""
    payload = action.payload

    if action.kind in (OperationKind.FETCH_ALL, OperationKind.FETCH_MONTH):
        return tuple(payload or ())

    if action.kind == OperationKind.ADD:
        # Newest addition goes on top regardless of its date; the next
        # fetch restores date order. An echoed id we already hold moves
        # to the front instead of being duplicated.
        return (payload,) + tuple(e for e in items if e.id != payload.id)

    if action.kind == OperationKind.UPDATE:
        # Unknown id: drop the result, items stay exactly as they were
        if not any(e.id == payload.id for e in items):
            return items
        return tuple(payload if e.id == payload.id else e for e in items)

    if action.kind == OperationKind.REMOVE:
        if not any(e.id == payload for e in items):
            return items
        return tuple(e for e in items if e.id != payload)

    raise ValueError(f"Unhandled action: {action.name}")
