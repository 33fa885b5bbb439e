"""
Ledger State Models

The store's full state plus the actions that move it forward.

DESIGN DECISION: The state is a frozen value. Every transition
produces a new LedgerState via the reducer, so readers (analytics,
subscribers) can hold a reference without worrying about it
changing underneath them.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from expense_ledger.models.expense import Expense


class LedgerStatus(str, Enum):
    """Load/error status of the ledger."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class OperationKind(str, Enum):
    """Operations the store exposes to consumers."""
    FETCH_ALL = "fetch_all"
    FETCH_MONTH = "fetch_month"
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    CLEAR_ERROR = "clear_error"


class SyncPhase(str, Enum):
    """
    Lifecycle phase of one request.

    DISCARDED is reached when a request completes after being
    cancelled or superseded - it never commits a result.
    """
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"
    DISCARDED = "discarded"


class LedgerState(BaseModel):
    """
    Current expense collection and its load/error status.

    `items` is in server order (date descending) except that freshly
    added records sit at the front until the next fetch.
    """
    model_config = ConfigDict(frozen=True)

    items: tuple[Expense, ...] = Field(
        default_factory=tuple,
        description="Expenses currently held by the store"
    )
    status: LedgerStatus = Field(
        default=LedgerStatus.IDLE,
        description="Status of the most recent transition"
    )
    last_error: Optional[str] = Field(
        default=None,
        description="Message of the last failure (only when status is failed)"
    )
    in_flight: frozenset[str] = Field(
        default_factory=frozenset,
        description="Request ids that have started but not completed"
    )

    @property
    def is_loading(self) -> bool:
        return self.status == LedgerStatus.LOADING

    def find(self, expense_id: str) -> Optional[Expense]:
        """Return the expense with this id, if the store holds it."""
        for item in self.items:
            if item.id == expense_id:
                return item
        return None


ActionPayload = Union[tuple[Expense, ...], Expense, str, None]


class LedgerAction(BaseModel):
    """
    A message describing one state transition.

    Actions are the only way the ledger state changes. The sync
    controller creates them; the reducer interprets them.
    """
    model_config = ConfigDict(frozen=True)

    kind: OperationKind
    phase: Optional[SyncPhase] = None
    request_id: Optional[str] = None
    payload: ActionPayload = None
    error: Optional[str] = None

    @property
    def name(self) -> str:
        """Redux-style action name, e.g. 'expenses/add/fulfilled'."""
        if self.phase is None:
            return f"expenses/{self.kind.value}"
        return f"expenses/{self.kind.value}/{self.phase.value}"
