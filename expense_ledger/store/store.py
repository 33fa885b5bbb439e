"""
Ledger Store

The single state container for the current user's expenses.

Consumers read `store.state` and subscribe to transitions; they never
mutate anything directly. Every operation goes through the sync
controller, which dispatches actions into the reducer.
"""

import calendar
from datetime import date
from typing import Any, Callable, Optional, Union

import structlog

from expense_ledger.audit import AuditLogger
from expense_ledger.models.expense import (
    Expense,
    NewExpense,
    validate_expense,
    validate_new_expense,
)
from expense_ledger.models.ledger import LedgerAction, LedgerState, OperationKind
from expense_ledger.services.session import SessionInterface
from expense_ledger.services.storage import ExpenseStorageInterface
from expense_ledger.store.reducer import initial_state, reduce
from expense_ledger.store.sync import CancellationToken, SyncController, SyncOutcome


Listener = Callable[[LedgerState, LedgerAction], None]

FETCH_CHANNEL = "fetch"

logger = structlog.get_logger(__name__)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class LedgerStore:
    """
    Reactive container for the expense ledger.

    Operations are coroutines returning a SyncOutcome. They do not
    raise for remote, validation or session failures - check
    `outcome.ok` or `store.state.last_error`.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        session: SessionInterface,
        audit_logger: Optional[AuditLogger] = None,
        resync_after_write: bool = False,
    ):
        """
        Args:
            storage: Remote persistence backend
            session: Supplies the owner id for every request
            audit_logger: Receives one event per transition
            resync_after_write: Default for the `resync` flag of
                                add/update/remove
        """
        self._storage = storage
        self._session = session
        self._state = initial_state()
        self._listeners: list[Listener] = []
        self._audit = audit_logger or AuditLogger()
        self._sync = SyncController(self._dispatch, self._audit)
        self.resync_after_write = resync_after_write

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def items(self) -> tuple[Expense, ...]:
        return self._state.items

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call `listener(state, action)` after every transition.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, action: LedgerAction) -> LedgerState:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            try:
                listener(self._state, action)
            except Exception:
                # A broken consumer must not stop the others or the commit
                logger.exception("listener_failed", action=action.name)
        return self._state

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def fetch_all(
        self,
        token: Optional[CancellationToken] = None,
    ) -> SyncOutcome:
        """Replace the ledger with every expense of the current owner."""

        async def operation() -> tuple[Expense, ...]:
            owner = self._session.require_owner()
            return tuple(await self._storage.fetch_all(owner))

        return await self._sync.run(
            OperationKind.FETCH_ALL,
            operation,
            channel=FETCH_CHANNEL,
            token=token,
        )

    async def fetch_month(
        self,
        year: int,
        month: int,
        token: Optional[CancellationToken] = None,
    ) -> SyncOutcome:
        """Replace the ledger with the owner's expenses of one calendar month."""
        date_from, date_to = month_bounds(year, month)

        async def operation() -> tuple[Expense, ...]:
            owner = self._session.require_owner()
            return tuple(await self._storage.fetch_range(owner, date_from, date_to))

        return await self._sync.run(
            OperationKind.FETCH_MONTH,
            operation,
            channel=FETCH_CHANNEL,
            token=token,
        )

    async def add(
        self,
        expense: Union[NewExpense, dict[str, Any]],
        resync: Optional[bool] = None,
        token: Optional[CancellationToken] = None,
    ) -> SyncOutcome:
        """
        Persist a new expense and put it at the top of the ledger.

        Input is validated before anything is sent; a malformed
        amount or an empty description/date fails the operation
        without a remote call.
        """

        async def operation() -> Expense:
            new_expense = validate_new_expense(expense)
            owner = self._session.require_owner()
            return await self._storage.insert(owner, new_expense)

        outcome = await self._sync.run(OperationKind.ADD, operation, token=token)
        return await self._maybe_resync(outcome, resync)

    async def update(
        self,
        expense: Union[Expense, dict[str, Any]],
        resync: Optional[bool] = None,
        token: Optional[CancellationToken] = None,
    ) -> SyncOutcome:
        """
        Replace an expense (matched by id) with a new version.

        If the ledger does not hold that id the committed result is
        dropped and the items stay unchanged.
        """
        expense_id = _expense_id(expense)

        async def operation() -> Expense:
            owner = self._session.require_owner()
            data = expense
            if isinstance(data, dict) and not data.get("owner"):
                data = {**data, "owner": owner}
            record = validate_expense(data)
            return await self._storage.update(owner, record)

        outcome = await self._sync.run(
            OperationKind.UPDATE,
            operation,
            channel=f"update:{expense_id}" if expense_id else None,
            token=token,
            entity_id=expense_id,
        )
        return await self._maybe_resync(outcome, resync)

    async def remove(
        self,
        expense_id: str,
        resync: Optional[bool] = None,
        token: Optional[CancellationToken] = None,
    ) -> SyncOutcome:
        """Delete an expense by id. Unknown ids succeed as a no-op."""

        async def operation() -> str:
            owner = self._session.require_owner()
            await self._storage.delete(owner, expense_id)
            return expense_id

        outcome = await self._sync.run(
            OperationKind.REMOVE,
            operation,
            channel=f"remove:{expense_id}",
            token=token,
            entity_id=expense_id,
        )
        return await self._maybe_resync(outcome, resync)

    def clear_error(self) -> LedgerState:
        """Forget the last error message."""
        state = self._dispatch(LedgerAction(kind=OperationKind.CLEAR_ERROR))
        self._audit.log_error_cleared()
        return state

    async def _maybe_resync(
        self,
        outcome: SyncOutcome,
        resync: Optional[bool],
    ) -> SyncOutcome:
        if resync is None:
            resync = self.resync_after_write
        if not resync or not outcome.ok:
            return outcome
        await self.fetch_all()
        return outcome.model_copy(update={"state": self._state})


def _expense_id(expense: Union[Expense, dict[str, Any]]) -> Optional[str]:
    if isinstance(expense, Expense):
        return expense.id
    if isinstance(expense, dict) and expense.get("id"):
        return str(expense["id"])
    return None
