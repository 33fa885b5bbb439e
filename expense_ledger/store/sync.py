"""
Sync Controller

Wraps one remote call in the pending → fulfilled | rejected
lifecycle and commits its result into the store at most once.

DESIGN DECISION: Requests carry an id and a cancellation token, and
may share a channel with other requests of the same kind:
- every fetch shares the "fetch" channel
- updates of one expense share "update:<id>"
- removes of one expense share "remove:<id>"
- adds never share a channel

A request that completes after a newer request was issued on its
channel, or after its token was cancelled, is discarded instead of
committed. Otherwise results commit in completion order.

There are no retries. A failed request leaves the items as they
were and the caller decides whether to try again.
"""

import asyncio
from typing import Awaitable, Callable, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict

from expense_ledger.audit import AuditLogger
from expense_ledger.models.expense import ExpenseValidationError
from expense_ledger.models.ledger import (
    ActionPayload,
    LedgerAction,
    LedgerState,
    OperationKind,
    SyncPhase,
)
from expense_ledger.services.session import SessionError
from expense_ledger.services.storage import StorageError


# Fallback messages when an exception carries no text of its own
FAILURE_MESSAGES = {
    OperationKind.FETCH_ALL: "Failed to fetch expenses",
    OperationKind.FETCH_MONTH: "Failed to fetch expenses",
    OperationKind.ADD: "Failed to add expense",
    OperationKind.UPDATE: "Failed to update expense",
    OperationKind.REMOVE: "Failed to delete expense",
}


class CancellationToken:
    """
    Lets the context that started a request abandon it.

    A cancelled request still runs to completion on the remote side;
    its result is simply never committed.
    """

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._cancelled = True
        self.reason = reason


class SyncOutcome(BaseModel):
    """What happened to one request, and the state right after."""
    model_config = ConfigDict(frozen=True)

    request_id: str
    kind: OperationKind
    phase: SyncPhase
    state: LedgerState
    result: ActionPayload = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.phase == SyncPhase.FULFILLED


class SyncController:
    """
    Runs store operations through their lifecycle.

    `dispatch` applies an action to the store and returns the new
    state; the controller never touches state any other way.
    """

    def __init__(
        self,
        dispatch: Callable[[LedgerAction], LedgerState],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._dispatch = dispatch
        self._audit = audit_logger or AuditLogger()
        self._latest: dict[str, str] = {}

    async def run(
        self,
        kind: OperationKind,
        operation: Callable[[], Awaitable[ActionPayload]],
        channel: Optional[str] = None,
        token: Optional[CancellationToken] = None,
        entity_id: Optional[str] = None,
    ) -> SyncOutcome:
        """
        Execute `operation` and commit its result.

        Never raises for remote, validation or session failures; those
        end up in the returned outcome and in the ledger's last error.
        """
        request_id = uuid4().hex
        token = token or CancellationToken()
        if channel is not None:
            self._latest[channel] = request_id

        self._dispatch(LedgerAction(
            kind=kind,
            phase=SyncPhase.PENDING,
            request_id=request_id,
        ))
        self._audit.log_request_started(kind.value, request_id, entity_id)

        try:
            result = await operation()
        except asyncio.CancelledError:
            self._release(channel, request_id)
            self._discard(kind, request_id, "task cancelled", entity_id)
            raise
        except Exception as e:
            stale_reason = self._stale_reason(channel, request_id, token)
            self._release(channel, request_id)
            if stale_reason:
                return self._discard(kind, request_id, stale_reason, entity_id)
            return self._reject(kind, request_id, e, entity_id)

        stale_reason = self._stale_reason(channel, request_id, token)
        self._release(channel, request_id)
        if stale_reason:
            return self._discard(kind, request_id, stale_reason, entity_id)

        state = self._dispatch(LedgerAction(
            kind=kind,
            phase=SyncPhase.FULFILLED,
            request_id=request_id,
            payload=result,
        ))
        self._audit.log_request_succeeded(
            kind.value, request_id, len(state.items), entity_id
        )
        return SyncOutcome(
            request_id=request_id,
            kind=kind,
            phase=SyncPhase.FULFILLED,
            state=state,
            result=result,
        )

    def _stale_reason(
        self,
        channel: Optional[str],
        request_id: str,
        token: CancellationToken,
    ) -> Optional[str]:
        if token.cancelled:
            return token.reason or "cancelled by caller"
        if channel is not None and self._latest.get(channel) != request_id:
            return f"superseded on channel {channel}"
        return None

    def _release(self, channel: Optional[str], request_id: str) -> None:
        if channel is not None and self._latest.get(channel) == request_id:
            del self._latest[channel]

    def _discard(
        self,
        kind: OperationKind,
        request_id: str,
        reason: str,
        entity_id: Optional[str],
    ) -> SyncOutcome:
        state = self._dispatch(LedgerAction(
            kind=kind,
            phase=SyncPhase.DISCARDED,
            request_id=request_id,
        ))
        self._audit.log_request_discarded(kind.value, request_id, reason, entity_id)
        return SyncOutcome(
            request_id=request_id,
            kind=kind,
            phase=SyncPhase.DISCARDED,
            state=state,
            error=reason,
        )

    def _reject(
        self,
        kind: OperationKind,
        request_id: str,
        error: Exception,
        entity_id: Optional[str],
    ) -> SyncOutcome:
        message = str(error) or FAILURE_MESSAGES[kind]
        if isinstance(error, ExpenseValidationError):
            self._audit.log_validation_failed(kind.value, request_id, message)
        elif not isinstance(error, (StorageError, SessionError)):
            # Unexpected failure: still surfaced as one message
            message = f"{FAILURE_MESSAGES[kind]}: {message}"

        state = self._dispatch(LedgerAction(
            kind=kind,
            phase=SyncPhase.REJECTED,
            request_id=request_id,
            error=message,
        ))
        self._audit.log_request_failed(kind.value, request_id, message, entity_id)
        return SyncOutcome(
            request_id=request_id,
            kind=kind,
            phase=SyncPhase.REJECTED,
            state=state,
            error=message,
        )
