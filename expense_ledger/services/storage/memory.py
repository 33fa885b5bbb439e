"""
In-Memory Storage Implementation

Used by tests and for running the ledger without a configured
spreadsheet. Behaves like a remote service: it assigns ids, scopes
every call by owner and returns copies, never the stored objects.
"""

import asyncio
from datetime import date
from typing import Optional
from uuid import uuid4

from expense_ledger.models.expense import Expense, NewExpense
from expense_ledger.services.storage.interface import (
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
    sort_newest_first,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """
    Dict-backed expense storage.

    Supports fault injection: `fail_next(message)` makes the next call
    raise StorageError, and `latency` delays every call so tests can
    overlap requests.
    """

    def __init__(
        self,
        expenses: Optional[list[Expense]] = None,
        latency: float = 0.0,
    ):
        self._rows: dict[str, Expense] = {}
        for expense in expenses or []:
            self._rows[expense.id] = expense
        self.latency = latency
        self._failures: list[StorageError] = []
        self.calls: list[str] = []

    def fail_next(self, message: str = "Storage unavailable") -> None:
        """Queue a failure for the next call."""
        self._failures.append(StorageError(message))

    async def _enter(self, call: str) -> None:
        self.calls.append(call)
        if self.latency:
            await asyncio.sleep(self.latency)
        if self._failures:
            raise self._failures.pop(0)

    def _owned(self, owner: str) -> list[Expense]:
        return [e for e in self._rows.values() if e.owner == owner]

    async def fetch_all(self, owner: str) -> list[Expense]:
        await self._enter("fetch_all")
        return sort_newest_first(self._owned(owner))

    async def fetch_range(
        self,
        owner: str,
        date_from: date,
        date_to: date,
    ) -> list[Expense]:
        await self._enter("fetch_range")
        return sort_newest_first([
            e for e in self._owned(owner)
            if date_from <= e.date <= date_to
        ])

    async def insert(self, owner: str, expense: NewExpense) -> Expense:
        await self._enter("insert")
        stored = expense.with_owner(uuid4().hex, owner)
        self._rows[stored.id] = stored
        return stored

    async def update(self, owner: str, expense: Expense) -> Expense:
        await self._enter("update")
        existing = self._rows.get(expense.id)
        if existing is None or existing.owner != owner:
            raise NotFoundError(f"Expense not found: {expense.id}")
        stored = expense.to_new().with_owner(expense.id, owner)
        self._rows[stored.id] = stored
        return stored

    async def delete(self, owner: str, expense_id: str) -> None:
        await self._enter("delete")
        existing = self._rows.get(expense_id)
        if existing is not None and existing.owner == owner:
            del self._rows[expense_id]
