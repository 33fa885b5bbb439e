"""
Abstract Storage Interface

DESIGN DECISION: The remote persistence service is an opaque
collaborator. We define the contract the ledger store relies on so
that we can:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for testing
3. Keep the store decoupled from the backend

Every call is scoped to an owner. Scoping is enforced here, in the
backend, not by the store.
"""

from abc import ABC, abstractmethod
from datetime import date

from expense_ledger.models.expense import Expense, NewExpense


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense persistence.

    Any backend (Google Sheets, PostgreSQL, in-memory)
    must implement these methods.
    """

    @abstractmethod
    async def fetch_all(self, owner: str) -> list[Expense]:
        """
        Fetch every expense of an owner.

        Returns:
            Expenses ordered by date descending

        Raises:
            StorageError: If the backend call fails
        """
        pass

    @abstractmethod
    async def fetch_range(
        self,
        owner: str,
        date_from: date,
        date_to: date,
    ) -> list[Expense]:
        """
        Fetch an owner's expenses dated within [date_from, date_to].

        Both bounds are inclusive.

        Returns:
            Expenses ordered by date descending
        """
        pass

    @abstractmethod
    async def insert(self, owner: str, expense: NewExpense) -> Expense:
        """
        Persist a new expense.

        The backend assigns the id.

        Returns:
            The stored record, as the backend now holds it
        """
        pass

    @abstractmethod
    async def update(self, owner: str, expense: Expense) -> Expense:
        """
        Replace an existing expense (matched by id).

        Returns:
            The stored record after the update

        Raises:
            NotFoundError: If the owner has no expense with this id
        """
        pass

    @abstractmethod
    async def delete(self, owner: str, expense_id: str) -> None:
        """
        Delete an expense by id.

        Deleting an id that does not exist is not an error.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations (remote call failed)."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


def sort_newest_first(expenses: list[Expense]) -> list[Expense]:
    """Order expenses the way every backend must return them (date descending)."""
    return sorted(expenses, key=lambda e: e.date, reverse=True)
