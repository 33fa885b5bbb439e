"""
Storage Services Package

Provides the abstract persistence contract and concrete backends.
Google Sheets is the remote backend; the in-memory backend backs tests
and unconfigured runs.
"""

from expense_ledger.services.storage.interface import (
    ConnectionError,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
)
from expense_ledger.services.storage.memory import InMemoryExpenseStorage
from expense_ledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
)

__all__ = [
    # Interface
    "ExpenseStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Backends
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "InMemoryExpenseStorage",
]
