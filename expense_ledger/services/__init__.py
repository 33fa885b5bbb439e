"""Services package."""

from expense_ledger.services.session import (
    AuthenticationRequiredError,
    InMemorySession,
    LoginCredentials,
    SessionError,
    SessionInterface,
)
from expense_ledger.services.storage import (
    ConnectionError,
    ExpenseStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    InMemoryExpenseStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Session
    "AuthenticationRequiredError",
    "InMemorySession",
    "LoginCredentials",
    "SessionError",
    "SessionInterface",
    # Storage services
    "ConnectionError",
    "ExpenseStorageInterface",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "InMemoryExpenseStorage",
    "NotFoundError",
    "StorageError",
]
