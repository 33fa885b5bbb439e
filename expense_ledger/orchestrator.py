"""
Application wiring for the Expense Ledger

This module ties together settings, the session, the persistence
backend, the ledger store and the analytics engine.

DESIGN DECISION: Consumers (UIs, scripts) only ever get:
- the store (read state, subscribe, run operations)
- an analytics snapshot computed from the store's current items
They never talk to the persistence backend directly.
"""

from datetime import date
from typing import Optional

import structlog

from expense_ledger.analytics import summarize
from expense_ledger.audit import AuditLogger, configure_logging
from expense_ledger.config import AppSettings, get_settings
from expense_ledger.models.analytics import AnalyticsSnapshot
from expense_ledger.services.session import (
    InMemorySession,
    LoginCredentials,
    SessionInterface,
)
from expense_ledger.services.storage import (
    ExpenseStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    InMemoryExpenseStorage,
)
from expense_ledger.store import LedgerStore, SyncOutcome


logger = structlog.get_logger(__name__)


class ExpenseLedgerApp:
    """
    Facade over the store for a single user session.

    Login fetches the user's ledger; snapshot() derives every
    analytics figure from whatever the store currently holds.
    """

    def __init__(
        self,
        store: LedgerStore,
        session: SessionInterface,
        app_settings: AppSettings,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.store = store
        self.session = session
        self._settings = app_settings
        self._audit = audit_logger or AuditLogger()

    async def login(self, email: str, password: str) -> SyncOutcome:
        """
        Start a session and load the user's expenses.

        Raises:
            SessionError: If the credentials are rejected
        """
        await self.session.login(LoginCredentials(email=email, password=password))
        self._audit.log_session_logged_in(self.session.owner_id)
        return await self.store.fetch_all()

    async def logout(self) -> None:
        owner = self.session.owner_id
        await self.session.logout()
        self._audit.log_session_logged_out(owner)

    def snapshot(self, now: Optional[date] = None) -> AnalyticsSnapshot:
        """Analytics for the store's current items (recomputed every call)."""
        return summarize(
            self.store.items,
            now or date.today(),
            self._settings.monthly_budget,
            recent_limit=self._settings.recent_expenses_limit,
        )


def create_app_components(
    use_storage: bool = True,
    storage: Optional[ExpenseStorageInterface] = None,
    session: Optional[SessionInterface] = None,
) -> tuple[ExpenseLedgerApp, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run on in-memory storage.
        storage: Use this backend instead of building one
        session: Use this session instead of the configured one

    Returns:
        (app, sheets_client)
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, json_output=app_settings.log_json)

    audit_logger = AuditLogger()
    sheets_client = None

    if storage is None and use_storage:
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            storage = GoogleSheetsExpenseStorage(sheets_client)
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            storage = None
    if storage is None:
        storage = InMemoryExpenseStorage()

    if session is None:
        session = InMemorySession(users=settings.session.users)

    store = LedgerStore(
        storage=storage,
        session=session,
        audit_logger=audit_logger,
        resync_after_write=app_settings.resync_after_write,
    )
    app = ExpenseLedgerApp(store, session, app_settings, audit_logger)
    return app, sheets_client
