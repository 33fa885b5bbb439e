"""Shared fixtures: expenses, in-memory storage, a logged-in session."""

from datetime import date

import pytest

from expense_ledger.audit import AuditLogger
from expense_ledger.models.expense import Expense, ExpenseCategory
from expense_ledger.services.session import InMemorySession
from expense_ledger.services.storage import InMemoryExpenseStorage
from expense_ledger.store import LedgerStore

from factories import OWNER, make_expense


@pytest.fixture
def seeded_expenses() -> list[Expense]:
    return [
        make_expense("a", date(2024, 3, 1), "100"),
        make_expense("b", date(2024, 3, 5), "50", ExpenseCategory.TRANSPORT),
        make_expense("c", date(2024, 2, 20), "30", ExpenseCategory.BILLS),
    ]


@pytest.fixture
def storage(seeded_expenses) -> InMemoryExpenseStorage:
    return InMemoryExpenseStorage(seeded_expenses)


@pytest.fixture
def session() -> InMemorySession:
    return InMemorySession(users={OWNER: "secret"}, owner_id=OWNER)


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger(keep_history=True)


@pytest.fixture
def store(storage, session, audit_logger) -> LedgerStore:
    return LedgerStore(storage=storage, session=session, audit_logger=audit_logger)
