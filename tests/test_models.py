"""
Tests for the Expense Ledger

Test strategy:
1. Unit tests for individual components (models, reducer, analytics)
2. Integration tests for the store (with in-memory storage)
3. No real API calls in tests (fake worksheets, no network)
"""

import pytest
from datetime import date
from decimal import Decimal

from expense_ledger.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseValidationError,
    NewExpense,
    PaymentMethod,
    parse_amount,
    validate_expense,
    validate_new_expense,
)
from expense_ledger.models.ledger import (
    LedgerAction,
    LedgerState,
    LedgerStatus,
    OperationKind,
    SyncPhase,
)
from expense_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

from factories import make_expense


class TestExpenseModels:
    """Tests for expense Pydantic models."""

    def test_new_expense_creation(self):
        """Test NewExpense model creation."""
        expense = NewExpense(
            date=date(2024, 3, 1),
            description="Groceries",
            category=ExpenseCategory.FOOD,
            payment_method=PaymentMethod.UPI,
            amount="42.50",
        )
        assert expense.amount == Decimal("42.50")
        assert expense.category == ExpenseCategory.FOOD

    def test_new_expense_defaults(self):
        """Test that category and payment method default like the entry form."""
        expense = NewExpense(date=date(2024, 3, 1), description="Snack", amount=4)
        assert expense.category == ExpenseCategory.FOOD
        assert expense.payment_method == PaymentMethod.CREDIT_CARD

    def test_new_expense_parses_iso_date_string(self):
        """Test that ISO date strings are accepted."""
        expense = NewExpense(date="2024-03-01", description="Bus", amount=2)
        assert expense.date == date(2024, 3, 1)

    def test_description_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        expense = NewExpense(date=date(2024, 3, 1), description="  Taxi  ", amount=5)
        assert expense.description == "Taxi"

    def test_blank_description_rejected(self):
        """Test that a whitespace-only description is rejected."""
        with pytest.raises(ValueError):
            NewExpense(date=date(2024, 3, 1), description="   ", amount=5)

    def test_empty_date_rejected(self):
        """Test that an empty date string is rejected."""
        with pytest.raises(ValueError, match="Date is required"):
            NewExpense(date="", description="Taxi", amount=5)

    def test_negative_amount_rejected(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            NewExpense(date=date(2024, 3, 1), description="Refund", amount="-1")

    def test_non_numeric_amount_rejected(self):
        """Test that non-numeric amounts are rejected."""
        with pytest.raises(ValueError):
            NewExpense(date=date(2024, 3, 1), description="Tea", amount="ten")

    def test_expense_is_frozen(self):
        """Test that expenses cannot be mutated in place."""
        expense = make_expense("a", date(2024, 3, 1))
        with pytest.raises(ValueError):
            expense.amount = Decimal("1")

    def test_with_owner_and_to_new(self):
        """Test attaching and stripping identity fields."""
        new = NewExpense(date=date(2024, 3, 1), description="Tea", amount="3")
        stored = new.with_owner("id-1", "me")
        assert stored.id == "id-1"
        assert stored.owner == "me"
        assert stored.to_new() == new


class TestParseAmount:
    """Tests for amount parsing."""

    def test_accepts_numbers_and_strings(self):
        assert parse_amount(5) == Decimal("5")
        assert parse_amount(2.5) == Decimal("2.5")
        assert parse_amount(" 19.99 ") == Decimal("19.99")
        assert parse_amount(Decimal("0")) == Decimal("0")

    def test_rejects_booleans(self):
        with pytest.raises(ValueError):
            parse_amount(True)

    def test_rejects_nan_and_infinity(self):
        with pytest.raises(ValueError):
            parse_amount("NaN")
        with pytest.raises(ValueError):
            parse_amount("Infinity")

    def test_rejects_none(self):
        with pytest.raises(ValueError):
            parse_amount(None)


class TestValidationHelpers:
    """Tests for the validate_* helpers used by the store."""

    def test_validate_new_expense_from_dict(self):
        expense = validate_new_expense(
            {"date": "2024-03-01", "description": "Tea", "amount": "3"}
        )
        assert isinstance(expense, NewExpense)

    def test_validate_new_expense_strips_identity(self):
        """Passing a stored Expense yields a plain NewExpense."""
        expense = validate_new_expense(make_expense("a", date(2024, 3, 1)))
        assert type(expense) is NewExpense

    def test_validate_new_expense_error_message(self):
        with pytest.raises(ExpenseValidationError, match="amount"):
            validate_new_expense({"date": "2024-03-01", "description": "Tea", "amount": "x"})

    def test_validate_expense_requires_id(self):
        with pytest.raises(ExpenseValidationError, match="id"):
            validate_expense(
                {"date": "2024-03-01", "description": "Tea", "amount": "3", "owner": "me"}
            )


class TestLedgerModels:
    """Tests for ledger state and actions."""

    def test_initial_state(self):
        state = LedgerState()
        assert state.items == ()
        assert state.status == LedgerStatus.IDLE
        assert state.last_error is None
        assert state.in_flight == frozenset()

    def test_find(self):
        state = LedgerState(items=(make_expense("a", date(2024, 3, 1)),))
        assert state.find("a").id == "a"
        assert state.find("missing") is None

    def test_action_name(self):
        action = LedgerAction(kind=OperationKind.ADD, phase=SyncPhase.FULFILLED)
        assert action.name == "expenses/add/fulfilled"
        assert LedgerAction(kind=OperationKind.CLEAR_ERROR).name == "expenses/clear_error"

    def test_action_keeps_payload_types(self):
        expense = make_expense("a", date(2024, 3, 1))
        assert LedgerAction(kind=OperationKind.ADD, payload=expense).payload is expense
        assert LedgerAction(kind=OperationKind.REMOVE, payload="a").payload == "a"
        fetched = LedgerAction(kind=OperationKind.FETCH_ALL, payload=(expense,))
        assert fetched.payload == (expense,)


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.REQUEST_STARTED,
            description="Started fetch_all",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.request_failed("add", "req-1", "boom", entity_id="a")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "request_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["correlation_id"] == "req-1"
        assert log_dict["error_message"] == "boom"

    def test_builder_request_discarded(self):
        event = AuditEventBuilder.request_discarded("fetch_all", "req-2", "superseded")
        assert event.event_type == AuditEventType.REQUEST_DISCARDED
        assert event.severity == AuditSeverity.WARNING
        assert event.details["reason"] == "superseded"


class TestCategories:
    """Tests for the closed enumerations."""

    def test_all_categories_exist(self):
        expected = [
            "Food", "Transport", "Bills", "Shopping",
            "Entertainment", "Healthcare", "Education", "Other",
        ]
        assert [c.value for c in ExpenseCategory] == expected

    def test_payment_methods(self):
        expected = ["Cash", "Credit Card", "Debit Card", "UPI", "Bank Transfer"]
        assert [m.value for m in PaymentMethod] == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
