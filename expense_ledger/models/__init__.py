"""
Data Models Package

This package contains all Pydantic models used by the expense ledger.
All data flowing through the store and the analytics engine must
conform to these schemas.
"""

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
from expense_ledger.models.analytics import (
    AnalyticsSnapshot,
    BudgetProgress,
    BudgetProjection,
    CategoryAggregate,
    CategoryBudgetStatus,
    DailyPoint,
    ExpenseFilterSummary,
    ProgressBand,
)
from expense_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseCategory",
    "ExpenseValidationError",
    "NewExpense",
    "PaymentMethod",
    "parse_amount",
    "validate_expense",
    "validate_new_expense",
    # Ledger state
    "LedgerAction",
    "LedgerState",
    "LedgerStatus",
    "OperationKind",
    "SyncPhase",
    # Analytics models
    "AnalyticsSnapshot",
    "BudgetProgress",
    "BudgetProjection",
    "CategoryAggregate",
    "CategoryBudgetStatus",
    "DailyPoint",
    "ExpenseFilterSummary",
    "ProgressBand",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
