"""
Core Expense Models

These models define the record schema shared by the ledger store,
the persistence backends and the analytics engine.

DESIGN DECISION: Expenses are immutable-by-replacement.
An update never mutates a record in place - the store swaps the
whole record for the one echoed back by the persistence service.
"""

import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    Values match what the persistence service stores, so they are
    human-readable rather than snake_case.
    """
    FOOD = "Food"
    TRANSPORT = "Transport"
    BILLS = "Bills"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    """How an expense was paid."""
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    UPI = "UPI"
    BANK_TRANSFER = "Bank Transfer"


class ExpenseValidationError(ValueError):
    """Expense input is malformed (bad amount, empty required field)."""
    pass


def parse_amount(value: Any) -> Decimal:
    """
    Parse a currency amount.

    Accepts Decimal, int, float or a numeric string.
    Rejects booleans, non-numeric strings, NaN/Infinity and negatives.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Amount is not a number: {value!r}")
    else:
        raise ValueError(f"Amount is not a number: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    if amount < 0:
        raise ValueError("Amount cannot be negative")
    return amount


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class NewExpense(BaseModel):
    """
    An expense that has not been persisted yet.

    Carries no id (the persistence service assigns it) and no owner
    (stamped from the active session when the write is issued).
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    date: datetime.date = Field(
        ...,
        description="Day the expense happened"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the money was spent on"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.FOOD,
        description="Expense category"
    )
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CREDIT_CARD,
        description="How it was paid"
    )
    amount: Decimal = Field(
        ...,
        description="Amount spent (non-negative)"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        return parse_amount(v)

    @field_validator('date', mode='before')
    @classmethod
    def validate_date_present(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Date is required")
        return v

    def with_owner(self, expense_id: str, owner: str) -> "Expense":
        """Build the persisted record once the service has assigned an id."""
        fields = self.model_dump(exclude={"id", "owner"})
        return Expense(id=expense_id, owner=owner, **fields)


class Expense(NewExpense):
    """
    A persisted expense.

    `id` is opaque and always comes from the persistence service.
    `owner` is a foreign key to the external session, not a
    reference the core resolves.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Identifier assigned by the persistence service"
    )
    owner: str = Field(
        ...,
        min_length=1,
        description="Identity of the owning user"
    )

    def to_new(self) -> NewExpense:
        """Strip identity fields (used when echoing back through a backend)."""
        return NewExpense(**self.model_dump(exclude={"id", "owner"}))


def validate_new_expense(data: Any) -> NewExpense:
    """
    Coerce raw input into a NewExpense.

    Raises ExpenseValidationError with one readable message so the
    store can surface it the same way as a transport failure.
    """
    if isinstance(data, NewExpense) and not isinstance(data, Expense):
        return data
    if isinstance(data, Expense):
        return data.to_new()
    try:
        return NewExpense.model_validate(data)
    except ValidationError as e:
        raise ExpenseValidationError(_format_errors(e)) from e


def validate_expense(data: Any) -> Expense:
    """Coerce raw input into a persisted Expense (id required)."""
    if isinstance(data, Expense):
        return data
    try:
        return Expense.model_validate(data)
    except ValidationError as e:
        raise ExpenseValidationError(_format_errors(e)) from e


def _format_errors(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "expense"
        parts.append(f"{field}: {err['msg']}")
    return "Invalid expense - " + "; ".join(parts)
