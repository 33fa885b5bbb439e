"""
Derived Analytics Models

Everything here is computed from the ledger on demand and never
persisted. The analytics engine is the only producer.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from expense_ledger.models.expense import Expense, ExpenseCategory


class CategoryAggregate(BaseModel):
    """Spend for one category in the current month."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    amount_sum: Decimal = Field(ge=0)
    percent_of_month_total: int = Field(
        ge=0,
        description="Share of the month total, rounded half-up to a whole percent"
    )


class DailyPoint(BaseModel):
    """One day of the 7-day spending series."""
    model_config = ConfigDict(frozen=True)

    day: datetime.date
    label: str = Field(
        ...,
        description="Short weekday name, e.g. 'Mon'"
    )
    amount_sum: Decimal = Field(ge=0)


class BudgetProjection(BaseModel):
    """
    Linear end-of-month projection.

    `over_budget_by` is signed: negative means the projection lands
    under budget by that much.
    """
    model_config = ConfigDict(frozen=True)

    budget: Decimal
    month_total_so_far: Decimal
    average_daily_spend: Decimal
    days_remaining_in_month: int = Field(ge=0)
    projected_month_total: Decimal
    over_budget_by: Decimal
    is_over_budget: bool
    required_daily_cut: Optional[Decimal] = Field(
        default=None,
        description="Daily reduction needed to land on budget "
                    "(None when under budget or on the last day)"
    )
    recommended_daily_max: Decimal = Field(
        ...,
        description="Budget spread over a 30-day month, shown next to the average"
    )


class CategoryBudgetStatus(BaseModel):
    """Whether a category is eating more than its even share of the budget."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    amount_sum: Decimal
    share_of_budget: Decimal
    is_high: bool


class ProgressBand(str, Enum):
    """Colour band of the budget progress bar."""
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class BudgetProgress(BaseModel):
    """How much of the monthly budget is used up."""
    model_config = ConfigDict(frozen=True)

    budget: Decimal
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal = Field(
        ge=0,
        le=100,
        description="Spent as a percent of budget, capped at 100"
    )
    band: ProgressBand


class ExpenseFilterSummary(BaseModel):
    """Count, total and average of a filtered expense list."""
    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=0)
    total: Decimal
    average: Decimal


class AnalyticsSnapshot(BaseModel):
    """
    Every metric for one (items, now) pair.

    This is the single contract consumers should read from - there is
    no second place that computes category percentages.
    """
    model_config = ConfigDict(frozen=True)

    as_of: datetime.date
    month_total: Decimal
    last_month_total: Decimal
    average_daily: Decimal
    percent_change: Decimal
    largest_expense: Optional[Expense] = None
    daily_series: list[DailyPoint] = Field(default_factory=list)
    categories: list[CategoryAggregate] = Field(default_factory=list)
    category_budget: list[CategoryBudgetStatus] = Field(default_factory=list)
    projection: BudgetProjection
    progress: BudgetProgress
    recent: list[Expense] = Field(default_factory=list)
