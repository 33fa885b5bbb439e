"""Analytics package: pure derivations over the ledger items."""

from expense_ledger.analytics.engine import (
    average_daily,
    budget_progress,
    budget_projection,
    category_aggregates,
    category_budget_status,
    current_month_items,
    daily_series,
    days_in_month,
    filter_expenses,
    items_in_month,
    largest_expense,
    last_month_items,
    percent_change,
    previous_month,
    recent_expenses,
    summarize,
    summarize_expenses,
    total,
)

__all__ = [
    "average_daily",
    "budget_progress",
    "budget_projection",
    "category_aggregates",
    "category_budget_status",
    "current_month_items",
    "daily_series",
    "days_in_month",
    "filter_expenses",
    "items_in_month",
    "largest_expense",
    "last_month_items",
    "percent_change",
    "previous_month",
    "recent_expenses",
    "summarize",
    "summarize_expenses",
    "total",
]
