"""
Analytics Engine

DESIGN DECISION: Analytics are DETERMINISTIC and stateless.
Every function takes the ledger items (plus a reference "now" date)
and returns derived values. Nothing here reads the store, writes to
it, or caches results - call again whenever the items or the date
change.

Division-by-zero policy: percentages against an empty base are 0,
not "undefined". For month-over-month change this hides an
infinite increase (spend this month, none last month).
"""

import calendar
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

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
from expense_ledger.models.expense import Expense, ExpenseCategory


ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

SERIES_DAYS = 7

# Recommended daily max assumes a flat 30-day month
BUDGET_MONTH_DAYS = Decimal("30")

# weekday() order; fixed so labels don't depend on the process locale
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Progress bar thresholds (percent of budget used)
WARNING_THRESHOLD = Decimal("70")
CRITICAL_THRESHOLD = Decimal("90")


def _as_date(now: date) -> date:
    # datetime is a date subclass but never equals a plain date
    return date(now.year, now.month, now.day)


def _round_percent(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# MONTH FILTERS AND TOTALS
# =============================================================================

def previous_month(year: int, month: int) -> tuple[int, int]:
    """(year, month) of the month before, rolling January back a year."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def days_in_month(now: date) -> int:
    return calendar.monthrange(now.year, now.month)[1]


def items_in_month(items: Iterable[Expense], year: int, month: int) -> list[Expense]:
    """Items dated in the given calendar month, in their original order."""
    return [e for e in items if e.date.year == year and e.date.month == month]


def current_month_items(items: Iterable[Expense], now: date) -> list[Expense]:
    return items_in_month(items, now.year, now.month)


def last_month_items(items: Iterable[Expense], now: date) -> list[Expense]:
    year, month = previous_month(now.year, now.month)
    return items_in_month(items, year, month)


def total(items: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in items), ZERO)


def average_daily(month_total: Decimal, now: date) -> Decimal:
    """
    Month total divided by today's day-of-month.

    On the 1st this equals the month total.
    """
    return month_total / Decimal(now.day)


def largest_expense(items: Iterable[Expense]) -> Optional[Expense]:
    """Biggest amount; the first one wins a tie. None when there are no items."""
    largest = None
    for expense in items:
        if largest is None or expense.amount > largest.amount:
            largest = expense
    return largest


def percent_change(current_total: Decimal, previous_total: Decimal) -> Decimal:
    """Month-over-month change in percent; 0 when last month had no spend."""
    if previous_total == 0:
        return ZERO
    return (current_total - previous_total) / previous_total * HUNDRED


# =============================================================================
# SERIES AND BREAKDOWNS
# =============================================================================

def daily_series(items: Sequence[Expense], now: date) -> list[DailyPoint]:
    """
    Spend for each of the 7 days ending at `now`, oldest first.

    Matches exact dates only, so the window crosses month boundaries.
    Days without spend are 0.
    """
    today = _as_date(now)
    points = []
    for offset in range(SERIES_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        amount = total(e for e in items if e.date == day)
        points.append(DailyPoint(
            day=day,
            label=WEEKDAY_LABELS[day.weekday()],
            amount_sum=_to_cents(amount),
        ))
    return points


def category_aggregates(month_items: Iterable[Expense]) -> list[CategoryAggregate]:
    """
    Spend per category, largest first.

    Only categories with at least one item appear. Percentages are of
    the total of `month_items`, rounded half-up; 0 if that total is 0.
    """
    sums: dict[ExpenseCategory, Decimal] = {}
    for expense in month_items:
        sums[expense.category] = sums.get(expense.category, ZERO) + expense.amount

    grand_total = sum(sums.values(), ZERO)
    ordered = sorted(sums.items(), key=lambda kv: kv[1], reverse=True)

    aggregates = []
    for category, amount in ordered:
        percent = 0
        if grand_total > 0:
            percent = _round_percent(amount / grand_total * HUNDRED)
        aggregates.append(CategoryAggregate(
            category=category,
            amount_sum=amount,
            percent_of_month_total=percent,
        ))
    return aggregates


def category_budget_status(
    aggregates: Sequence[CategoryAggregate],
    budget: Decimal,
) -> list[CategoryBudgetStatus]:
    """
    Flag categories spending more than an even split of the budget.

    The split is over the categories present this month, not over
    every category that exists.
    """
    if not aggregates:
        return []
    share = Decimal(budget) / Decimal(len(aggregates))
    return [
        CategoryBudgetStatus(
            category=agg.category,
            amount_sum=agg.amount_sum,
            share_of_budget=share,
            is_high=agg.amount_sum > share,
        )
        for agg in aggregates
    ]


# =============================================================================
# BUDGET
# =============================================================================

def budget_projection(
    month_total: Decimal,
    now: date,
    budget: Decimal,
) -> BudgetProjection:
    """
    Linear projection of this month's spend to month end.

    `required_daily_cut` is only set when the projection is over
    budget and there are days left to cut from.
    """
    budget = Decimal(budget)
    average = average_daily(month_total, now)
    days_remaining = days_in_month(now) - now.day
    projected = month_total + average * days_remaining
    over_by = projected - budget
    is_over = projected > budget

    required_cut = None
    if is_over and days_remaining > 0:
        required_cut = over_by / Decimal(days_remaining)

    return BudgetProjection(
        budget=budget,
        month_total_so_far=month_total,
        average_daily_spend=average,
        days_remaining_in_month=days_remaining,
        projected_month_total=projected,
        over_budget_by=over_by,
        is_over_budget=is_over,
        required_daily_cut=required_cut,
        recommended_daily_max=budget / BUDGET_MONTH_DAYS,
    )


def budget_progress(month_total: Decimal, budget: Decimal) -> BudgetProgress:
    """
    How much of the budget is spent, capped at 100%.

    A budget of 0 or less gives 0% used, like the other percentages
    against an empty base.
    """
    budget = Decimal(budget)
    percent = ZERO
    if budget > 0:
        percent = min(month_total / budget * HUNDRED, HUNDRED)
    if percent < WARNING_THRESHOLD:
        band = ProgressBand.GOOD
    elif percent < CRITICAL_THRESHOLD:
        band = ProgressBand.WARNING
    else:
        band = ProgressBand.CRITICAL

    return BudgetProgress(
        budget=budget,
        spent=month_total,
        remaining=budget - month_total,
        percent_used=percent,
        band=band,
    )


# =============================================================================
# LISTS
# =============================================================================

def recent_expenses(items: Sequence[Expense], limit: int = 5) -> list[Expense]:
    """The first `limit` items in ledger order."""
    return list(items[:limit])


def filter_expenses(
    items: Iterable[Expense],
    search: str = "",
    category: Optional[ExpenseCategory] = None,
) -> list[Expense]:
    """
    Case-insensitive description search plus optional category.

    `category=None` means all categories.
    """
    needle = search.strip().lower()
    return [
        e for e in items
        if needle in e.description.lower()
        and (category is None or e.category == category)
    ]


def summarize_expenses(items: Sequence[Expense]) -> ExpenseFilterSummary:
    """Count, total and average; average is 0 for an empty list."""
    amount = total(items)
    average = amount / len(items) if items else ZERO
    return ExpenseFilterSummary(count=len(items), total=amount, average=average)


# =============================================================================
# SNAPSHOT
# =============================================================================

def summarize(
    items: Sequence[Expense],
    now: date,
    budget: Decimal,
    recent_limit: int = 5,
) -> AnalyticsSnapshot:
    """
    Every metric for one (items, now) pair.

    This is the one place category percentages are computed for
    display, always against the current month total.
    """
    today = _as_date(now)
    this_month = current_month_items(items, today)
    month_total = total(this_month)
    last_total = total(last_month_items(items, today))
    aggregates = category_aggregates(this_month)

    return AnalyticsSnapshot(
        as_of=today,
        month_total=month_total,
        last_month_total=last_total,
        average_daily=average_daily(month_total, today),
        percent_change=percent_change(month_total, last_total),
        largest_expense=largest_expense(this_month),
        daily_series=daily_series(items, today),
        categories=aggregates,
        category_budget=category_budget_status(aggregates, budget),
        projection=budget_projection(month_total, today, budget),
        progress=budget_progress(month_total, budget),
        recent=recent_expenses(items, recent_limit),
    )
