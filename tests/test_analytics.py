"""Tests for the analytics engine."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from expense_ledger.analytics import (
    average_daily,
    budget_progress,
    budget_projection,
    category_aggregates,
    category_budget_status,
    current_month_items,
    daily_series,
    filter_expenses,
    largest_expense,
    last_month_items,
    percent_change,
    recent_expenses,
    summarize,
    summarize_expenses,
    total,
)
from expense_ledger.models.analytics import ProgressBand
from expense_ledger.models.expense import ExpenseCategory

from factories import make_expense


BUDGET = Decimal("2000")


class TestMonthTotals:
    """Month filters, totals and month-over-month change."""

    def test_current_and_last_month(self):
        items = [
            make_expense("a", date(2024, 3, 1), "100"),
            make_expense("b", date(2024, 2, 28), "40"),
            make_expense("c", date(2023, 3, 1), "999"),
        ]
        now = date(2024, 3, 10)
        assert [e.id for e in current_month_items(items, now)] == ["a"]
        assert [e.id for e in last_month_items(items, now)] == ["b"]

    def test_january_compares_against_previous_december(self):
        items = [
            make_expense("jan", date(2024, 1, 3), "150"),
            make_expense("dec", date(2023, 12, 20), "100"),
            make_expense("old-jan", date(2023, 1, 3), "500"),
        ]
        now = date(2024, 1, 15)
        assert total(last_month_items(items, now)) == Decimal("100")
        assert percent_change(Decimal("150"), Decimal("100")) == Decimal("50")

    def test_percent_change_without_last_month_is_zero(self):
        assert percent_change(Decimal("150"), Decimal("0")) == Decimal("0")

    def test_total_of_nothing(self):
        assert total([]) == Decimal("0")

    def test_average_daily_on_first_day_is_month_total(self):
        assert average_daily(Decimal("80"), date(2024, 5, 1)) == Decimal("80")


class TestLargestExpense:
    """Largest single expense of the month."""

    def test_none_when_empty(self):
        assert largest_expense([]) is None

    def test_first_wins_tie(self):
        items = [
            make_expense("first", date(2024, 3, 2), "50"),
            make_expense("second", date(2024, 3, 1), "50"),
            make_expense("small", date(2024, 3, 3), "5"),
        ]
        assert largest_expense(items).id == "first"


class TestDailySeries:
    """Seven-day window ending today."""

    def test_labels_follow_weekdays(self):
        # 2024-01-07 is a Sunday
        series = daily_series([], date(2024, 1, 7))
        assert len(series) == 7
        assert [p.label for p in series] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert len({p.label for p in series}) == 7
        assert series[0].day == date(2024, 1, 1)
        assert all(p.amount_sum == Decimal("0") for p in series)

    def test_window_crosses_month_boundary(self):
        items = [
            make_expense("a", date(2024, 2, 28), "12.345"),
            make_expense("b", date(2024, 2, 28), "1"),
            make_expense("c", date(2024, 3, 2), "3"),
            make_expense("too-old", date(2024, 2, 24), "100"),
        ]
        series = daily_series(items, date(2024, 3, 2))

        assert series[0].day == date(2024, 2, 25)
        assert series[-1].day == date(2024, 3, 2)
        by_day = {p.day: p.amount_sum for p in series}
        assert by_day[date(2024, 2, 28)] == Decimal("13.35")
        assert by_day[date(2024, 3, 2)] == Decimal("3.00")
        assert sum(by_day.values()) == Decimal("16.35")

    def test_accepts_datetime_now(self):
        items = [make_expense("a", date(2024, 3, 2), "3")]
        series = daily_series(items, datetime(2024, 3, 2, 18, 30))
        assert series[-1].amount_sum == Decimal("3.00")


class TestCategoryAggregates:
    """Per-category sums and percentages."""

    def test_two_categories(self):
        items = [
            make_expense("a", date(2024, 3, 1), "100", ExpenseCategory.FOOD),
            make_expense("b", date(2024, 3, 2), "50", ExpenseCategory.TRANSPORT),
        ]
        aggregates = category_aggregates(items)
        assert [(a.category, a.amount_sum, a.percent_of_month_total) for a in aggregates] == [
            (ExpenseCategory.FOOD, Decimal("100"), 67),
            (ExpenseCategory.TRANSPORT, Decimal("50"), 33),
        ]

    def test_rounds_half_up(self):
        items = [
            make_expense("a", date(2024, 3, 1), "1", ExpenseCategory.FOOD),
            make_expense("b", date(2024, 3, 2), "7", ExpenseCategory.BILLS),
        ]
        percents = {a.category: a.percent_of_month_total for a in category_aggregates(items)}
        # 12.5 and 87.5
        assert percents == {ExpenseCategory.FOOD: 13, ExpenseCategory.BILLS: 88}

    def test_sums_add_up_to_month_total(self):
        items = [
            make_expense("a", date(2024, 3, 1), "10.10", ExpenseCategory.FOOD),
            make_expense("b", date(2024, 3, 2), "3.33", ExpenseCategory.FOOD),
            make_expense("c", date(2024, 3, 3), "7", ExpenseCategory.SHOPPING),
            make_expense("d", date(2024, 3, 4), "0.57", ExpenseCategory.OTHER),
        ]
        aggregates = category_aggregates(items)
        assert sum(a.amount_sum for a in aggregates) == total(items)
        assert len(aggregates) == 3

    def test_zero_total_gives_zero_percent(self):
        items = [make_expense("a", date(2024, 3, 1), "0")]
        assert category_aggregates(items)[0].percent_of_month_total == 0

    def test_empty(self):
        assert category_aggregates([]) == []
        assert category_budget_status([], BUDGET) == []

    def test_high_spend_flag_uses_present_categories(self):
        items = [
            make_expense("a", date(2024, 3, 1), "1200", ExpenseCategory.FOOD),
            make_expense("b", date(2024, 3, 2), "100", ExpenseCategory.TRANSPORT),
        ]
        statuses = category_budget_status(category_aggregates(items), BUDGET)
        flags = {s.category: s.is_high for s in statuses}
        assert flags == {ExpenseCategory.FOOD: True, ExpenseCategory.TRANSPORT: False}
        assert statuses[0].share_of_budget == Decimal("1000")


class TestBudget:
    """Projection and progress."""

    def test_projection_over_budget(self):
        projection = budget_projection(Decimal("1800"), date(2024, 4, 2), BUDGET)
        assert projection.average_daily_spend == Decimal("900")
        assert projection.days_remaining_in_month == 28
        assert projection.projected_month_total == Decimal("27000")
        assert projection.is_over_budget
        assert projection.over_budget_by == Decimal("25000")
        assert projection.required_daily_cut == Decimal("25000") / Decimal("28")

    def test_projection_recommends_budget_over_thirty_days(self):
        projection = budget_projection(Decimal("0"), date(2024, 2, 10), Decimal("3000"))
        assert projection.recommended_daily_max == Decimal("100")

    def test_projection_on_last_day_has_no_cut(self):
        projection = budget_projection(Decimal("3000"), date(2024, 4, 30), BUDGET)
        assert projection.days_remaining_in_month == 0
        assert projection.is_over_budget
        assert projection.required_daily_cut is None

    def test_projection_under_budget(self):
        projection = budget_projection(Decimal("300"), date(2024, 4, 15), BUDGET)
        assert not projection.is_over_budget
        assert projection.over_budget_by < 0
        assert projection.required_daily_cut is None

    def test_progress_warning_band(self):
        progress = budget_progress(Decimal("1500"), BUDGET)
        assert progress.percent_used == Decimal("75")
        assert progress.band == ProgressBand.WARNING
        assert progress.remaining == Decimal("500")

    def test_progress_caps_at_hundred(self):
        progress = budget_progress(Decimal("2500"), BUDGET)
        assert progress.percent_used == Decimal("100")
        assert progress.band == ProgressBand.CRITICAL
        assert progress.remaining == Decimal("-500")

    def test_progress_good_band(self):
        assert budget_progress(Decimal("100"), BUDGET).band == ProgressBand.GOOD

    def test_progress_with_zero_budget_is_zero_percent(self):
        progress = budget_progress(Decimal("10"), Decimal("0"))
        assert progress.percent_used == Decimal("0")
        assert progress.band == ProgressBand.GOOD
        assert progress.remaining == Decimal("-10")

    def test_summarize_with_zero_budget(self):
        items = [make_expense("a", date(2024, 3, 1), "10")]
        snapshot = summarize(items, date(2024, 3, 5), Decimal("0"))
        assert snapshot.progress.percent_used == Decimal("0")
        assert snapshot.projection.is_over_budget
        assert snapshot.projection.recommended_daily_max == Decimal("0")


class TestLists:
    """Recent list, search and filter summary."""

    @pytest.fixture
    def items(self):
        return [
            make_expense("a", date(2024, 3, 6), "30", ExpenseCategory.FOOD, "Coffee beans"),
            make_expense("b", date(2024, 3, 5), "10", ExpenseCategory.FOOD, "coffee shop"),
            make_expense("c", date(2024, 3, 4), "50", ExpenseCategory.TRANSPORT, "Train"),
            make_expense("d", date(2024, 3, 3), "5", ExpenseCategory.OTHER, "Tip"),
            make_expense("e", date(2024, 3, 2), "1", ExpenseCategory.OTHER, "Stamp"),
            make_expense("f", date(2024, 3, 1), "2", ExpenseCategory.OTHER, "Pen"),
        ]

    def test_recent_keeps_ledger_order(self, items):
        assert [e.id for e in recent_expenses(items)] == ["a", "b", "c", "d", "e"]
        assert [e.id for e in recent_expenses(items, limit=2)] == ["a", "b"]

    def test_search_is_case_insensitive(self, items):
        assert [e.id for e in filter_expenses(items, "COFFEE")] == ["a", "b"]

    def test_search_and_category(self, items):
        found = filter_expenses(items, "", ExpenseCategory.OTHER)
        assert [e.id for e in found] == ["d", "e", "f"]
        assert filter_expenses(items, "train", ExpenseCategory.FOOD) == []

    def test_summary(self, items):
        summary = summarize_expenses(filter_expenses(items, "coffee"))
        assert summary.count == 2
        assert summary.total == Decimal("40")
        assert summary.average == Decimal("20")

    def test_summary_of_nothing(self):
        summary = summarize_expenses([])
        assert summary.count == 0
        assert summary.average == Decimal("0")


class TestSnapshot:
    """The combined analytics snapshot."""

    def test_summarize(self):
        items = [
            make_expense("a", date(2024, 3, 5), "100", ExpenseCategory.FOOD),
            make_expense("b", date(2024, 3, 1), "50", ExpenseCategory.TRANSPORT),
            make_expense("c", date(2024, 2, 20), "100", ExpenseCategory.BILLS),
        ]
        snapshot = summarize(items, date(2024, 3, 5), BUDGET, recent_limit=2)

        assert snapshot.month_total == Decimal("150")
        assert snapshot.last_month_total == Decimal("100")
        assert snapshot.percent_change == Decimal("50")
        assert snapshot.average_daily == Decimal("30")
        assert snapshot.largest_expense.id == "a"
        assert [c.category for c in snapshot.categories] == [
            ExpenseCategory.FOOD,
            ExpenseCategory.TRANSPORT,
        ]
        assert len(snapshot.daily_series) == 7
        assert snapshot.daily_series[-1].amount_sum == Decimal("100.00")
        assert snapshot.projection.recommended_daily_max == BUDGET / Decimal("30")
        assert snapshot.progress.band == ProgressBand.GOOD
        assert [e.id for e in snapshot.recent] == ["a", "b"]

    def test_summarize_empty_ledger(self):
        snapshot = summarize([], date(2024, 3, 5), BUDGET)
        assert snapshot.month_total == Decimal("0")
        assert snapshot.largest_expense is None
        assert snapshot.categories == []
        assert snapshot.percent_change == Decimal("0")
        assert not snapshot.projection.is_over_budget
