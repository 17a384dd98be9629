"""Tests for the current-month expense analysis."""

import math
from datetime import datetime
from decimal import Decimal

import pytest

from expense_insights.schemas.expense import BudgetConfig
from expense_insights.services.expense_analysis import (
    month_bounds,
    percent_of,
    prepare_expense_analysis,
)

from conftest import NOW, make_expense


def test_empty_expenses(budget):
    summary = prepare_expense_analysis([], budget, now=NOW)
    assert summary.total_expenses == 0
    assert summary.total_spent == 0
    assert summary.average_expense == 0
    assert summary.budget_used_percent == 0
    assert summary.top_categories == []
    assert summary.high_expenses == []
    assert summary.days_in_month == 31
    assert summary.current_day == 15


def test_only_current_month_is_counted(budget):
    expenses = [
        make_expense("1", "100", date=datetime(2026, 10, 1, 0, 0)),
        make_expense("2", "50", date=datetime(2026, 10, 31, 23, 59)),
        make_expense("3", "999", date=datetime(2026, 9, 30, 23, 59)),
        make_expense("4", "999", date=datetime(2026, 11, 1, 0, 0)),
    ]
    summary = prepare_expense_analysis(expenses, budget, now=NOW)
    assert summary.total_expenses == 2
    assert summary.total_spent == 150
    assert summary.average_expense == 75
    assert summary.budget_used_percent == pytest.approx(7.5)


def test_top_categories_sorted_and_capped(budget):
    expenses = [
        make_expense("1", "10", category="food"),
        make_expense("2", "40", category="rent"),
        make_expense("3", "25", category="transport"),
        make_expense("4", "5", category="shopping"),
        make_expense("5", "20", category="food"),
    ]
    summary = prepare_expense_analysis(expenses, budget, now=NOW)
    assert summary.top_categories == [("rent", 40.0), ("food", 30.0), ("transport", 25.0)]


def test_top_category_ties_keep_first_seen_order(budget):
    expenses = [
        make_expense("1", "10", category="medical"),
        make_expense("2", "10", category="education"),
        make_expense("3", "10", category="utilities"),
        make_expense("4", "10", category="other"),
    ]
    summary = prepare_expense_analysis(expenses, budget, now=NOW)
    assert [name for name, _ in summary.top_categories] == ["medical", "education", "utilities"]


def test_high_expenses_sorted_and_capped(budget):
    expenses = [make_expense(str(i), str(i + 1)) for i in range(15)]
    summary = prepare_expense_analysis(expenses, budget, now=NOW)
    amounts = [e.amount for e in summary.high_expenses]
    assert len(amounts) == 10
    assert amounts == sorted(amounts, reverse=True)
    assert amounts[0] == Decimal("15")


def test_high_expense_ties_keep_input_order(budget):
    expenses = [make_expense("a", "30"), make_expense("b", "30"), make_expense("c", "40")]
    summary = prepare_expense_analysis(expenses, budget, now=NOW)
    assert [e.id for e in summary.high_expenses] == ["c", "a", "b"]


def test_zero_monthly_budget_is_not_fatal():
    zero = BudgetConfig(monthly=0, weekly=0, savings_goal=0)

    summary = prepare_expense_analysis([make_expense("1", "10")], zero, now=NOW)
    assert math.isinf(summary.budget_used_percent)

    summary = prepare_expense_analysis([], zero, now=NOW)
    assert math.isnan(summary.budget_used_percent)


def test_inputs_are_not_mutated(budget):
    expenses = [make_expense("1", "10"), make_expense("2", "30")]
    prepare_expense_analysis(expenses, budget, now=NOW)
    assert [e.id for e in expenses] == ["1", "2"]


def test_month_bounds_handles_leap_february():
    first, last = month_bounds(datetime(2028, 2, 10))
    assert first.day == 1
    assert last.day == 29


def test_percent_of():
    assert percent_of(50, 200) == 25
    assert percent_of(-10, 0) == -math.inf
