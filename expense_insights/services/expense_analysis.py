"""Expense analysis: reduces raw expenses to a current-month summary.

The summary is what the insights prompt is built from. It is computed fresh
on every call and never stored.
"""

import calendar
import math
from dataclasses import dataclass, field
from datetime import date, datetime

from expense_insights.schemas.expense import BudgetConfig, ExpenseRecord

TOP_CATEGORIES_LIMIT = 3
HIGH_EXPENSES_LIMIT = 10


@dataclass
class AnalysisSummary:
    """Current-month figures for one user."""

    total_expenses: int
    total_spent: float
    budget_used_percent: float  # inf / nan when the monthly budget is 0
    average_expense: float
    days_in_month: int
    current_day: int
    top_categories: list[tuple[str, float]] = field(default_factory=list)
    high_expenses: list[ExpenseRecord] = field(default_factory=list)


def month_bounds(now: datetime) -> tuple[date, date]:
    """Return (first day, last day) of the month containing ``now``."""
    days_in_month = calendar.monthrange(now.year, now.month)[1]
    return date(now.year, now.month, 1), date(now.year, now.month, days_in_month)


def percent_of(part: float, whole: float) -> float:
    """``part / whole * 100`` without raising on a zero ``whole``.

    Returns ``inf`` (or ``-inf``) for a non-zero part and ``nan`` for 0 / 0.
    """
    if whole == 0:
        if part == 0:
            return math.nan
        return math.copysign(math.inf, part)
    return part / whole * 100


def prepare_expense_analysis(
    expenses: list[ExpenseRecord],
    budget: BudgetConfig,
    now: datetime | None = None,
) -> AnalysisSummary:
    """Summarize the expenses that fall in the current month."""
    now = now or datetime.now()
    month_start, month_end = month_bounds(now)

    monthly_expenses = [
        e for e in expenses if month_start <= e.date.date() <= month_end
    ]

    # Insertion order = first-encountered order, kept by the stable sort below
    category_totals: dict[str, float] = {}
    for expense in monthly_expenses:
        category_totals[expense.category] = (
            category_totals.get(expense.category, 0.0) + float(expense.amount)
        )

    total_spent = sum(float(e.amount) for e in monthly_expenses)
    average_expense = total_spent / max(len(monthly_expenses), 1)

    top_categories = sorted(
        category_totals.items(), key=lambda item: item[1], reverse=True
    )[:TOP_CATEGORIES_LIMIT]
    high_expenses = sorted(
        monthly_expenses, key=lambda e: e.amount, reverse=True
    )[:HIGH_EXPENSES_LIMIT]

    return AnalysisSummary(
        total_expenses=len(monthly_expenses),
        total_spent=total_spent,
        budget_used_percent=percent_of(total_spent, float(budget.monthly)),
        average_expense=average_expense,
        days_in_month=month_end.day,
        current_day=now.day,
        top_categories=top_categories,
        high_expenses=high_expenses,
    )
