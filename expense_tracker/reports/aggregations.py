"""
Aggregation Functions

DESIGN DECISION: Every figure the dashboard and reports show is computed
here by a pure function over an explicit snapshot of expenses (and
categories, for names and colors) plus an explicit ``now``. Nothing is
cached and nothing reads storage, so the same inputs always give the same
numbers.

GUARANTEES:
- Numeric results are never NaN or None; a zero denominator yields 0
- Category ids with no matching category fall into an "Uncategorized"
  gray bucket instead of failing
- Rankings are stable: equal totals keep first-appearance order
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from pydantic import BaseModel, Field

from expense_tracker.models import Category, CategoryColor, Expense, uncategorized
from expense_tracker.reports.periods import (
    MONTH_NAMES,
    ComparisonPeriod,
    LookbackWindow,
    period_bounds,
    window_start,
)


Number = Union[Decimal, int, float]


# =============================================================================
# RESULT MODELS
# =============================================================================

class CategoryTotal(BaseModel):
    """Spending in one category within some selection of expenses."""

    id: str
    name: str
    color: CategoryColor
    amount: Decimal
    percentage: float = Field(
        description="Share of the selection's total, 0-100"
    )


class PeriodSummary(BaseModel):
    """Current period versus the one right before it."""

    period: ComparisonPeriod
    current_start: datetime
    current_end: datetime
    total: Decimal
    previous_total: Decimal
    change: float = Field(
        description="Percentage change against the previous period; 0 when it had no spending"
    )
    categories: list[CategoryTotal] = Field(default_factory=list)


class DashboardStats(BaseModel):
    total_spent: Decimal
    monthly_spent: Decimal
    weekly_spent: Decimal
    monthly_budget: Decimal
    budget_percentage: float = Field(
        description="Month's spending as a share of the budget, capped at 100"
    )
    remaining_budget: Decimal
    over_budget: bool


class MonthlyReport(BaseModel):
    year: int
    month: int
    month_name: str
    expenses: list[Expense]
    total: Decimal
    categories: list[CategoryTotal]


class CategoryReport(BaseModel):
    year: int
    total: Decimal
    categories: list[CategoryTotal]


class MonthTrend(BaseModel):
    month: int = Field(ge=1, le=12)
    name: str
    amount: Decimal
    change: float = Field(
        description="Percentage change against the preceding month"
    )
    is_increase: bool


# =============================================================================
# BASIC HELPERS
# =============================================================================

def _decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), Decimal("0"))


def percentage_of_total(amount: Number, total: Number) -> float:
    """``amount / total * 100``, or 0 when the total is 0."""
    total = _decimal(total)
    if total == 0:
        return 0.0
    return float(_decimal(amount) / total * 100)


def percentage_change(current: Number, previous: Number) -> float:
    """``(current - previous) / previous * 100``, or 0 when previous is 0."""
    previous = _decimal(previous)
    if previous == 0:
        return 0.0
    return float((_decimal(current) - previous) / previous * 100)


def resolve_category(categories: Iterable[Category], category_id: str) -> Category:
    """Look a category up by id, falling back to Uncategorized/gray."""
    for category in categories:
        if category.id == category_id:
            return category
    return uncategorized(category_id)


# =============================================================================
# SELECTION
# =============================================================================

def sort_by_date_desc(expenses: Iterable[Expense]) -> list[Expense]:
    return sorted(expenses, key=lambda e: e.date, reverse=True)


def recent_expenses(expenses: Iterable[Expense], limit: int = 5) -> list[Expense]:
    return sort_by_date_desc(expenses)[:limit]


def search_expenses(
    expenses: Iterable[Expense],
    term: str = "",
    category_id: Optional[str] = None,
) -> list[Expense]:
    """
    Filter by a case-insensitive description substring and an optional
    category, newest first. ``"all"`` means no category filter.
    """
    needle = term.strip().lower()
    result = []
    for expense in expenses:
        if needle and needle not in expense.description.lower():
            continue
        if category_id and category_id != "all" and expense.category != category_id:
            continue
        result.append(expense)
    return sort_by_date_desc(result)


def filter_between(
    expenses: Iterable[Expense],
    start: datetime,
    end: datetime,
) -> list[Expense]:
    """Expenses dated within ``[start, end]``, both ends inclusive."""
    return [expense for expense in expenses if start <= expense.date <= end]


def filter_by_window(
    expenses: Iterable[Expense],
    window: LookbackWindow,
    now: datetime,
) -> list[Expense]:
    return filter_between(expenses, window_start(window, now), now)


def filter_by_month(expenses: Iterable[Expense], year: int, month: int) -> list[Expense]:
    """Expenses in a calendar month (``month`` is 1-12)."""
    return [
        expense for expense in expenses
        if expense.date.year == year and expense.date.month == month
    ]


def filter_by_year(expenses: Iterable[Expense], year: int) -> list[Expense]:
    return [expense for expense in expenses if expense.date.year == year]


# =============================================================================
# GROUPING
# =============================================================================

def totals_by_category(
    expenses: Iterable[Expense],
    categories: Iterable[Category],
) -> list[CategoryTotal]:
    """
    Sum amounts per category id, highest total first.

    Percentages are shares of the selection's overall total.
    """
    lookup = {category.id: category for category in categories}
    sums: dict[str, Decimal] = {}
    for expense in expenses:
        sums[expense.category] = sums.get(expense.category, Decimal("0")) + expense.amount

    overall = sum(sums.values(), Decimal("0"))
    result = []
    for category_id, amount in sums.items():
        category = lookup.get(category_id) or uncategorized(category_id)
        result.append(CategoryTotal(
            id=category_id,
            name=category.name,
            color=category.color,
            amount=amount,
            percentage=percentage_of_total(amount, overall),
        ))

    # sorted() is stable, so ties keep first-appearance order
    return sorted(result, key=lambda item: item.amount, reverse=True)


def monthly_totals(expenses: Iterable[Expense], year: int) -> list[Decimal]:
    """Twelve totals for the year, index 0 = January, zero-filled."""
    months: dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
    for expense in filter_by_year(expenses, year):
        months[expense.date.month - 1] += expense.amount
    return [months[idx] for idx in range(12)]


# =============================================================================
# COMPOSITE VIEWS
# =============================================================================

def compare_periods(
    expenses: Iterable[Expense],
    categories: Iterable[Category],
    period: ComparisonPeriod,
    now: datetime,
) -> PeriodSummary:
    """Totals for the current period, its predecessor and the change between them."""
    expenses = list(expenses)
    bounds = period_bounds(period, now)

    current = filter_between(expenses, bounds.current_start, bounds.current_end)
    previous = filter_between(expenses, bounds.previous_start, bounds.previous_end)
    current_total = total_amount(current)
    previous_total = total_amount(previous)

    return PeriodSummary(
        period=ComparisonPeriod(period),
        current_start=bounds.current_start,
        current_end=bounds.current_end,
        total=current_total,
        previous_total=previous_total,
        change=percentage_change(current_total, previous_total),
        categories=totals_by_category(current, categories),
    )


def dashboard_stats(
    expenses: Iterable[Expense],
    monthly_budget: Number,
    now: datetime,
) -> DashboardStats:
    """Headline figures: all-time, this month, last 7 days and budget use."""
    expenses = list(expenses)
    budget = _decimal(monthly_budget)
    monthly = total_amount(filter_by_month(expenses, now.year, now.month))
    weekly = total_amount(filter_by_window(expenses, LookbackWindow.LAST_7_DAYS, now))

    return DashboardStats(
        total_spent=total_amount(expenses),
        monthly_spent=monthly,
        weekly_spent=weekly,
        monthly_budget=budget,
        budget_percentage=min(percentage_of_total(monthly, budget), 100.0),
        remaining_budget=budget - monthly,
        over_budget=monthly > budget,
    )


def monthly_report(
    expenses: Iterable[Expense],
    categories: Iterable[Category],
    year: int,
    month: int,
) -> MonthlyReport:
    """
    One calendar month: its expenses newest first, total and category split.

    Raises:
        ValueError: If month is not 1-12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    selected = sort_by_date_desc(filter_by_month(expenses, year, month))
    return MonthlyReport(
        year=year,
        month=month,
        month_name=MONTH_NAMES[month - 1],
        expenses=selected,
        total=total_amount(selected),
        categories=totals_by_category(selected, categories),
    )


def category_report(
    expenses: Iterable[Expense],
    categories: Iterable[Category],
    year: int,
) -> CategoryReport:
    selected = filter_by_year(expenses, year)
    return CategoryReport(
        year=year,
        total=total_amount(selected),
        categories=totals_by_category(selected, categories),
    )


def monthly_trends(expenses: Iterable[Expense], year: int) -> list[MonthTrend]:
    """
    Month-by-month totals for a year with the change against the month
    before. January compares with December of the previous year, not the
    same year's December as the old trends screen did.
    """
    expenses = list(expenses)
    totals = monthly_totals(expenses, year)
    previous_december = monthly_totals(expenses, year - 1)[11]

    trends = []
    for idx, amount in enumerate(totals):
        before = totals[idx - 1] if idx > 0 else previous_december
        trends.append(MonthTrend(
            month=idx + 1,
            name=MONTH_NAMES[idx],
            amount=amount,
            change=percentage_change(amount, before),
            is_increase=amount > before,
        ))
    return trends


def category_chart(
    expenses: Iterable[Expense],
    categories: Iterable[Category],
    window: LookbackWindow,
    now: datetime,
) -> list[CategoryTotal]:
    """Category split over a lookback window, as the spending chart draws it."""
    return totals_by_category(filter_by_window(expenses, window, now), categories)
