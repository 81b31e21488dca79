"""Reporting package: periods, pure aggregation functions and display formatting."""

from expense_tracker.reports.periods import (
    MONTH_NAMES,
    ComparisonPeriod,
    LookbackWindow,
    PeriodBounds,
    period_bounds,
    shift_months,
    window_start,
)
from expense_tracker.reports.aggregations import (
    CategoryReport,
    CategoryTotal,
    DashboardStats,
    MonthlyReport,
    MonthTrend,
    PeriodSummary,
    category_chart,
    category_report,
    compare_periods,
    dashboard_stats,
    filter_between,
    filter_by_month,
    filter_by_window,
    filter_by_year,
    monthly_report,
    monthly_totals,
    monthly_trends,
    percentage_change,
    percentage_of_total,
    recent_expenses,
    resolve_category,
    search_expenses,
    sort_by_date_desc,
    total_amount,
    totals_by_category,
)
from expense_tracker.reports.formatting import (
    format_amount,
    format_currency,
    format_date,
)

__all__ = [
    # Periods
    "MONTH_NAMES",
    "ComparisonPeriod",
    "LookbackWindow",
    "PeriodBounds",
    "period_bounds",
    "shift_months",
    "window_start",
    # Results
    "CategoryReport",
    "CategoryTotal",
    "DashboardStats",
    "MonthlyReport",
    "MonthTrend",
    "PeriodSummary",
    # Aggregations
    "category_chart",
    "category_report",
    "compare_periods",
    "dashboard_stats",
    "filter_between",
    "filter_by_month",
    "filter_by_window",
    "filter_by_year",
    "monthly_report",
    "monthly_totals",
    "monthly_trends",
    "percentage_change",
    "percentage_of_total",
    "recent_expenses",
    "resolve_category",
    "search_expenses",
    "sort_by_date_desc",
    "total_amount",
    "totals_by_category",
    # Formatting
    "format_amount",
    "format_currency",
    "format_date",
]
