"""
Date windows used by the dashboard and reports.

Two kinds of period:
- lookback windows end at ``now`` ("last 7 days", "this month")
- comparison periods come in pairs: the current one and the one
  immediately before it, of the same length type

All datetimes are naive UTC, like stored expense dates.
"""

import calendar
from datetime import datetime, timedelta
from enum import Enum
from typing import NamedTuple


class LookbackWindow(str, Enum):
    """Windows ending at now, as offered by the charts."""
    LAST_7_DAYS = "week"
    LAST_MONTH = "month"
    LAST_3_MONTHS = "quarter"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"


class ComparisonPeriod(str, Enum):
    """Period types the summary compares against their predecessor."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class PeriodBounds(NamedTuple):
    current_start: datetime
    current_end: datetime
    previous_start: datetime
    previous_end: datetime


MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def shift_months(value: datetime, months: int) -> datetime:
    """
    Move a datetime by whole calendar months.

    The day is clamped to the target month's length (31 Mar - 1 month
    is 28/29 Feb).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(value: datetime) -> datetime:
    return start_of_day(value).replace(day=1)


def start_of_year(value: datetime) -> datetime:
    return start_of_month(value).replace(month=1)


def window_start(window: LookbackWindow, now: datetime) -> datetime:
    """First instant of a lookback window ending at ``now``."""
    window = LookbackWindow(window)
    if window == LookbackWindow.LAST_7_DAYS:
        return now - timedelta(days=7)
    if window == LookbackWindow.LAST_MONTH:
        return shift_months(now, -1)
    if window == LookbackWindow.LAST_3_MONTHS:
        return shift_months(now, -3)
    if window == LookbackWindow.THIS_MONTH:
        return start_of_month(now)
    return start_of_year(now)


def period_bounds(period: ComparisonPeriod, now: datetime) -> PeriodBounds:
    """
    Current period ``[current_start, now]`` and the one right before it.

    The previous period ends one microsecond before the current one starts,
    so the two never overlap and leave no gap.
    """
    period = ComparisonPeriod(period)
    if period == ComparisonPeriod.WEEK:
        current_start = now - timedelta(days=7)
        previous_start = current_start - timedelta(days=7)
    elif period == ComparisonPeriod.MONTH:
        current_start = start_of_month(now)
        previous_start = shift_months(current_start, -1)
    else:
        current_start = start_of_year(now)
        previous_start = current_start.replace(year=current_start.year - 1)

    return PeriodBounds(
        current_start=current_start,
        current_end=now,
        previous_start=previous_start,
        previous_end=current_start - timedelta(microseconds=1),
    )
