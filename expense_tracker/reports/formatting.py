"""
Display formatting for amounts and dates.

Amounts use Indian digit grouping (``1,00,000``): the last three digits,
then groups of two. At most three fraction digits are shown and trailing
zeros are dropped, so ``1234.50`` renders as ``1,234.5``.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from expense_tracker.models import DateFormat, parse_timestamp


Number = Union[Decimal, int, float]


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_amount(amount: Number) -> str:
    """Group an amount's digits without any currency symbol."""
    value = Decimal(str(amount)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    text = f"{abs(value):f}"
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")

    grouped = _group_indian(whole)
    if fraction:
        return f"{sign}{grouped}.{fraction}"
    return f"{sign}{grouped}"


def format_currency(amount: Number, symbol: str) -> str:
    return f"{symbol}{format_amount(amount)}"


def format_date(value: Union[datetime, date, str], pattern: Union[DateFormat, str]) -> str:
    """
    Render a date in one of the three supported patterns.

    Unknown patterns fall back to DD/MM/YYYY.
    """
    d = parse_timestamp(value)
    day, month, year = f"{d.day:02d}", f"{d.month:02d}", f"{d.year:04d}"

    pattern = pattern.value if isinstance(pattern, DateFormat) else pattern
    if pattern == DateFormat.MONTH_FIRST.value:
        return f"{month}/{day}/{year}"
    if pattern == DateFormat.ISO.value:
        return f"{year}-{month}-{day}"
    return f"{day}/{month}/{year}"
