"""Tests for amount and date formatting."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from expense_tracker.models import DateFormat
from expense_tracker.reports import format_amount, format_currency, format_date


class TestFormatAmount:
    """Indian digit grouping."""

    @pytest.mark.parametrize("amount, expected", [
        (0, "0"),
        (999, "999"),
        (1000, "1,000"),
        (100000, "1,00,000"),
        (12345678, "1,23,45,678"),
        (Decimal("1234.50"), "1,234.5"),
        (Decimal("1234.5678"), "1,234.568"),
        (-1500, "-1,500"),
    ])
    def test_grouping(self, amount, expected):
        assert format_amount(amount) == expected

    def test_float_input(self):
        assert format_amount(0.1 + 0.2) == "0.3"

    def test_currency_prefix(self):
        assert format_currency(Decimal("2575"), "₹") == "₹2,575"
        assert format_currency(20, "$") == "$20"


class TestFormatDate:
    """The three patterns and the fallback."""

    def test_patterns(self):
        value = datetime(2023, 6, 5, 10, 30)
        assert format_date(value, DateFormat.DAY_FIRST) == "05/06/2023"
        assert format_date(value, DateFormat.MONTH_FIRST) == "06/05/2023"
        assert format_date(value, DateFormat.ISO) == "2023-06-05"

    def test_plain_string_pattern(self):
        assert format_date(date(2023, 12, 1), "MM/DD/YYYY") == "12/01/2023"

    def test_iso_string_input(self):
        assert format_date("2023-06-05T10:30:00.000Z", "YYYY-MM-DD") == "2023-06-05"

    def test_unknown_pattern_falls_back(self):
        assert format_date(datetime(2023, 6, 5), "YYYY/MM") == "05/06/2023"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
