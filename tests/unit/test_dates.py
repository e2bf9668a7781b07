"""
test_dates.py - Unit tests for Date

Tests:
- parse(): accepted formats, invalid calendar dates, garbage
- Ordering, sentinel, same-month test
- Month stepping across year ends
- Label formatting
"""

import pytest

from networth import Date


class TestDateParse:
    """Date.parse() accepts the ledger's date spellings."""

    @pytest.mark.parametrize("token", ["2024-03-07", "2024/03/07", "2024.03.07", "2024-3-7"])
    def test_parse_formats(self, token):
        assert Date.parse(token) == Date(2024, 3, 7)

    def test_parse_year_month_defaults_day(self):
        assert Date.parse("2024-03") == Date(2024, 3, 1)

    @pytest.mark.parametrize("token", ["2024-02-30", "2024-13-01", "2023-02-29", "2024-00-10"])
    def test_invalid_calendar_dates(self, token):
        assert Date.parse(token) is None

    @pytest.mark.parametrize("token", ["", "checking", "24-03-07", "2024-03/07", "2024-03-07x", "12.5"])
    def test_garbage(self, token):
        assert Date.parse(token) is None

    def test_leap_day(self):
        assert Date.parse("2024-02-29") == Date(2024, 2, 29)


class TestDateOrdering:
    """Dates are totally ordered; the sentinel sorts first."""

    def test_order(self):
        assert Date(2024, 1, 31) < Date(2024, 2, 1) < Date(2025, 1, 1)

    def test_sentinel(self):
        sentinel = Date()
        assert not sentinel.is_set
        assert Date(1970, 1, 1).is_set
        assert sentinel < Date(1, 1, 1)

    def test_same_month(self):
        assert Date(2024, 5, 1).same_month(Date(2024, 5, 31))
        assert not Date(2024, 5, 1).same_month(Date(2023, 5, 1))
        assert not Date(2024, 5, 31).same_month(Date(2024, 6, 1))

    def test_hashable(self):
        assert len({Date(2024, 1, 1), Date(2024, 1, 1), Date(2024, 1, 2)}) == 2


class TestMonthStepping:

    def test_month_start(self):
        assert Date(2024, 7, 19).month_start() == Date(2024, 7, 1)

    def test_next_month(self):
        assert Date(2024, 7, 19).next_month() == Date(2024, 8, 1)

    def test_next_month_year_end(self):
        assert Date(2024, 12, 5).next_month() == Date(2025, 1, 1)


class TestDateFormat:
    """Labels used on the graph's x axis."""

    def test_default(self):
        assert Date(2024, 3, 1).format() == "Mar 2024"

    def test_two_year_digits(self):
        assert Date(2024, 3, 1).format(year_digits=2) == "Mar 24"

    def test_month_number(self):
        assert Date(2024, 3, 1).format(year_digits=4, month_name=False) == "03 2024"

    def test_no_year(self):
        assert Date(2024, 11, 1).format(year_digits=0) == "Nov"

    def test_year_digits_clamped(self):
        assert Date(2024, 3, 1).format(year_digits=9) == "Mar 2024"
        assert Date(2024, 3, 1).format(year_digits=-3) == "Mar"

    def test_str(self):
        assert str(Date(2024, 3, 7)) == "2024-03-07"
