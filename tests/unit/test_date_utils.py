"""Unit tests for date parsing and month arithmetic"""

import pytest
from datetime import date, datetime
from loan_engine.utils.date_utils import add_months, parse_date


def test_parse_date_iso_string():
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_date_truncates_time():
    assert parse_date("2024-01-15T23:59:59") == date(2024, 1, 15)
    assert parse_date(datetime(2024, 1, 15, 8, 30)) == date(2024, 1, 15)


def test_parse_date_passes_dates_through():
    assert parse_date(date(2024, 1, 15)) == date(2024, 1, 15)


@pytest.mark.parametrize("value", ["", "   ", "not-a-date", "2024-13-01", "2024-02-30", None, 20240115])
def test_parse_date_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_date(value)


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2024, 1, 15), 1, date(2024, 2, 15)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),  # Leap year
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 3, 31), 1, date(2024, 4, 30)),
        (date(2024, 1, 31), 2, date(2024, 3, 31)),
        (date(2024, 11, 30), 3, date(2025, 2, 28)),
        (date(2024, 10, 15), 6, date(2025, 4, 15)),
    ],
)
def test_add_months_clamps_to_month_end(start: date, months: int, expected: date):
    assert add_months(start, months) == expected
