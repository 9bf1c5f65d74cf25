"""Tests for date and month parsing."""

from datetime import date

import pytest

from settlekit.utils.date_parser import parse_date, parse_month

TODAY = date(2024, 3, 15)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-01-15", date(2024, 1, 15)),
        ("January 15, 2024", date(2024, 1, 15)),
        ("today", TODAY),
        (" Yesterday ", date(2024, 3, 14)),
        ("tomorrow", date(2024, 3, 16)),
        ("last month", date(2024, 2, 1)),
        ("this month", date(2024, 3, 1)),
        ("next month", date(2024, 4, 1)),
    ],
)
def test_parse_date(text, expected):
    assert parse_date(text, today=TODAY) == expected


def test_parse_date_rejects_garbage():
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date")


def test_parse_month():
    assert parse_month("2024-02") == (2024, 2)
    assert parse_month("2024-2") == (2024, 2)
    assert parse_month("last month", today=date(2024, 1, 10)) == (2023, 12)
    assert parse_month("this month", today=TODAY) == (2024, 3)


@pytest.mark.parametrize("text", ["2024-13", "March", "2024/02"])
def test_parse_month_rejects_invalid(text):
    with pytest.raises(ValueError):
        parse_month(text)
