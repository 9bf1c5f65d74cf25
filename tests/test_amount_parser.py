"""Tests for amount parsing."""

import pytest

from settlekit.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1200", 1200),
        ("¥1,200", 1200),
        ("1,200円", 1200),
        (" 3000 ", 3000),
        ("1200.00", 1200),
        ("-500", -500),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12.50", "NaN"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)
