"""Tests for formatting helpers."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from banking_chatbot.utils.formatting import format_currency, format_date, last_four, parse_amount
from banking_chatbot.utils.timestamp import parse_timestamp


@pytest.mark.parametrize(
    "amount, expected",
    [
        (5, "5.00"),
        ("abc", "0.00"),
        (None, "0.00"),
        (1250.5, "1250.50"),
        ("10000", "10000.00"),
        (-50, "-50.00"),
        (0.125, "0.13"),
        (Decimal("19.999"), "20.00"),
        (float("nan"), "0.00"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_preserves_order():
    amounts = [-10.5, 0, 0.01, 3, 99.99, 100]
    formatted = [Decimal(format_currency(a)) for a in amounts]
    assert formatted == sorted(formatted)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        ("12.34", 12.34),
        (7, 7.0),
        (Decimal("2.5"), 2.5),
        (float("inf"), 0.0),
    ],
)
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


def test_last_four():
    assert last_four("1234567890") == "7890"
    assert last_four(None) == "****"
    assert last_four("") == "****"
    assert last_four(1234567890) == "****"
    assert last_four("12") == "12"


def test_format_date():
    assert format_date(datetime(2024, 1, 2, 9, 10, tzinfo=timezone.utc)) == "2024-01-02"
    assert format_date("2024-01-02T09:10:00Z") == "2024-01-02"
    assert format_date("2024-01-02 09:10:00") == "2024-01-02"
    assert format_date(date(2024, 5, 6)) == "2024-05-06"
    assert format_date("not a date") == ""
    assert format_date(None) == ""


def test_parse_timestamp_assumes_utc_for_naive_values():
    parsed = parse_timestamp("2024-01-02T09:10:00")
    assert parsed.tzinfo is not None
    assert parsed.utcoffset().total_seconds() == 0


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp("yesterday-ish")
