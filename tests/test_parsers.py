"""Tests for amount and date parsing."""

import pytest
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal

from dateutil import tz

from moneytracker.utils.amount_parser import parse_amount
from moneytracker.utils.date_parser import local_date, parse_date, resolve_timezone


@pytest.mark.parametrize(
    "text,expected",
    [
        ("499", Decimal("499.00")),
        ("1,234.50", Decimal("1234.50")),
        ("Rs. 1,234.50", Decimal("1234.50")),
        ("INR 250", Decimal("250.00")),
        ("₹99.9", Decimal("99.90")),
        ("$12.00", Decimal("12.00")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_parse_amount_two_places():
    assert parse_amount("10.005").as_tuple().exponent == -2


@pytest.mark.parametrize("text", ["", "   ", "abc", "0", "-5.00", "1.2.3", "9" * 30 + ".00"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_date_iso():
    assert parse_date("2026-01-31") == date(2026, 1, 31)


def test_parse_date_other_formats():
    assert parse_date("01/15/2026") == date(2026, 1, 15)
    assert parse_date("January 15, 2026") == date(2026, 1, 15)


@pytest.mark.parametrize("text", ["", "not a date", "2026-13-45"])
def test_parse_date_rejects(text):
    with pytest.raises(ValueError):
        parse_date(text)


def test_resolve_timezone_falls_back():
    assert resolve_timezone(None).utcoffset(datetime(2026, 1, 1)) == timedelta(0)
    assert resolve_timezone("Not/AZone").utcoffset(datetime(2026, 1, 1)) == timedelta(0)


def test_local_date_crosses_midnight():
    """20:00 UTC on the 15th is already the 16th in Kolkata."""
    moment = datetime(2026, 1, 15, 20, 0, tzinfo=UTC)
    assert local_date(moment, tz.gettz("Asia/Kolkata")) == date(2026, 1, 16)
    assert local_date(moment, tz.UTC) == date(2026, 1, 15)


def test_local_date_naive_is_utc():
    moment = datetime(2026, 1, 15, 20, 0)
    assert local_date(moment, tz.gettz("Asia/Kolkata")) == date(2026, 1, 16)
