"""Tests for date and amount parsing."""

from datetime import date, datetime, timedelta

import pytest
from dateutil.relativedelta import relativedelta

from simperfi.utils.amount_parser import parse_amount
from simperfi.utils.date_parser import parse_date, parse_timestamp


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_relative_dates():
    """Test parsing relative dates."""
    today = date.today()
    assert parse_date("today") == today
    assert parse_date("Yesterday") == today - timedelta(days=1)
    assert parse_date("3 days ago") == today - timedelta(days=3)
    assert parse_date("last week") == today - timedelta(days=7)
    assert parse_date("last month") == today - relativedelta(months=1)
    assert parse_date("last year") == today - relativedelta(years=1)


def test_parse_last_weekday():
    """Test that 'last <weekday>' is strictly in the past week."""
    result = parse_date("last monday")
    assert result.weekday() == 0
    assert 1 <= (date.today() - result).days <= 7


def test_parse_invalid_date():
    """Test parsing invalid date."""
    with pytest.raises(ValueError):
        parse_date("gibberish")


def test_parse_timestamp_with_time():
    """Test parsing a timestamp with a time of day."""
    assert parse_timestamp("2024-01-15 14:30") == datetime(2024, 1, 15, 14, 30)


def test_parse_timestamp_relative_is_midnight():
    """Test that relative days give midnight."""
    expected = datetime.combine(date.today() - timedelta(days=1), datetime.min.time())
    assert parse_timestamp("yesterday") == expected


def test_parse_timestamp_now():
    """Test 'now'."""
    before = datetime.now()
    assert before <= parse_timestamp("now") <= datetime.now()


def test_parse_timestamp_aware_becomes_naive():
    """Test that an explicit offset is converted to local time."""
    parsed = parse_timestamp("2024-01-15T12:00:00+00:00")
    assert parsed.tzinfo is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("123.45", 123.45),
        ("$1,234.56", 1234.56),
        ("0.00012345", 0.00012345),
        ("1e-6", 0.000001),
        ("-5", -5.0),
    ],
)
def test_parse_amount(raw, expected):
    """Test parsing amounts."""
    assert parse_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "  ", "abc", "nan", "inf"])
def test_parse_invalid_amount(raw):
    """Test rejecting unparseable or non-finite amounts."""
    with pytest.raises(ValueError):
        parse_amount(raw)
