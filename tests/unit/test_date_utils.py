"""Unit tests for timestamp parsing"""

import pytest
from datetime import date, datetime, timezone
from finance_tracker.utils.date_utils import parse_timestamp, resolve_timestamp, month_label


def test_parse_timestamp_formats():
    """Test ISO strings with Z, offsets, and date-only values"""
    assert parse_timestamp("2024-05-02T10:30:00Z") == datetime(2024, 5, 2, 10, 30, tzinfo=timezone.utc)
    assert parse_timestamp("2024-05-02") == datetime(2024, 5, 2)
    assert parse_timestamp(date(2024, 5, 2)) == datetime(2024, 5, 2)
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_parse_timestamp_rejects_garbage():
    """Test unparseable values raise ValueError"""
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")
    with pytest.raises(ValueError):
        parse_timestamp(12345)


def test_resolve_timestamp_preference():
    """Test created_at wins, date is the fallback, neither is an error"""
    assert resolve_timestamp("2024-05-02T00:00:00", "2024-01-01") == datetime(2024, 5, 2)
    assert resolve_timestamp(None, "2024-01-01") == datetime(2024, 1, 1)
    with pytest.raises(ValueError):
        resolve_timestamp(None, None)


def test_month_label():
    assert month_label(2024, 5) == "May 2024"
    assert month_label(2023, 12) == "December 2023"
