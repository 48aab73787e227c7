"""Date manipulation utilities"""

import calendar
from datetime import date, datetime
from typing import Any, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an API timestamp into a datetime.

    Accepts datetimes, dates (midnight), ISO-8601 strings with or without a
    trailing "Z", and date-only strings. Returns None for empty values.

    Raises:
        ValueError: If a non-empty value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def resolve_timestamp(created_at: Any, fallback_date: Any) -> datetime:
    """Resolve the canonical timestamp, preferring created_at over date"""
    resolved = parse_timestamp(created_at) or parse_timestamp(fallback_date)
    if resolved is None:
        raise ValueError("Transaction has neither created_at nor date")
    return resolved


def month_label(year: int, month: int) -> str:
    """Human-readable month label, e.g. "May 2024" """
    return f"{calendar.month_name[month]} {year}"
