"""Utility functions for coercing loosely-typed record values."""
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional


def to_float(value: Any) -> Optional[float]:
    """Convert a number or numeric string to float, returning None if conversion fails."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if result != result or result in (float("inf"), float("-inf")):
        return None
    return result


def to_int(value: Any) -> Optional[int]:
    """Convert a number or numeric string to int, returning None if conversion fails.

    Floats and float strings ("12.0", "7.9") truncate toward zero.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = to_float(value)
    return int(number) if number is not None else None


def to_str(value: Any) -> Optional[str]:
    """Return a stripped string, or None for missing/blank/non-scalar values."""
    if value is None or isinstance(value, (dict, list, tuple, set, bool)):
        return None
    text = str(value).strip()
    return text or None


def first_present(record: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value stored under ``keys`` that is present and not None."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string, epoch seconds or date into a datetime."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def as_date(value: Any) -> date:
    """Reduce a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value
