"""Timestamp parsing utilities."""
from datetime import date, datetime, time, timezone
from typing import Union


TimestampLike = Union[datetime, date, str]


def parse_timestamp(value: TimestampLike) -> datetime:
    """
    Parse a ledger timestamp into a timezone-aware datetime.

    Supports:
    - datetime objects (naive values are assumed to be UTC)
    - date objects (midnight UTC)
    - ISO format with "Z" suffix: "2024-01-02T09:10:00Z"
    - ISO format with timezone: "2024-01-02T09:10:00+00:00"
    - Space-separated: "2024-01-02 09:10:00"

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Unable to parse timestamp: {value!r}")

    s = value.strip()

    # fromisoformat on older interpreters rejects the "Z" suffix
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        return to_utc(datetime.fromisoformat(s))
    except ValueError:
        pass

    if " " in s and "T" not in s:
        try:
            return to_utc(datetime.fromisoformat(s.replace(" ", "T", 1)))
        except ValueError:
            pass

    raise ValueError(
        f"Unable to parse timestamp: {value}. Expected ISO format "
        "(e.g., '2024-01-02T09:10:00Z' or '2024-01-02T09:10:00+00:00')"
    )


def to_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime, assuming UTC for naive values."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def start_of_day(day: date) -> datetime:
    """00:00:00 UTC on ``day``."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def end_of_day(day: date) -> datetime:
    """23:59:59.999999 UTC on ``day``."""
    return datetime.combine(day, time.max, tzinfo=timezone.utc)
