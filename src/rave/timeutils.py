"""Conversion between wire timestamps and datetimes.

The service sends times as integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

from datetime import UTC, datetime


def time_from_json(value: int | float | str | None) -> datetime | None:
    """Parse a millisecond timestamp, returning None when absent."""
    if value is None or value == "":
        return None
    try:
        millis = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {value!r}") from e
    return datetime.fromtimestamp(millis / 1000, tz=UTC)


def time_to_json(value: datetime) -> int:
    """Format a datetime as milliseconds since the epoch."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


def now() -> datetime:
    """Current time, timezone-aware."""
    return datetime.now(UTC)
