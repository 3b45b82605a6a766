"""Timestamp utilities.

Snapshots carry times as epoch milliseconds, the unit build systems report.
These helpers convert descriptor timestamps to that unit.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC.

    Example:
        >>> ensure_utc(datetime(2025, 11, 4, 12, 0)).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: str) -> Optional[datetime]:
    """Parse an ISO 8601 string (``Z`` suffix allowed) to a UTC datetime.

    Returns:
        Timezone-aware datetime in UTC, or None if parsing fails
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        return None


def to_epoch_millis(value: Union[datetime, int, float, str]) -> int:
    """Convert a datetime, ISO 8601 string or number to epoch milliseconds.

    Numbers are taken to already be epoch milliseconds.

    Raises:
        ValueError: If a string cannot be parsed

    Example:
        >>> to_epoch_millis("2025-11-04T12:00:00Z")
        1762257600000
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        if value.strip().lstrip("-").isdigit():
            return int(value.strip())
        parsed = parse_iso_datetime(value)
        if parsed is None:
            raise ValueError(f"Invalid timestamp: {value!r}")
        value = parsed
    return (ensure_utc(value) - EPOCH) // timedelta(milliseconds=1)
