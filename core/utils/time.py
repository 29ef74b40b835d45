"""
Time Utilities

This module provides utilities for handling timestamps from venue payloads.

Venues send timestamps in different formats:
- ISO-8601 strings, often with nanosecond precision
  (e.g., "2021-11-16T22:16:00.468860416Z")
- Milliseconds since epoch (e.g., 1637100960468)
- Seconds since epoch (e.g., 1637100960)

The canonical schemas store epoch milliseconds (UTC), so everything is
normalized to that, and back to ISO-8601 when a venue expects a string.
"""

from datetime import datetime, timezone
from typing import Optional, Union

from dateutil import parser as dateparser


def datetime_to_timestamp(dt: datetime, milliseconds: bool = False) -> int:
    """
    Convert a datetime object to Unix timestamp.

    Args:
        dt: Datetime object (naive datetimes are treated as UTC)
        milliseconds: If True, return milliseconds; if False, return seconds

    Returns:
        int: Unix timestamp in seconds or milliseconds

    Examples:
        >>> dt = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        >>> datetime_to_timestamp(dt)
        1704110400

        >>> datetime_to_timestamp(dt, milliseconds=True)
        1704110400000
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    if milliseconds:
        # integer arithmetic keeps sub-second precision exact
        delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
        return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000

    return int(dt.timestamp())


def parse8601(value: Optional[str]) -> Optional[int]:
    """
    Parse an ISO-8601 string into epoch milliseconds.

    Args:
        value: ISO-8601 timestamp string (fractional digits beyond
               microseconds are truncated)

    Returns:
        Epoch milliseconds, or None when the value is missing or unparseable

    Examples:
        >>> parse8601("2021-11-16T22:16:00.468860416Z")
        1637100960468

        >>> parse8601(None) is None
        True
    """
    if not value or not isinstance(value, str):
        return None
    try:
        dt = dateparser.isoparse(value)
    except (ValueError, OverflowError):
        return None
    return datetime_to_timestamp(dt, milliseconds=True)


def iso8601(timestamp: Optional[Union[int, float]]) -> Optional[str]:
    """
    Format epoch milliseconds as an ISO-8601 UTC string.

    Returns None for a missing timestamp or one outside the datetime range.

    Examples:
        >>> iso8601(1637100960468)
        '2021-11-16T22:16:00.468Z'

        >>> iso8601(10**20) is None
        True
    """
    if timestamp is None:
        return None
    try:
        dt = datetime.fromtimestamp(int(timestamp) / 1000.0, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None
    millis = int(timestamp) % 1000
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"
