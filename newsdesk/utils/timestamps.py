"""
Timestamp helpers for the loosely typed dates found in the datastore
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

# 10 digits of milliseconds is already 1970-04-26
MIN_MILLIS_DIGITS = 10


def utc_now() -> datetime:
    """Get current UTC datetime (timezone-aware)"""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Serialize like JavaScript's Date.toISOString()"""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def from_millis(millis: float) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes, epoch milliseconds (int/float or strings of 10+ digits),
    ISO 8601 strings (with or without a trailing "Z") and RFC 1123 strings
    such as "Tue, 01 Oct 2024 10:00:00 GMT". Naive values are read as UTC.

    Returns:
        The parsed datetime, or None when the value cannot be interpreted
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = from_millis(value)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.isdigit():
            # shorter digit runs are compact dates, not epoch millis
            if len(text) < MIN_MILLIS_DIGITS:
                return None
            return parse_timestamp(int(text))
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError, IndexError):
                return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
