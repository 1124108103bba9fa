"""String format recognition and parsing.

Recognizers for the OpenAPI string formats the core understands (``binary``,
``byte``, ``date``, ``date-time``), plus parsing of RFC3339 dates and date-times
into instants so bounds can be compared as points in time rather than as text.
"""

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any

BINARY_RX = re.compile(r"^(?:[01]{8})*$")
BYTE_RX = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$")
DATE_RX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
DATE_TIME_RX = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})?$"
)


def is_binary(value: Any) -> bool:
    """Whether ``value`` is a string of 8-digit binary groups."""
    return isinstance(value, str) and BINARY_RX.match(value) is not None


def is_byte(value: Any) -> bool:
    """Whether ``value`` is a base64 encoded string."""
    return isinstance(value, str) and BYTE_RX.match(value) is not None


def is_date(value: Any) -> bool:
    """Whether ``value`` looks like an RFC3339 full-date (existence not checked)."""
    return isinstance(value, str) and DATE_RX.match(value) is not None


def is_date_time(value: Any) -> bool:
    """Whether ``value`` looks like an RFC3339 date-time (existence not checked)."""
    return isinstance(value, str) and DATE_TIME_RX.match(value) is not None


def date_exists(year: int, month: int, day: int) -> bool:
    """Whether a calendar date actually exists (rejects Feb 30, Feb 29 of
    non-leap years ...)."""
    if not 1 <= month <= 12 or year < 1:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


def time_exists(hour: int, minute: int, second: int) -> bool:
    return hour < 24 and minute < 60 and second < 60


def _tz(offset: str | None) -> timezone:
    if offset is None or offset in ("Z", "z"):
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    hours, minutes = int(offset[1:3]), int(offset[4:6])
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_date(text: str) -> date:
    """Parse an RFC3339 full-date.

    Raises:
        ValueError: If the text is not a full-date or the date does not exist
    """
    match = DATE_RX.match(text)
    if match is None:
        raise ValueError(f"Invalid full-date: {text}")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def parse_date_time(text: str) -> datetime:
    """Parse an RFC3339 date-time into an aware datetime (UTC when no offset).

    Raises:
        ValueError: If the text is not a date-time or names a date/time that
            does not exist
    """
    match = DATE_TIME_RX.match(text)
    if match is None:
        raise ValueError(f"Invalid date-time: {text}")
    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    fraction = match.group(7) or ""
    microsecond = int((fraction + "000000")[:6])
    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=_tz(match.group(8)))


def to_instant(value: Any) -> datetime | None:
    """Convert a date, datetime or RFC3339 text into an aware UTC datetime.

    Returns None when the value can't be interpreted as a point in time.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            if "T" in value.upper():
                moment = parse_date_time(value)
            else:
                moment = datetime.combine(parse_date(value), datetime.min.time())
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
