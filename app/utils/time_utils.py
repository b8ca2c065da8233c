# app/utils/time_utils.py
"""
Date and time-of-day helpers shared by the inventory, matcher and search.

Dates are always reduced to the UTC calendar day; times of day travel as
zero-padded 24h "HH:MM" strings.
"""
import re
from datetime import date, datetime, time, timezone, timedelta
from typing import Iterable, List, Tuple, Union

from app.core.exceptions import InvalidDateError, InvalidTimeFormatError

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

DateLike = Union[date, datetime, str]


def normalize_utc_day(value: DateLike) -> date:
    """
    Reduce a date, datetime or ISO string to its UTC calendar day.

    Naive datetimes are taken to be UTC already. Aware datetimes are
    converted first, so "2024-06-01T22:00:00-04:00" becomes 2024-06-02.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise InvalidDateError("Date is empty")
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            if len(raw) == 10:
                return date.fromisoformat(raw)
            return normalize_utc_day(datetime.fromisoformat(raw))
        except ValueError:
            raise InvalidDateError(f"Invalid date '{value}'. Expected an ISO date (YYYY-MM-DD)")

    raise InvalidDateError(f"Unsupported date value: {value!r}")


def utc_midnight(day: date) -> datetime:
    """Wire representation of a normalized day: midnight UTC"""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def parse_hhmm(value: str) -> time:
    """Parse an "HH:MM" (24h) string, raising InvalidTimeFormatError otherwise"""
    if not isinstance(value, str):
        raise InvalidTimeFormatError(f"Invalid time format: {value!r}. Expected format HH:mm.")

    match = _HHMM_RE.match(value.strip())
    if not match:
        raise InvalidTimeFormatError(f"Invalid time format: {value!r}. Expected format HH:mm.")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeFormatError(f"Invalid time format: {value!r}. Expected format HH:mm.")

    return time(hour, minute)


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def canonical_hhmm(value: str) -> str:
    """Zero-padded form, e.g. 9:05 becomes 09:05. Raises on invalid times."""
    return format_hhmm(parse_hhmm(value))


def minutes_of_day(value: str) -> int:
    parsed = parse_hhmm(value)
    return parsed.hour * 60 + parsed.minute


def sort_times(times: Iterable[str]) -> List[str]:
    """Canonicalize, de-duplicate and order times chronologically"""
    canonical = {canonical_hhmm(t) for t in times}
    return sorted(canonical, key=minutes_of_day)


def tolerance_window(requested: str, tolerance_minutes: int) -> Tuple[str, str]:
    """
    Inclusive [start, end] window around a requested time.

    The window is clamped to the requested day (00:00..23:59) rather than
    wrapping past midnight, so both bounds compare correctly as HH:MM strings.
    """
    center = datetime.combine(date.min + timedelta(days=1), parse_hhmm(requested))
    delta = timedelta(minutes=tolerance_minutes)

    start = center - delta
    end = center + delta

    start_str = format_hhmm(start.time()) if start.date() == center.date() else "00:00"
    end_str = format_hhmm(end.time()) if end.date() == center.date() else "23:59"

    return start_str, end_str
