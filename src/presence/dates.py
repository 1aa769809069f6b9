from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Iterator

from presence.errors import InvalidDateError, InvalidRangeError

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"(\d{1,2}):(\d{2})")


def parse_date(value: Any) -> date:
    """Coerce a date, datetime or ISO date/datetime string into a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) > 10:
            return parse_datetime(text).date()
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateError(f"Malformed date string: {value!r}") from exc
    raise InvalidDateError(f"Expected a date or ISO date string, got {value!r}")


def parse_datetime(value: Any) -> datetime:
    """
    Coerce a datetime, date (taken at midnight) or ISO datetime string into a
    naive ``datetime``. A trailing ``Z`` is accepted.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1]
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateError(f"Malformed datetime string: {value!r}") from exc
    raise InvalidDateError(f"Expected a datetime or ISO string, got {value!r}")


def parse_optional_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    return parse_date(value)


def parse_time(value: Any) -> time:
    """Coerce a ``time`` or ``HH:MM`` string into a ``time``."""
    if isinstance(value, datetime):
        return value.time().replace(second=0, microsecond=0)
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        match = _HHMM.fullmatch(value.strip())
        if match:
            h, m = int(match.group(1)), int(match.group(2))
            if 0 <= h <= 23 and 0 <= m <= 59:
                return time(h, m)
    raise InvalidDateError(f"Malformed time string: {value!r}")


def parse_optional_time(value: Any) -> time | None:
    if value is None or value == "":
        return None
    return parse_time(value)


def minute_of_day(value: time | datetime) -> int:
    return value.hour * 60 + value.minute


def days_between(start: date, end: date) -> int:
    """Calendar-day difference ``end - start`` (may be negative)."""
    return (end - start).days


def inclusive_days(start: date, end: date) -> int:
    if end < start:
        raise InvalidRangeError(f"Range end {end} is before start {start}")
    return (end - start).days + 1


def date_range(start: Any, end: Any) -> list[date]:
    """Every date from ``start`` to ``end`` inclusive."""
    d0, d1 = parse_date(start), parse_date(end)
    if d1 < d0:
        raise InvalidRangeError(f"Range end {d1} is before start {d0}")
    return list(iter_dates(d0, d1))


def iter_dates(start: date, end: date) -> Iterator[date]:
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def covers(start: date, end: date, day: date) -> bool:
    return start <= day <= end
