"""
Work-window evaluation, including shifts that span midnight.

Two equivalent evaluators live here:

- ``is_window_active`` answers the question for one window seen from a
  single context (the window filed under yesterday's, today's or tomorrow's
  weekday).
- ``is_shift_active_at`` turns the previous, current and next weekday's
  windows into absolute minute intervals around the query date and performs
  one containment check. Both give the same answer for every instant.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterator

from presence.dates import MINUTES_PER_DAY, minute_of_day
from presence.staff import DayWindow, WeeklySchedule

Interval = tuple[int, int]  # inclusive minute offsets from the query date's midnight


class Context(str, Enum):
    YESTERDAY = "yesterday"
    TODAY = "today"
    TOMORROW = "tomorrow"

    @property
    def day_offset(self) -> int:
        return {"yesterday": -1, "today": 0, "tomorrow": 1}[self.value]


def is_window_active(window: DayWindow, minute: int, context: Context | str) -> bool:
    """Is ``window`` open at ``minute`` of today, seen from ``context``?"""
    if not window.usable:
        return False
    ctx = Context(context)
    s, e = window.start_minutes, window.end_minutes
    flagged = window.starts_previous_day

    if ctx is Context.YESTERDAY:
        if not flagged and s > e:
            return minute <= e
        return False
    if ctx is Context.TODAY:
        if flagged:
            return minute <= e
        if s < e:
            return s <= minute <= e
        return minute >= s
    # TOMORROW
    if flagged:
        return minute >= s
    return False


def window_interval(window: DayWindow, day_offset: int = 0) -> Interval | None:
    """
    Absolute interval covered by ``window`` when it is filed ``day_offset``
    days away from the query date.
    """
    if not window.usable:
        return None
    base = day_offset * MINUTES_PER_DAY
    s, e = window.start_minutes, window.end_minutes
    if window.starts_previous_day:
        return (base - MINUTES_PER_DAY + s, base + e)
    if s < e:
        return (base + s, base + e)
    if s > e:
        return (base + s, base + MINUTES_PER_DAY + e)
    # start == end runs to the end of the filed day
    return (base + s, base + MINUTES_PER_DAY - 1)


def shift_intervals(schedule: WeeklySchedule, day: date) -> list[Interval]:
    """Intervals from the previous, current and next weekday around ``day``."""
    out: list[Interval] = []
    for offset in (-1, 0, 1):
        window = schedule.for_date(day + timedelta(days=offset))
        iv = window_interval(window, offset)
        if iv is not None:
            out.append(iv)
    return out


def is_shift_active_at(schedule: WeeklySchedule, instant: datetime) -> bool:
    m = minute_of_day(instant)
    return any(lo <= m <= hi for lo, hi in shift_intervals(schedule, instant.date()))


def is_shift_active_by_context(schedule: WeeklySchedule, instant: datetime) -> bool:
    """Three-context scan; kept as the reference for ``is_shift_active_at``."""
    m = minute_of_day(instant)
    for ctx in Context:
        window = schedule.for_date(instant.date() + timedelta(days=ctx.day_offset))
        if is_window_active(window, m, ctx):
            return True
    return False


def is_time_in_window(start: time, end: time, instant: time | datetime) -> bool:
    """Single start/end pair with no weekday axis; wraps past midnight."""
    m = minute_of_day(instant)
    s, e = minute_of_day(start), minute_of_day(end)
    if s < e:
        return s <= m <= e
    return m >= s or m <= e


def active_minutes(window: DayWindow, context: Context | str) -> Iterator[int]:
    """Minutes of the day at which ``window`` is active from ``context``."""
    for m in range(MINUTES_PER_DAY):
        if is_window_active(window, m, context):
            yield m
