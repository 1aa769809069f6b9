from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from presence.staff import DayWindow, WeeklySchedule
from presence.windows import (
    Context,
    active_minutes,
    is_shift_active_at,
    is_shift_active_by_context,
    is_time_in_window,
    is_window_active,
    shift_intervals,
)

MONDAY = date(2024, 3, 4)
NIGHT = DayWindow(True, "22:00", "06:00")
NIGHT_FLAGGED = DayWindow(True, "22:00", "06:00", starts_previous_day=True)
DAY = DayWindow(True, "08:00", "17:00")


def _at(day: date, hhmm: str) -> datetime:
    h, m = (int(p) for p in hhmm.split(":"))
    return datetime.combine(day, time(h, m))


def _schedule(**windows: DayWindow) -> WeeklySchedule:
    return WeeklySchedule.from_mapping(windows)


# ---------- single window, per context ----------


def test_implicit_wrap_from_yesterday_covers_early_morning():
    assert is_window_active(NIGHT, 300, Context.YESTERDAY)
    assert not is_window_active(NIGHT, 400, Context.YESTERDAY)


def test_implicit_wrap_today_only_covers_after_start():
    assert is_window_active(NIGHT, 22 * 60, "today")
    assert is_window_active(NIGHT, 23 * 60 + 59, "today")
    assert not is_window_active(NIGHT, 300, "today")


def test_flagged_window_today_covers_until_end():
    assert is_window_active(NIGHT_FLAGGED, 300, "today")
    assert not is_window_active(NIGHT_FLAGGED, 23 * 60, "today")


def test_flagged_window_tomorrow_covers_after_start():
    assert is_window_active(NIGHT_FLAGGED, 23 * 60, "tomorrow")
    assert not is_window_active(NIGHT_FLAGGED, 300, "tomorrow")
    assert not is_window_active(NIGHT, 23 * 60, "tomorrow")


def test_plain_window_is_inclusive_on_both_ends():
    assert is_window_active(DAY, 8 * 60, "today")
    assert is_window_active(DAY, 17 * 60, "today")
    assert not is_window_active(DAY, 17 * 60 + 1, "today")
    assert not is_window_active(DAY, 10 * 60, "yesterday")


@pytest.mark.parametrize(
    "window",
    [
        DayWindow(False, "08:00", "17:00"),
        DayWindow(True, None, "17:00"),
        DayWindow(True, "08:00", None),
    ],
)
def test_disabled_or_incomplete_windows_are_never_active(window):
    for ctx in Context:
        assert list(active_minutes(window, ctx)) == []


@pytest.mark.parametrize("window", [NIGHT, NIGHT_FLAGGED, DAY])
def test_no_minute_is_active_in_two_contexts(window):
    seen: set[int] = set()
    for ctx in Context:
        minutes = set(active_minutes(window, ctx))
        assert not (seen & minutes)
        seen |= minutes


# ---------- composed schedule ----------


def test_overnight_shift_filed_on_sunday_is_active_monday_morning():
    schedule = _schedule(sunday=NIGHT, monday=NIGHT)
    assert is_shift_active_at(schedule, _at(MONDAY, "05:00"))
    assert is_shift_active_at(schedule, _at(MONDAY, "23:00"))
    assert not is_shift_active_at(schedule, _at(MONDAY, "12:00"))


def test_overnight_shift_without_previous_day_entry_is_off_monday_morning():
    schedule = _schedule(monday=NIGHT)
    assert not is_shift_active_at(schedule, _at(MONDAY, "05:00"))
    assert is_shift_active_at(schedule, _at(MONDAY + timedelta(days=1), "05:00"))


def test_flagged_shift_starts_the_evening_before():
    schedule = _schedule(tuesday=NIGHT_FLAGGED)
    assert is_shift_active_at(schedule, _at(MONDAY, "22:30"))
    assert is_shift_active_at(schedule, _at(MONDAY + timedelta(days=1), "06:00"))
    assert not is_shift_active_at(schedule, _at(MONDAY + timedelta(days=1), "22:30"))


def test_shift_intervals_are_relative_to_query_midnight():
    schedule = _schedule(sunday=NIGHT, monday=DAY)
    assert shift_intervals(schedule, MONDAY) == [(-120, 360), (480, 1020)]


SCHEDULES = [
    _schedule(sunday=NIGHT, monday=NIGHT, tuesday=NIGHT),
    _schedule(monday=NIGHT_FLAGGED, tuesday=NIGHT_FLAGGED, wednesday=DAY),
    _schedule(monday=DAY, tuesday=DayWindow(True, "09:00", "09:00")),
    _schedule(sunday=DayWindow(True, "15:00", "15:00", starts_previous_day=True)),
    WeeklySchedule(),
]


@pytest.mark.parametrize("schedule", SCHEDULES)
def test_interval_evaluator_matches_context_scan(schedule):
    for offset in range(-1, 3):
        day = MONDAY + timedelta(days=offset)
        for minute in range(0, 24 * 60, 10):
            instant = datetime.combine(day, time(minute // 60, minute % 60))
            assert is_shift_active_at(schedule, instant) == is_shift_active_by_context(
                schedule, instant
            ), instant


# ---------- single start/end pair ----------


def test_time_window_without_weekday_axis_wraps():
    assert is_time_in_window(time(20), time(8), time(23, 0))
    assert is_time_in_window(time(20), time(8), time(7, 59))
    assert not is_time_in_window(time(20), time(8), time(12, 0))
    assert is_time_in_window(time(8), time(20), time(12, 0))
