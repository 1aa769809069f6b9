from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Optional

from presence.dates import days_between

DEFAULT_CYCLE_WEEKS = 4
DEFAULT_ANCHOR_WEEKDAY = 6  # Sunday


def rotation_week_index(check_date: date, reference_date: date) -> int:
    """Whole weeks from the reference to ``check_date``, rounded half up."""
    return math.floor(days_between(reference_date, check_date) / 7 + 0.5)


def is_rotation_day_off(
    check_date: date,
    reference_date: Optional[date],
    *,
    cycle_weeks: int = DEFAULT_CYCLE_WEEKS,
    anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY,
) -> bool:
    """
    True when ``check_date`` is a rotation day off.

    Only the anchor weekday can be a rotation day off. The reference date is
    the last confirmed day off, and the pattern repeats every ``cycle_weeks``
    in both directions from it.
    """
    if reference_date is None:
        return False
    if check_date.weekday() != anchor_weekday:
        return False
    return rotation_week_index(check_date, reference_date) % cycle_weeks == 0


def next_rotation_day_off(
    after: date,
    reference_date: Optional[date],
    *,
    cycle_weeks: int = DEFAULT_CYCLE_WEEKS,
    anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY,
) -> Optional[date]:
    """First rotation day off on or after ``after`` (None without a reference)."""
    if reference_date is None:
        return None
    first_anchor = after + timedelta(days=(anchor_weekday - after.weekday()) % 7)
    for k in range(cycle_weeks):
        candidate = first_anchor + timedelta(weeks=k)
        if is_rotation_day_off(
            candidate,
            reference_date,
            cycle_weeks=cycle_weeks,
            anchor_weekday=anchor_weekday,
        ):
            return candidate
    return None
