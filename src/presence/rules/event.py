from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from presence.records import Event
from presence.result_types import PresenceStatus, StatusKind
from presence.rules.base import StatusQuery, StatusRule
from presence.staff import WeeklySchedule
from presence.windows import is_shift_active_at


def fallback_schedule(
    schedule: WeeklySchedule, day: date, weekdays: Iterable[int]
) -> WeeklySchedule:
    """
    The normal schedule, with ``day``'s window borrowed from the first usable
    fallback weekday when the collaborator does not normally work that day.
    """
    if schedule.for_date(day).usable:
        return schedule
    for wd in weekdays:
        window = schedule.for_weekday(wd)
        if window.usable:
            return schedule.with_window(day.weekday(), window)
    return schedule


class EventRule(StatusRule):
    """
    Same-day event. Credit categories (extra work) are present while the
    event's temporary schedule, or the normal one, is open; every other
    behavior is an absence.
    """

    order = 30
    name = "Event"

    def _event_for(self, query: StatusQuery) -> Optional[Event]:
        return next(
            (
                e
                for e in query.events
                if e.counts_as_approved and e.covers(query.day)
            ),
            None,
        )

    def evaluate(self, query: StatusQuery) -> Optional[PresenceStatus]:
        ev = self._event_for(query)
        if ev is None:
            return None

        if not ev.behavior.is_credit:
            return PresenceStatus(
                StatusKind.EVENT, False, category=ev.category.id, label=ev.category.label
            )

        schedule = ev.temporary_schedule or fallback_schedule(
            query.collaborator.schedule, query.day, self.cfg.FALLBACK_WEEKDAYS
        )
        present = is_shift_active_at(schedule, query.instant)
        label = ev.category.label if present else f"{ev.category.label} (off shift)"
        return PresenceStatus(
            StatusKind.EVENT, present, category=ev.category.id, label=label
        )
