from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Optional

from presence.dates import parse_date
from presence.records import EventBehavior, EventCategory
from presence.staff import WeeklySchedule


def _default_event_types() -> list[EventCategory]:
    return [
        EventCategory("vacation", "Vacation", EventBehavior.NEUTRAL),
        EventCategory("day_off", "Day off", EventBehavior.DEBIT),
        EventCategory("worked_day", "Worked day", EventBehavior.CREDIT_2X),
        EventCategory("overtime_day", "Overtime day", EventBehavior.CREDIT_1X),
    ]


def _default_holidays() -> dict[str, str]:
    return {
        "01-01": "New Year's Day",
        "04-21": "Tiradentes",
        "05-01": "Labour Day",
        "09-07": "Independence Day",
        "10-12": "Our Lady of Aparecida",
        "11-02": "All Souls' Day",
        "11-15": "Republic Proclamation Day",
        "11-20": "Black Consciousness Day",
        "11-28": "City Anniversary",
        "12-25": "Christmas Day",
    }


def _default_templates() -> dict[str, WeeklySchedule]:
    return {
        "business_hours": WeeklySchedule.uniform("08:00", "17:00"),
        "evening": WeeklySchedule.uniform("14:00", "22:00"),
        "overnight": WeeklySchedule.uniform("22:00", "06:00"),
        # filed under the weekday the shift ends on
        "overnight_ending": WeeklySchedule.uniform(
            "22:00", "06:00", weekdays=(1, 2, 3, 4, 5), starts_previous_day=True
        ),
        "six_by_one": WeeklySchedule.uniform(
            "07:00", "15:20", weekdays=(0, 1, 2, 3, 4, 5, 6)
        ),
    }


@dataclass
class Config:

    # Default simulation horizon
    START_DATE: date = field(default_factory=date.today)
    DAYS: int = 31

    ### ROTATION ###

    # Three weeks on, one week off, always landing on Sunday
    ROTATION_CYCLE_WEEKS: int = 4
    ROTATION_ANCHOR_WEEKDAY: int = 6

    ### EVENTS ###

    EVENT_TYPES: list[EventCategory] = field(default_factory=_default_event_types)

    # Legacy category ids still found in older records
    LEGACY_CATEGORY_ALIASES: dict[str, str] = field(
        default_factory=lambda: {
            "ferias": "vacation",
            "folga": "day_off",
            "trabalhado": "worked_day",
        }
    )

    # Weekdays searched (in order) for a window when a credit event falls on
    # a weekday the collaborator does not normally work
    FALLBACK_WEEKDAYS: tuple[int, ...] = (0, 1, 2, 3, 4)

    ### CALENDAR ###

    HOLIDAYS: dict[str, str] = field(default_factory=_default_holidays)
    EXTRA_HOLIDAYS: dict[date, str] = field(default_factory=dict)

    SCHEDULE_TEMPLATES: dict[str, WeeklySchedule] = field(
        default_factory=_default_templates
    )

    ### SIMULATION ###

    NUM_PARALLEL_WORKERS: int = 1
    UPCOMING_LIMIT: int = 5

    # Detailed status printing for these collaborator ids
    INSPECT_COLLABORATOR_IDS: list[str] = field(default_factory=list)

    # RANDOM SEED
    SEED: Optional[int] = None

    def __post_init__(self) -> None:
        self.START_DATE = parse_date(self.START_DATE)
        self.EXTRA_HOLIDAYS = {
            parse_date(k): v for k, v in (self.EXTRA_HOLIDAYS or {}).items()
        }

    @property
    def END_DATE(self) -> date:
        return self.START_DATE + timedelta(days=self.DAYS - 1)

    def validate(self) -> None:
        """
        Validate the Config object has sensible values before simulating.
        """
        if self.DAYS <= 0:
            raise ValueError("DAYS must be > 0.")
        if self.ROTATION_CYCLE_WEEKS <= 0:
            raise ValueError("ROTATION_CYCLE_WEEKS must be > 0.")
        if not (0 <= self.ROTATION_ANCHOR_WEEKDAY <= 6):
            raise ValueError("ROTATION_ANCHOR_WEEKDAY must be within [0, 6].")
        if any(not (0 <= d <= 6) for d in self.FALLBACK_WEEKDAYS):
            raise ValueError("FALLBACK_WEEKDAYS must be within [0, 6].")
        if self.NUM_PARALLEL_WORKERS <= 0:
            raise ValueError("NUM_PARALLEL_WORKERS must be > 0.")
        if self.UPCOMING_LIMIT < 0:
            raise ValueError("UPCOMING_LIMIT must be non-negative.")
        ids = [t.id for t in self.EVENT_TYPES]
        if len(ids) != len(set(ids)):
            raise ValueError("EVENT_TYPES ids must be unique.")
        for key in self.HOLIDAYS:
            month, _, day = key.partition("-")
            if not (month.isdigit() and day.isdigit()):
                raise ValueError(f"HOLIDAYS keys must look like 'MM-DD', got {key!r}.")

    def event_type(self, category_id: str) -> EventCategory:
        """
        Resolve a category id (or legacy alias) to its configured category.

        Unknown ids resolve to a neutral category labelled with the id itself.
        """
        cid = self.LEGACY_CATEGORY_ALIASES.get(category_id, category_id)
        for cat in self.EVENT_TYPES:
            if cat.id == cid:
                return cat
        return EventCategory(category_id, category_id, EventBehavior.NEUTRAL)

    def holidays_for_year(self, year: int) -> dict[date, str]:
        out: dict[date, str] = {}
        for key, name in self.HOLIDAYS.items():
            month, day = (int(p) for p in key.split("-"))
            try:
                out[date(year, month, day)] = name
            except ValueError:
                continue  # e.g. 02-29 outside leap years
        out.update({d: n for d, n in self.EXTRA_HOLIDAYS.items() if d.year == year})
        return out

    def holiday_name(self, day: date) -> Optional[str]:
        named = self.EXTRA_HOLIDAYS.get(day)
        if named is not None:
            return named
        return self.HOLIDAYS.get(day.strftime("%m-%d"))


def add_holiday(C: Config, day: Any, name: str, recurring: bool = False) -> None:
    d = parse_date(day)
    if recurring:
        C.HOLIDAYS[d.strftime("%m-%d")] = name
    else:
        C.EXTRA_HOLIDAYS[d] = name


def add_event_type(
    C: Config, category_id: str, label: str, behavior: EventBehavior | str
) -> EventCategory:
    cat = EventCategory(category_id, label, EventBehavior(behavior))
    C.EVENT_TYPES = [t for t in C.EVENT_TYPES if t.id != category_id] + [cat]
    return cat


cfg = Config(SEED=3)
