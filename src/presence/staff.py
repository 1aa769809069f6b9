from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, time
from enum import IntEnum
from typing import Any, Mapping, Optional

from presence.dates import minute_of_day, parse_optional_date, parse_optional_time


class Weekday(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def parse(cls, key: Any) -> "Weekday":
        if isinstance(key, cls):
            return key
        if isinstance(key, int):
            return cls(key % 7)
        token = str(key).strip().lower()
        if token.isdigit():
            return cls(int(token) % 7)
        if token in _WEEKDAY_ALIASES:
            return cls(_WEEKDAY_ALIASES[token])
        raise ValueError(f"Unknown weekday key: {key!r}")

    def previous(self) -> "Weekday":
        return Weekday((self - 1) % 7)

    def next(self) -> "Weekday":
        return Weekday((self + 1) % 7)


_WEEKDAY_ALIASES: dict[str, int] = {}
for _idx, _names in enumerate(
    [
        ("monday", "mon", "segunda"),
        ("tuesday", "tue", "terca"),
        ("wednesday", "wed", "quarta"),
        ("thursday", "thu", "quinta"),
        ("friday", "fri", "sexta"),
        ("saturday", "sat", "sabado"),
        ("sunday", "sun", "domingo"),
    ]
):
    for _name in _names:
        _WEEKDAY_ALIASES[_name] = _idx


@dataclass(frozen=True, slots=True)
class DayWindow:
    """
    One weekday's work window.

    ``start > end`` without ``starts_previous_day`` is an implicit wrap: the
    shift starts on this weekday and ends on the next one. With
    ``starts_previous_day`` the window is filed under the weekday it ends on.
    """

    enabled: bool = False
    start: Optional[time] = None
    end: Optional[time] = None
    starts_previous_day: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", parse_optional_time(self.start))
        object.__setattr__(self, "end", parse_optional_time(self.end))

    @property
    def usable(self) -> bool:
        return self.enabled and self.start is not None and self.end is not None

    @property
    def start_minutes(self) -> int:
        return minute_of_day(self.start) if self.start is not None else 0

    @property
    def end_minutes(self) -> int:
        return minute_of_day(self.end) if self.end is not None else 0

    @property
    def wraps(self) -> bool:
        """Numeric wrap without the explicit previous-day flag."""
        return not self.starts_previous_day and self.start_minutes > self.end_minutes

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "DayWindow":
        if not raw:
            return cls()
        return cls(
            enabled=bool(raw.get("enabled", False)),
            start=raw.get("start") or None,
            end=raw.get("end") or None,
            starts_previous_day=bool(
                raw.get("starts_previous_day", raw.get("startsPreviousDay", False))
            ),
        )


OFF = DayWindow()


@dataclass(frozen=True, slots=True)
class WeeklySchedule:
    """Seven day windows keyed by weekday (Monday = 0)."""

    windows: tuple[DayWindow, ...] = field(default_factory=lambda: (OFF,) * 7)

    def __post_init__(self) -> None:
        if len(self.windows) != 7:
            raise ValueError("A weekly schedule needs exactly seven day windows.")

    def for_weekday(self, weekday: int) -> DayWindow:
        return self.windows[int(weekday) % 7]

    def for_date(self, day: date) -> DayWindow:
        return self.windows[day.weekday()]

    def with_window(self, weekday: int, window: DayWindow) -> "WeeklySchedule":
        ws = list(self.windows)
        ws[int(weekday) % 7] = window
        return replace(self, windows=tuple(ws))

    def enabled_weekdays(self) -> list[Weekday]:
        return [Weekday(i) for i, w in enumerate(self.windows) if w.usable]

    @classmethod
    def from_mapping(cls, raw: Mapping[Any, Any] | None) -> "WeeklySchedule":
        """Build from a mapping keyed by weekday name, alias or index."""
        ws = [OFF] * 7
        for key, value in (raw or {}).items():
            if not isinstance(value, DayWindow):
                value = DayWindow.from_mapping(value)
            ws[Weekday.parse(key)] = value
        return cls(windows=tuple(ws))

    @classmethod
    def uniform(
        cls,
        start: str | time,
        end: str | time,
        weekdays: tuple[int, ...] = (0, 1, 2, 3, 4),
        starts_previous_day: bool = False,
    ) -> "WeeklySchedule":
        window = DayWindow(True, start, end, starts_previous_day)  # type: ignore[arg-type]
        return cls(windows=tuple(window if i in weekdays else OFF for i in range(7)))


@dataclass(frozen=True, slots=True)
class Collaborator:
    """A worker as held by the directory; the engine only reads it."""

    id: str
    badge_id: str = ""
    name: str = ""
    branch: str = ""
    sector: Optional[str] = None
    role: str = ""
    shift_label: str = ""
    active: Optional[bool] = True
    schedule: WeeklySchedule = field(default_factory=WeeklySchedule)
    has_rotation: bool = False
    rotation_group: str = ""
    rotation_reference_date: Optional[date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(
            self,
            "rotation_reference_date",
            parse_optional_date(self.rotation_reference_date),
        )
        if isinstance(self.schedule, Mapping):
            object.__setattr__(
                self, "schedule", WeeklySchedule.from_mapping(self.schedule)
            )
        if self.sector == "":
            object.__setattr__(self, "sector", None)

    @property
    def is_active(self) -> bool:
        # Legacy records carry no flag and count as active.
        return self.active is not False

    def __repr__(self) -> str:
        rot = (
            f"rotation={self.rotation_reference_date.isoformat()}"
            if self.has_rotation and self.rotation_reference_date
            else "rotation=none"
        )
        days = ",".join(d.name[:3].lower() for d in self.schedule.enabled_weekdays())
        return (
            f"Collaborator(id={self.id!r}, name={self.name!r}, role={self.role!r}, "
            f"sector={self.sector!r}, branch={self.branch!r}, shift={self.shift_label!r}, "
            f"days=[{days}], {rot})"
        )
