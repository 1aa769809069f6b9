from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from presence.dates import (
    covers,
    inclusive_days,
    minute_of_day,
    parse_date,
    parse_datetime,
    parse_time,
)
from presence.errors import InvalidRangeError
from presence.staff import WeeklySchedule


class EventBehavior(str, Enum):
    NEUTRAL = "neutral"
    DEBIT = "debit"
    CREDIT_1X = "credit_1x"
    CREDIT_2X = "credit_2x"

    @property
    def gain_factor(self) -> int:
        return {"credit_1x": 1, "credit_2x": 2}.get(self.value, 0)

    @property
    def use_factor(self) -> int:
        return 1 if self is EventBehavior.DEBIT else 0

    @property
    def is_credit(self) -> bool:
        return self in (EventBehavior.CREDIT_1X, EventBehavior.CREDIT_2X)

    @property
    def is_absence(self) -> bool:
        return not self.is_credit


class EventStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    COUNTER_OFFER = "counter_offer"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: Any) -> Optional["EventStatus"]:
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        return cls(_EVENT_STATUS_ALIASES.get(token, token))


_EVENT_STATUS_ALIASES = {
    "pendente": "pending",
    "aprovado": "approved",
    "nova_opcao": "counter_offer",
    "rejeitado": "rejected",
}


class VacationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    NEGOTIATION = "negotiation"
    COUNTER_OFFER = "counter_offer"

    @classmethod
    def parse(cls, value: Any) -> "VacationStatus":
        if isinstance(value, cls):
            return value
        token = str(value or "pending").strip().lower()
        return cls(_VACATION_STATUS_ALIASES.get(token, token))


_VACATION_STATUS_ALIASES = {
    "pendente": "pending",
    "aprovado": "approved",
    "negociacao": "negotiation",
    "nova_opcao": "counter_offer",
}


@dataclass(frozen=True, slots=True)
class EventCategory:
    id: str
    label: str
    behavior: EventBehavior = EventBehavior.NEUTRAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "behavior", EventBehavior(self.behavior))


def _check_span(start: date, end: date, what: str) -> None:
    if end < start:
        raise InvalidRangeError(f"{what} ends ({end}) before it starts ({start})")


@dataclass(frozen=True, slots=True)
class Event:
    """
    A one-off absence or extra-work record.

    ``status`` may be ``None`` for legacy records, which count as approved.
    """

    collaborator_id: str
    category: EventCategory
    start_date: date
    end_date: date
    status: Optional[EventStatus] = None
    temporary_schedule: Optional[WeeklySchedule] = None
    collaborator_accepted_counter_offer: bool = False
    id: str = ""
    observation: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "collaborator_id", str(self.collaborator_id))
        object.__setattr__(self, "start_date", parse_date(self.start_date))
        object.__setattr__(self, "end_date", parse_date(self.end_date))
        object.__setattr__(self, "status", EventStatus.parse(self.status))
        _check_span(self.start_date, self.end_date, "Event")

    @property
    def behavior(self) -> EventBehavior:
        return self.category.behavior

    @property
    def counts_as_approved(self) -> bool:
        return self.status is None or self.status is EventStatus.APPROVED

    @property
    def days(self) -> int:
        return inclusive_days(self.start_date, self.end_date)

    @property
    def days_gained(self) -> int:
        return self.days * self.behavior.gain_factor

    @property
    def days_used(self) -> int:
        return self.days * self.behavior.use_factor

    def covers(self, day: date) -> bool:
        return covers(self.start_date, self.end_date, day)

    def with_status(self, status: EventStatus | str) -> "Event":
        return replace(self, status=EventStatus.parse(status))

    def accept_counter_offer(self) -> "Event":
        """Collaborator accepts the manager's counter offer."""
        if self.status is not EventStatus.COUNTER_OFFER:
            raise ValueError(
                f"Only counter offers can be accepted (status={self.status})."
            )
        return replace(
            self,
            status=EventStatus.APPROVED,
            collaborator_accepted_counter_offer=True,
        )


@dataclass(frozen=True, slots=True)
class OnCallRecord:
    """An on-call shift. Always a presence condition, never an absence."""

    collaborator_id: str
    start_date: date
    end_date: date
    start_time: time
    end_time: time
    id: str = ""
    observation: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "collaborator_id", str(self.collaborator_id))
        object.__setattr__(self, "start_date", parse_date(self.start_date))
        object.__setattr__(self, "end_date", parse_date(self.end_date))
        object.__setattr__(self, "start_time", parse_time(self.start_time))
        object.__setattr__(self, "end_time", parse_time(self.end_time))
        _check_span(self.start_date, self.end_date, "On-call record")

    @property
    def start_minutes(self) -> int:
        return minute_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minute_of_day(self.end_time)

    def covers(self, day: date) -> bool:
        return covers(self.start_date, self.end_date, day)


@dataclass(frozen=True, slots=True)
class VacationRequest:
    collaborator_id: str
    start_date: date
    end_date: date
    status: VacationStatus = VacationStatus.PENDING
    id: str = ""
    notes: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "collaborator_id", str(self.collaborator_id))
        object.__setattr__(self, "start_date", parse_date(self.start_date))
        object.__setattr__(self, "end_date", parse_date(self.end_date))
        object.__setattr__(self, "status", VacationStatus.parse(self.status))
        _check_span(self.start_date, self.end_date, "Vacation request")

    @property
    def approved(self) -> bool:
        return self.status is VacationStatus.APPROVED

    def covers(self, day: date) -> bool:
        return covers(self.start_date, self.end_date, day)


@dataclass(frozen=True, slots=True)
class BalanceAdjustment:
    """Manual time-bank correction in days. Corrections are new adjustments."""

    collaborator_id: str
    amount: int
    reason: str
    created_at: datetime
    created_by: str
    id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "collaborator_id", str(self.collaborator_id))
        object.__setattr__(self, "created_at", parse_datetime(self.created_at))


@dataclass(frozen=True, slots=True)
class CoverageRule:
    """Minimum headcount for a role, optionally scoped to a sector and shift."""

    role_name: str
    min_people: int
    sector: Optional[str] = None
    shift_label: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_people", int(self.min_people))
        if self.min_people < 0:
            raise ValueError("min_people must be >= 0.")
        if self.sector == "":
            object.__setattr__(self, "sector", None)
        if self.shift_label == "":
            object.__setattr__(self, "shift_label", None)

    @property
    def scope(self) -> tuple[str, Optional[str], Optional[str]]:
        return (self.role_name, self.sector, self.shift_label)


@dataclass(frozen=True, slots=True)
class DraftEvent:
    """What-if absence used only inside a coverage simulation."""

    collaborator_id: str
    start_date: date
    end_date: date
    category: str = "vacation"
    id: str = field(default="")

    def __post_init__(self) -> None:
        object.__setattr__(self, "collaborator_id", str(self.collaborator_id))
        object.__setattr__(self, "start_date", parse_date(self.start_date))
        object.__setattr__(self, "end_date", parse_date(self.end_date))
        _check_span(self.start_date, self.end_date, "Draft event")

    def covers(self, day: date) -> bool:
        return covers(self.start_date, self.end_date, day)
