"""Calendar views: what touches a given day, and what is coming up next."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional, Union

import pandas as pd

from presence.config import Config, cfg as default_cfg
from presence.dates import parse_date
from presence.input_data import Snapshot
from presence.records import Event, OnCallRecord, VacationRequest
from presence.scope import (
    ALL,
    UNRESTRICTED,
    ScopeFilter,
    Visibility,
    filter_population,
)

AgendaRecord = Union[Event, OnCallRecord, VacationRequest]


@dataclass(frozen=True)
class AgendaEntry:
    kind: str  # "event" | "on_call" | "vacation"
    collaborator_id: str
    name: str
    start_date: date
    end_date: date
    label: str
    status: Optional[str]
    record: AgendaRecord = field(compare=False, repr=False)


@dataclass(frozen=True)
class DayAgenda:
    date: date
    holiday: Optional[str]
    entries: tuple[AgendaEntry, ...]

    @property
    def is_empty(self) -> bool:
        return not self.entries and self.holiday is None


def _entry(rec: AgendaRecord, name: str) -> AgendaEntry:
    if isinstance(rec, Event):
        return AgendaEntry(
            "event",
            rec.collaborator_id,
            name,
            rec.start_date,
            rec.end_date,
            rec.category.label,
            rec.status.value if rec.status is not None else None,
            rec,
        )
    if isinstance(rec, OnCallRecord):
        label = f"On call {rec.start_time:%H:%M}-{rec.end_time:%H:%M}"
        return AgendaEntry(
            "on_call",
            rec.collaborator_id,
            name,
            rec.start_date,
            rec.end_date,
            label,
            None,
            rec,
        )
    return AgendaEntry(
        "vacation",
        rec.collaborator_id,
        name,
        rec.start_date,
        rec.end_date,
        "Vacation request",
        rec.status.value,
        rec,
    )


def _visible_names(
    snapshot: Snapshot,
    scope: ScopeFilter,
    visibility: Visibility,
    name_contains: str = "",
    include_inactive: bool = True,
) -> dict[str, str]:
    needle = name_contains.strip().lower()
    return {
        c.id: c.name
        for c in filter_population(
            snapshot.collaborators, scope, visibility, include_inactive=include_inactive
        )
        if not needle or needle in c.name.lower()
    }


def _records(snapshot: Snapshot, kinds: Iterable[str]) -> list[AgendaRecord]:
    out: list[AgendaRecord] = []
    if "event" in kinds:
        out.extend(snapshot.events)
    if "on_call" in kinds:
        out.extend(snapshot.on_calls)
    if "vacation" in kinds:
        out.extend(snapshot.vacations)
    return out


def day_agenda(
    snapshot: Snapshot,
    day: Any,
    cfg: Config | None = None,
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
    name_contains: str = "",
) -> DayAgenda:
    """
    Events, on-call records and vacation requests of any status that touch
    ``day``, for the collaborators in scope, plus the holiday name if any.
    """
    C = cfg or default_cfg
    d = parse_date(day)
    names = _visible_names(snapshot, scope, visibility, name_contains)
    entries = tuple(
        _entry(rec, names[rec.collaborator_id])
        for rec in _records(snapshot, ("event", "on_call", "vacation"))
        if rec.collaborator_id in names and rec.covers(d)
    )
    return DayAgenda(date=d, holiday=C.holiday_name(d), entries=entries)


def month_agenda(
    snapshot: Snapshot,
    year: int,
    month: int,
    cfg: Config | None = None,
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
) -> list[DayAgenda]:
    """Every day of the month, in order; empty days included."""
    _, last = calendar.monthrange(year, month)
    return [
        day_agenda(snapshot, date(year, month, n), cfg, scope, visibility)
        for n in range(1, last + 1)
    ]


def upcoming(
    snapshot: Snapshot,
    today: Any,
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
    limit: Optional[int] = None,
    cfg: Config | None = None,
) -> list[AgendaEntry]:
    """
    Events and on-call records of active collaborators in scope that start
    on or after ``today``, earliest first.
    """
    C = cfg or default_cfg
    n = C.UPCOMING_LIMIT if limit is None else limit
    d = parse_date(today)
    names = _visible_names(snapshot, scope, visibility, include_inactive=False)
    entries = [
        _entry(rec, names[rec.collaborator_id])
        for rec in _records(snapshot, ("event", "on_call"))
        if rec.collaborator_id in names and rec.start_date >= d
    ]
    entries.sort(key=lambda e: e.start_date)
    return entries[:n]


def agenda_frame(entries: Iterable[AgendaEntry]) -> pd.DataFrame:
    cols = [
        "kind",
        "collaborator_id",
        "name",
        "start_date",
        "end_date",
        "label",
        "status",
    ]
    return pd.DataFrame(
        [
            {
                "kind": e.kind,
                "collaborator_id": e.collaborator_id,
                "name": e.name,
                "start_date": e.start_date,
                "end_date": e.end_date,
                "label": e.label,
                "status": e.status,
            }
            for e in entries
        ],
        columns=cols,
    )
