# presence/result_types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Literal, Optional

import pandas as pd

from presence.errors import DanglingReferenceError

CoverageStatus = Literal["ok", "alert", "violation"]


class StatusKind(str, Enum):
    VACATION = "vacation"
    ON_CALL = "on_call"
    EVENT = "event"
    ROTATION_OFF = "rotation_off"
    WORKING = "working"
    IDLE = "idle"


@dataclass(frozen=True)
class PresenceStatus:
    """Resolved state of one collaborator at one instant."""

    kind: StatusKind
    present: bool
    category: Optional[str] = None
    label: str = ""

    @property
    def tag(self) -> str:
        if self.kind is StatusKind.EVENT:
            return f"event:{self.category}"
        return self.kind.value


IDLE = PresenceStatus(StatusKind.IDLE, False, label="Off shift")


@dataclass(frozen=True)
class CollaboratorStatus:
    collaborator_id: str
    name: str
    role: str
    branch: str
    shift_label: str
    status: PresenceStatus


@dataclass(frozen=True)
class PresenceSummary:
    total: int
    present: int
    absent: int


def classify(available: int, minimum: int) -> CoverageStatus:
    if available < minimum:
        return "violation"
    if available == minimum:
        return "alert"
    return "ok"


@dataclass(frozen=True)
class GridCell:
    """Availability of one role on one date against its target."""

    date: date
    role: str
    available: int
    min: int
    status: CoverageStatus
    is_holiday: bool = False

    @property
    def missing(self) -> int:
        return self.min - self.available


@dataclass(frozen=True)
class DayTotal:
    """Cross-role total for one date. Holidays carry zeros and stay ``ok``."""

    date: date
    available: int
    min: int
    status: CoverageStatus
    holiday: Optional[str] = None

    @property
    def is_holiday(self) -> bool:
        return self.holiday is not None


@dataclass
class SimulationResult:
    """Structured output of a coverage simulation."""

    dates: list[date]
    roles: list[str]
    cells: list[GridCell]
    totals: list[DayTotal]
    skipped: list[DanglingReferenceError] = field(default_factory=list)

    def cell(self, day: date, role: str) -> GridCell:
        for c in self.cells:
            if c.date == day and c.role == role:
                return c
        raise KeyError((day, role))

    def total(self, day: date) -> DayTotal:
        for t in self.totals:
            if t.date == day:
                return t
        raise KeyError(day)

    def to_frame(self) -> pd.DataFrame:
        cols = ["date", "role", "available", "min", "status", "missing", "is_holiday"]
        return pd.DataFrame(
            [
                {
                    "date": c.date,
                    "role": c.role,
                    "available": c.available,
                    "min": c.min,
                    "status": c.status,
                    "missing": c.missing,
                    "is_holiday": c.is_holiday,
                }
                for c in self.cells
            ],
            columns=cols,
        )

    def totals_frame(self) -> pd.DataFrame:
        cols = ["date", "available", "min", "status", "holiday"]
        return pd.DataFrame(
            [
                {
                    "date": t.date,
                    "available": t.available,
                    "min": t.min,
                    "status": t.status,
                    "holiday": t.holiday,
                }
                for t in self.totals
            ],
            columns=cols,
        )

    def pivot(self, value: str = "available") -> pd.DataFrame:
        """Role x date matrix of ``value`` (``available``, ``min``, ``status``...)."""
        df = self.to_frame()
        if df.empty:
            return pd.DataFrame(index=pd.Index(self.roles, name="role"))
        out = df.pivot(index="role", columns="date", values=value)
        return out.reindex(index=self.roles, columns=self.dates)
