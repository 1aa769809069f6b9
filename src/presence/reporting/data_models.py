from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class CoverageMetrics:
    """Key metrics summarising a coverage simulation."""

    dates: int
    holiday_dates: int
    cells: int
    ok_cells: int
    alert_cells: int
    violation_cells: int
    violation_days: int  # non-holiday dates whose grand total is a violation
    worst_day: Optional[date]  # most missing people across roles
    worst_day_missing: int


@dataclass(frozen=True)
class RoleGap:
    """Shortfall record for a single role over the horizon."""

    role: str
    target: int
    violation_days: int
    alert_days: int
    max_missing: int  # max(min - available, 0) over working days
    worst_day: Optional[date]
    unattainable: bool  # target exceeds the best availability seen on any day
