from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict
from datetime import date
from typing import Optional

import pandas as pd

from presence.result_types import GridCell, SimulationResult

from .data_models import CoverageMetrics, RoleGap


def _working_cells(result: SimulationResult) -> list[GridCell]:
    return [c for c in result.cells if not c.is_holiday]


def compute_coverage_metrics(result: SimulationResult) -> CoverageMetrics:
    """Status counts over non-holiday cells plus the worst day."""
    cells = _working_cells(result)
    by_status = {"ok": 0, "alert": 0, "violation": 0}
    missing_by_day: dict[date, int] = defaultdict(int)
    for c in cells:
        by_status[c.status] += 1
        missing_by_day[c.date] += max(c.missing, 0)

    worst_day: Optional[date] = None
    worst_missing = 0
    for d in result.dates:
        if missing_by_day.get(d, 0) > worst_missing:
            worst_day, worst_missing = d, missing_by_day[d]

    return CoverageMetrics(
        dates=len(result.dates),
        holiday_dates=sum(1 for t in result.totals if t.is_holiday),
        cells=len(cells),
        ok_cells=by_status["ok"],
        alert_cells=by_status["alert"],
        violation_cells=by_status["violation"],
        violation_days=sum(
            1 for t in result.totals if not t.is_holiday and t.status == "violation"
        ),
        worst_day=worst_day,
        worst_day_missing=worst_missing,
    )


def compute_role_gaps(
    result: SimulationResult, top: int = 5
) -> tuple[list[RoleGap], pd.DataFrame]:
    """
    Per-role shortfalls over working days, most constrained first.
    Returns the `top` gaps and the full DataFrame.
    """
    per_role: dict[str, list[GridCell]] = defaultdict(list)
    for c in _working_cells(result):
        per_role[c.role].append(c)

    gaps: list[RoleGap] = []
    for role in result.roles:
        cells = per_role.get(role, [])
        target = max((c.min for c in cells), default=0)
        worst = max(cells, key=lambda c: c.missing, default=None)
        max_missing = max(worst.missing, 0) if worst is not None else 0
        gaps.append(
            RoleGap(
                role=role,
                target=target,
                violation_days=sum(1 for c in cells if c.status == "violation"),
                alert_days=sum(1 for c in cells if c.status == "alert"),
                max_missing=max_missing,
                worst_day=worst.date if worst is not None and max_missing else None,
                unattainable=bool(cells)
                and target > max(c.available for c in cells),
            )
        )

    cols = [
        "role",
        "target",
        "violation_days",
        "alert_days",
        "max_missing",
        "worst_day",
        "unattainable",
    ]
    df = pd.DataFrame([asdict(g) for g in gaps], columns=cols)
    if df.empty:
        return [], df
    df_sorted = df.sort_values(
        ["unattainable", "violation_days", "max_missing"],
        ascending=[False, False, False],
        kind="stable",
    ).reset_index(drop=True)
    order = {role: i for i, role in enumerate(df_sorted["role"])}
    top_rows = sorted(gaps, key=lambda g: order[g.role])[:top]
    return top_rows, df_sorted


def daily_status_counts(result: SimulationResult) -> pd.DataFrame:
    """date x {ok, alert, violation} cell counts, holidays included."""
    df = result.to_frame()
    cols = ["ok", "alert", "violation"]
    if df.empty:
        return pd.DataFrame(columns=cols)
    counts = df.groupby(["date", "status"]).size().unstack(fill_value=0)
    return counts.reindex(index=result.dates, columns=cols, fill_value=0)
