"""
Coverage simulation: per-date, per-role availability against scoped
minimum-headcount targets, with optional what-if draft absences.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from presence.config import Config, cfg as default_cfg
from presence.dates import date_range
from presence.input_data import Snapshot, split_dangling
from presence.records import DraftEvent
from presence.result_types import DayTotal, GridCell, SimulationResult, classify
from presence.rotation import is_rotation_day_off
from presence.scope import (
    ALL,
    UNRESTRICTED,
    ScopeFilter,
    Visibility,
    filter_population,
)
from presence.staff import Collaborator
from presence.targets import targets_by_role

logger = logging.getLogger(__name__)


class CoverageSimulator:
    """
    Counts, for every date and role, the collaborators expected to be at work.

    A collaborator is available on a date when their weekday window is
    enabled, the date is not a rotation day off, and no approved absence
    event, approved vacation or draft event overlaps it. Availability is
    computed once per collaborator over the whole horizon and then reduced
    per role, so the date fan-out never repeats schedule evaluation.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        cfg: Config | None = None,
        workers: Optional[int] = None,
    ) -> None:
        self.snapshot = snapshot
        self.cfg = cfg or default_cfg
        self.workers = (
            workers if workers is not None else self.cfg.NUM_PARALLEL_WORKERS
        )

    # ---------- per-collaborator availability ----------

    def is_available(
        self,
        collaborator: Collaborator,
        day: date,
        drafts: Sequence[DraftEvent] = (),
    ) -> bool:
        if not collaborator.schedule.for_date(day).enabled:
            return False
        if (
            collaborator.has_rotation
            and day.weekday() == self.cfg.ROTATION_ANCHOR_WEEKDAY
            and is_rotation_day_off(
                day,
                collaborator.rotation_reference_date,
                cycle_weeks=self.cfg.ROTATION_CYCLE_WEEKS,
                anchor_weekday=self.cfg.ROTATION_ANCHOR_WEEKDAY,
            )
        ):
            return False
        cid = collaborator.id
        for ev in self.snapshot.events_for(cid):
            if ev.counts_as_approved and ev.behavior.is_absence and ev.covers(day):
                return False
        for vac in self.snapshot.vacations_for(cid):
            if vac.approved and vac.covers(day):
                return False
        return not any(d.covers(day) for d in drafts)

    def availability(
        self,
        population: Iterable[Collaborator],
        dates: Sequence[date],
        drafts: Iterable[DraftEvent] = (),
    ) -> dict[str, frozenset[date]]:
        """{collaborator_id -> dates on which they are available}"""
        drafts_by: dict[str, list[DraftEvent]] = defaultdict(list)
        for d in drafts:
            drafts_by[d.collaborator_id].append(d)
        return {
            c.id: frozenset(
                day for day in dates if self.is_available(c, day, drafts_by[c.id])
            )
            for c in population
        }

    # ---------- simulation ----------

    @staticmethod
    def roles_for(population: Iterable[Collaborator], scope: ScopeFilter) -> list[str]:
        """Explicitly selected roles, else every role present in the population."""
        if scope.roles:
            return sorted(scope.roles)
        return sorted({c.role for c in population})

    def _simulate_day(
        self,
        day: date,
        roles: Sequence[str],
        members: dict[str, list[str]],
        available: dict[str, frozenset[date]],
        targets: dict[str, int],
    ) -> tuple[list[GridCell], DayTotal]:
        holiday = self.cfg.holiday_name(day)
        cells = []
        for role in roles:
            count = sum(1 for cid in members.get(role, ()) if day in available[cid])
            minimum = targets[role]
            cells.append(
                GridCell(
                    date=day,
                    role=role,
                    available=count,
                    min=minimum,
                    status=classify(count, minimum),
                    is_holiday=holiday is not None,
                )
            )
        if holiday is not None:
            return cells, DayTotal(day, 0, 0, "ok", holiday=holiday)
        total_available = sum(c.available for c in cells)
        total_min = sum(c.min for c in cells)
        return cells, DayTotal(
            day, total_available, total_min, classify(total_available, total_min)
        )

    def simulate(
        self,
        start: Any = None,
        end: Any = None,
        scope: ScopeFilter = ALL,
        visibility: Visibility = UNRESTRICTED,
        drafts: Iterable[DraftEvent] = (),
        strict: bool = False,
    ) -> SimulationResult:
        """
        Build the coverage grid for ``start``..``end`` (inclusive).

        Missing bounds default to the configured horizon. Records that
        reference unknown collaborators are skipped and reported on the
        result, unless ``strict`` is set.
        """
        start = start if start is not None else self.cfg.START_DATE
        end = end if end is not None else self.cfg.END_DATE
        dates = date_range(start, end)

        snap = self.snapshot.checked(strict=strict)
        draft_list, bad_drafts = split_dangling(
            list(drafts), set(snap.by_id), "draft event"
        )
        if bad_drafts and strict:
            raise bad_drafts[0]

        population = filter_population(snap.collaborators, scope, visibility)
        roles = self.roles_for(population, scope)
        targets = targets_by_role(snap.coverage_rules, roles, scope)

        members: dict[str, list[str]] = defaultdict(list)
        for c in population:
            members[c.role].append(c.id)

        available = self.availability(population, dates, draft_list)

        def run(day: date) -> tuple[list[GridCell], DayTotal]:
            return self._simulate_day(day, roles, members, available, targets)

        if self.workers > 1 and len(dates) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                partials = list(pool.map(run, dates))
        else:
            partials = [run(day) for day in dates]

        # single reducer, date order
        cells: list[GridCell] = []
        totals: list[DayTotal] = []
        for day_cells, total in partials:
            cells.extend(day_cells)
            totals.append(total)

        logger.info(
            "Simulated %d date(s) x %d role(s) for %d collaborator(s)",
            len(dates),
            len(roles),
            len(population),
        )
        return SimulationResult(
            dates=dates,
            roles=roles,
            cells=cells,
            totals=totals,
            skipped=list(snap.skipped) + bad_drafts,
        )


def simulate(
    snapshot: Snapshot,
    start: Any = None,
    end: Any = None,
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
    drafts: Iterable[DraftEvent] = (),
    cfg: Config | None = None,
    strict: bool = False,
) -> SimulationResult:
    return CoverageSimulator(snapshot, cfg).simulate(
        start, end, scope=scope, visibility=visibility, drafts=drafts, strict=strict
    )
