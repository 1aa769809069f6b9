# generate/staff.py
from __future__ import annotations

import json
import math
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from presence.config import Config
from presence.input_data import Snapshot
from presence.records import (
    CoverageRule,
    Event,
    EventStatus,
    VacationRequest,
    VacationStatus,
)
from presence.staff import Collaborator

FIRST_NAMES: Tuple[str, ...] = (
    "Ana", "Bruno", "Carla", "Diego", "Elisa", "Fabio", "Gabriela", "Heitor",
    "Isabela", "Joao", "Karina", "Lucas", "Marina", "Nuno", "Olivia", "Paulo",
    "Quezia", "Rafael", "Sofia", "Tiago", "Ursula", "Vitor", "Wanda", "Xavier",
    "Yara", "Zeca",
)  # fmt: skip


# ----------------------------
# Configuration container
# ----------------------------
@dataclass(slots=True)
class StaffGenConfig:
    """
    Configuration for generation of a synthetic collaborator directory.
    """

    n: int = 60

    branches: Tuple[str, ...] = ("North", "South")
    branch_probs: Tuple[float, ...] = (0.6, 0.4)

    sectors: Tuple[str, ...] = ("Operations", "Support", "Logistics")

    # Role distribution (must sum to 1.0)
    roles: Tuple[str, ...] = ("Analyst", "Operator", "Supervisor")
    role_probs: Tuple[float, ...] = (0.35, 0.55, 0.10)

    # Schedule template names (from Config.SCHEDULE_TEMPLATES) and their shares
    templates: Tuple[str, ...] = (
        "business_hours",
        "evening",
        "overnight_ending",
        "six_by_one",
    )
    template_probs: Tuple[float, ...] = (0.50, 0.20, 0.15, 0.15)

    # Share of collaborators on the rotation cycle (only six_by_one workers)
    rotation_pct: float = 0.8
    inactive_pct: float = 0.03

    # Absence parameters
    day_off_rate: float = 0.02  # per-person, per-day prob of a debit day off
    vacation_pct: float = 0.15  # per-person prob of a vacation block
    vacation_days: Tuple[int, ...] = (5, 10, 15)
    pending_pct: float = 0.25  # share of generated records left pending

    # Fraction of each (role, sector) headcount required every day
    target_ratio: float = 0.5

    # RNG seed
    seed: Optional[int] = 7

    def validate(self, cfg: Config | None = None) -> None:
        if self.n <= 0:
            raise ValueError("n must be > 0.")
        for name, values, probs in (
            ("branches", self.branches, self.branch_probs),
            ("roles", self.roles, self.role_probs),
            ("templates", self.templates, self.template_probs),
        ):
            if len(values) != len(probs):
                raise ValueError(f"{name} and their probabilities must be same length.")
            if not np.isclose(sum(probs), 1.0, atol=1e-9):
                raise ValueError(f"{name} probabilities must sum to 1.0")
        if not self.sectors:
            raise ValueError("sectors must not be empty.")
        for x in (
            self.rotation_pct,
            self.inactive_pct,
            self.day_off_rate,
            self.vacation_pct,
            self.pending_pct,
            self.target_ratio,
        ):
            if not (0.0 <= x <= 1.0):
                raise ValueError("rates and ratios must be in [0,1].")
        if any(d <= 0 for d in self.vacation_days):
            raise ValueError("vacation_days must be positive integers.")
        if cfg is not None:
            missing = set(self.templates) - set(cfg.SCHEDULE_TEMPLATES)
            if missing:
                raise ValueError(f"Unknown schedule templates: {sorted(missing)}")
        if self.seed is not None and not isinstance(self.seed, int):
            raise ValueError("seed must be an int or None.")


# ----------------------------
# Generation helpers
# ----------------------------
def _rng(seed: Optional[int]) -> np.random.Generator:
    return np.random.default_rng(seed) if seed is not None else np.random.default_rng()


def _deterministic_counts(n: int, probs: np.ndarray) -> np.ndarray:
    """
    Turn probabilities into integer counts that sum to n with minimal rounding error.
    """
    expected = probs * n
    floors = np.floor(expected).astype(int)
    shortfall = n - floors.sum()
    if shortfall > 0:
        remainders = expected - floors
        bump_idx = np.argsort(remainders)[::-1][:shortfall]
        floors[bump_idx] += 1
    return floors


def _spread(values: Tuple[str, ...], probs: Tuple[float, ...], n: int, g) -> list[str]:
    counts = _deterministic_counts(n, np.array(probs, dtype=float))
    out = np.concatenate(
        [np.full(count, i, dtype=int) for i, count in enumerate(counts)]
    )
    g.shuffle(out)
    return [values[int(i)] for i in out]


def _name(i: int) -> str:
    base = FIRST_NAMES[i % len(FIRST_NAMES)]
    lap = i // len(FIRST_NAMES)
    return base if lap == 0 else f"{base} {lap + 1}"


def _last_anchor_on_or_before(day: date, anchor_weekday: int) -> date:
    return day - timedelta(days=(day.weekday() - anchor_weekday) % 7)


# ----------------------------
# Core API
# ----------------------------
def create_collaborators(gen: StaffGenConfig, cfg: Config) -> list[Collaborator]:
    gen.validate(cfg)
    g = _rng(gen.seed)

    roles = _spread(gen.roles, gen.role_probs, gen.n, g)
    branches = _spread(gen.branches, gen.branch_probs, gen.n, g)
    templates = _spread(gen.templates, gen.template_probs, gen.n, g)
    sector_idx = g.integers(0, len(gen.sectors), size=gen.n)
    rotation_flags = g.random(gen.n) < gen.rotation_pct
    inactive_flags = g.random(gen.n) < gen.inactive_pct
    # staggered rotation groups: reference offsets of 0..cycle-1 weeks
    week_offsets = g.integers(0, cfg.ROTATION_CYCLE_WEEKS, size=gen.n)

    anchor = _last_anchor_on_or_before(cfg.START_DATE, cfg.ROTATION_ANCHOR_WEEKDAY)
    out: list[Collaborator] = []
    for i in range(gen.n):
        template = templates[i]
        on_rotation = template == "six_by_one" and bool(rotation_flags[i])
        offset = int(week_offsets[i])
        out.append(
            Collaborator(
                id=f"c{i:03d}",
                badge_id=f"{1000 + i}",
                name=_name(i),
                branch=branches[i],
                sector=gen.sectors[int(sector_idx[i])],
                role=roles[i],
                shift_label=template,
                active=not bool(inactive_flags[i]),
                schedule=cfg.SCHEDULE_TEMPLATES[template],
                has_rotation=on_rotation,
                rotation_group=f"G{offset + 1}" if on_rotation else "",
                rotation_reference_date=(
                    anchor - timedelta(weeks=offset) if on_rotation else None
                ),
            )
        )
    return out


def assign_absences(
    collaborators: list[Collaborator],
    cfg: Config,
    gen: StaffGenConfig,
    seed: Optional[int] = 7,
) -> tuple[list[Event], list[VacationRequest]]:
    """
    Randomly scatter debit days off and vacation blocks over the horizon.
    """
    if cfg.DAYS <= 0:
        raise ValueError("DAYS must be > 0")
    g = _rng(seed)
    day_off = cfg.event_type("day_off")
    events: list[Event] = []
    vacations: list[VacationRequest] = []
    for c in collaborators:
        for k in np.where(g.random(cfg.DAYS) < gen.day_off_rate)[0]:
            d = cfg.START_DATE + timedelta(days=int(k))
            pending = bool(g.random() < gen.pending_pct)
            events.append(
                Event(
                    collaborator_id=c.id,
                    category=day_off,
                    start_date=d,
                    end_date=d,
                    status=EventStatus.PENDING if pending else EventStatus.APPROVED,
                    id=f"ev-{c.id}-{int(k)}",
                )
            )
        if g.random() < gen.vacation_pct:
            length = int(g.choice(gen.vacation_days))
            first = cfg.START_DATE + timedelta(days=int(g.integers(0, cfg.DAYS)))
            pending = bool(g.random() < gen.pending_pct)
            vacations.append(
                VacationRequest(
                    collaborator_id=c.id,
                    start_date=first,
                    end_date=first + timedelta(days=length - 1),
                    status=(
                        VacationStatus.PENDING if pending else VacationStatus.APPROVED
                    ),
                    id=f"vac-{c.id}",
                )
            )
    return events, vacations


def create_coverage_rules(
    collaborators: list[Collaborator], target_ratio: float = 0.5
) -> list[CoverageRule]:
    """One rule per (role, sector), requiring a share of its active headcount."""
    counts = Counter(
        (c.role, c.sector) for c in collaborators if c.is_active and c.sector
    )
    rules = [
        CoverageRule(role, math.floor(n * target_ratio), sector)
        for (role, sector), n in sorted(counts.items())
    ]
    return [r for r in rules if r.min_people > 0]


def build_snapshot(cfg: Config, gen: StaffGenConfig | None = None) -> Snapshot:
    """Synthetic directory, absences and coverage rules for a demo run."""
    gen = gen or StaffGenConfig(seed=cfg.SEED if cfg.SEED is not None else 7)
    collaborators = create_collaborators(gen, cfg)
    events, vacations = assign_absences(collaborators, cfg, gen, seed=gen.seed)
    return Snapshot(
        collaborators=collaborators,
        events=events,
        vacations=vacations,
        coverage_rules=create_coverage_rules(collaborators, gen.target_ratio),
    )


# ----------------------------
# Convenience utilities
# ----------------------------
def staff_summary(collaborators: list[Collaborator]) -> dict:
    n = len(collaborators)
    return {
        "N": n,
        "roles": Counter(c.role for c in collaborators),
        "branches": Counter(c.branch for c in collaborators),
        "shifts": Counter(c.shift_label for c in collaborators),
        "rotation_pct": sum(c.has_rotation for c in collaborators) / n if n else 0.0,
        "active_pct": sum(c.is_active for c in collaborators) / n if n else 0.0,
    }


def collaborators_to_dataframe(collaborators: list[Collaborator]) -> pd.DataFrame:
    rows = []
    for c in collaborators:
        rows.append(
            {
                "id": c.id,
                "name": c.name,
                "branch": c.branch,
                "sector": c.sector,
                "role": c.role,
                "shift": c.shift_label,
                "active": c.is_active,
                "weekdays": [d.name[:3].lower() for d in c.schedule.enabled_weekdays()],
                "has_rotation": c.has_rotation,
                "rotation_reference_date": (
                    c.rotation_reference_date.isoformat()
                    if c.rotation_reference_date
                    else None
                ),
            }
        )
    return pd.DataFrame(rows)


def snapshot_from_json(
    path: str | Path, cfg: Config, strict: bool = False
) -> Snapshot:
    """
    Load a snapshot from a JSON export of the persistence layer.

    The file holds an object whose keys are the collection names understood
    by ``Snapshot.from_records`` (``collaborators``, ``events``, ``onCalls``,
    ``vacationRequests``, ``adjustments``, ``coverageRules``).
    """
    file_path = Path(path).expanduser()
    if file_path.suffix.lower() != ".json":
        raise ValueError("snapshot_from_json expects a path to a .json file.")
    if not file_path.exists():
        raise FileNotFoundError(f"Snapshot JSON file not found: {file_path}")

    try:
        data: Any = json.loads(file_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {file_path}") from exc

    if not isinstance(data, Mapping):
        raise TypeError("JSON file must contain an object of record collections.")
    for key, value in data.items():
        if not isinstance(value, list):
            raise TypeError(f"Collection {key!r} must be a list of objects.")
    return Snapshot.from_records(data, cfg, strict=strict)
