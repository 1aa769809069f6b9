from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from presence.config import Config
from presence.errors import DanglingReferenceError
from presence.records import (
    BalanceAdjustment,
    CoverageRule,
    DraftEvent,
    Event,
    OnCallRecord,
    VacationRequest,
)
from presence.staff import Collaborator, WeeklySchedule

logger = logging.getLogger(__name__)

R = TypeVar("R", Event, OnCallRecord, VacationRequest, BalanceAdjustment, DraftEvent)


@dataclass(frozen=True)
class Snapshot:
    """
    A consistent, fully materialised view of every collection the engine reads.

    The engine never mutates a snapshot; callers build a new one per
    invocation.
    """

    collaborators: tuple[Collaborator, ...] = ()
    events: tuple[Event, ...] = ()
    on_calls: tuple[OnCallRecord, ...] = ()
    vacations: tuple[VacationRequest, ...] = ()
    adjustments: tuple[BalanceAdjustment, ...] = ()
    coverage_rules: tuple[CoverageRule, ...] = ()
    skipped: tuple[DanglingReferenceError, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        for name in (
            "collaborators",
            "events",
            "on_calls",
            "vacations",
            "adjustments",
            "coverage_rules",
            "skipped",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name) or ()))

    # ---------- lookups ----------

    @cached_property
    def by_id(self) -> dict[str, Collaborator]:
        return {c.id: c for c in self.collaborators}

    def collaborator(self, collaborator_id: str) -> Collaborator:
        return self.by_id[str(collaborator_id)]

    @cached_property
    def _events_by(self) -> dict[str, list[Event]]:
        return _group(self.events)

    @cached_property
    def _on_calls_by(self) -> dict[str, list[OnCallRecord]]:
        return _group(self.on_calls)

    @cached_property
    def _vacations_by(self) -> dict[str, list[VacationRequest]]:
        return _group(self.vacations)

    @cached_property
    def _adjustments_by(self) -> dict[str, list[BalanceAdjustment]]:
        return _group(self.adjustments)

    def events_for(self, collaborator_id: str) -> list[Event]:
        return self._events_by.get(str(collaborator_id), [])

    def on_calls_for(self, collaborator_id: str) -> list[OnCallRecord]:
        return self._on_calls_by.get(str(collaborator_id), [])

    def vacations_for(self, collaborator_id: str) -> list[VacationRequest]:
        return self._vacations_by.get(str(collaborator_id), [])

    def adjustments_for(self, collaborator_id: str) -> list[BalanceAdjustment]:
        return self._adjustments_by.get(str(collaborator_id), [])

    def active_collaborators(self) -> list[Collaborator]:
        return [c for c in self.collaborators if c.is_active]

    # ---------- reference checks ----------

    def checked(self, strict: bool = False) -> "Snapshot":
        """
        Return a copy without records that point at unknown collaborators.

        Skipped records are logged and kept on ``skipped``. With ``strict``
        the first dangling reference is raised instead.
        """
        known = set(self.by_id)
        errors: list[DanglingReferenceError] = list(self.skipped)
        kept: dict[str, list[Any]] = {}
        for name, kind in (
            ("events", "event"),
            ("on_calls", "on-call record"),
            ("vacations", "vacation request"),
            ("adjustments", "balance adjustment"),
        ):
            good, bad = split_dangling(getattr(self, name), known, kind)
            if bad and strict:
                raise bad[0]
            kept[name] = good
            errors.extend(bad)
        if len(errors) == len(self.skipped):
            return self
        return replace(self, skipped=tuple(errors), **kept)

    @classmethod
    def from_records(
        cls,
        records: Mapping[str, Sequence[Mapping[str, Any]]],
        cfg: Config,
        strict: bool = False,
    ) -> "Snapshot":
        """
        Build a snapshot from persistence-layer dicts (camelCase keys).

        Recognised collections: ``collaborators``, ``events``, ``onCalls``,
        ``vacationRequests``, ``adjustments`` and ``coverageRules``.
        """
        snap = cls(
            collaborators=[
                collaborator_from_record(r) for r in records.get("collaborators", [])
            ],
            events=[event_from_record(r, cfg) for r in records.get("events", [])],
            on_calls=[on_call_from_record(r) for r in records.get("onCalls", [])],
            vacations=[
                vacation_from_record(r) for r in records.get("vacationRequests", [])
            ],
            adjustments=[
                adjustment_from_record(r) for r in records.get("adjustments", [])
            ],
            coverage_rules=[
                coverage_rule_from_record(r) for r in records.get("coverageRules", [])
            ],
        )
        return snap.checked(strict=strict)


def _group(records: Iterable[Any]) -> dict[str, list[Any]]:
    out: dict[str, list[Any]] = defaultdict(list)
    for rec in records:
        out[rec.collaborator_id].append(rec)
    return dict(out)


def split_dangling(
    records: Iterable[R], known_ids: set[str], kind: str
) -> tuple[list[R], list[DanglingReferenceError]]:
    good: list[R] = []
    bad: list[DanglingReferenceError] = []
    for rec in records:
        if rec.collaborator_id in known_ids:
            good.append(rec)
            continue
        err = DanglingReferenceError(kind, rec.collaborator_id, rec)
        logger.warning("Skipping record: %s", err)
        bad.append(err)
    return good, bad


# ---------- record parsing ----------


def _get(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in raw and raw[k] is not None:
            return raw[k]
    return default


def _schedule(raw: Any) -> WeeklySchedule | None:
    if raw is None:
        return None
    if isinstance(raw, WeeklySchedule):
        return raw
    return WeeklySchedule.from_mapping(raw)


def collaborator_from_record(raw: Mapping[str, Any]) -> Collaborator:
    return Collaborator(
        id=str(raw["id"]),
        badge_id=str(_get(raw, "badgeId", "colabId", default="")),
        name=str(_get(raw, "name", default="")),
        branch=str(_get(raw, "branch", default="")),
        sector=_get(raw, "sector"),
        role=str(_get(raw, "role", default="")),
        shift_label=str(_get(raw, "shiftLabel", "shiftType", default="")),
        active=raw.get("active"),
        schedule=_schedule(raw.get("schedule")) or WeeklySchedule(),
        has_rotation=bool(_get(raw, "hasRotation", default=False)),
        rotation_group=str(_get(raw, "rotationGroup", default="")),
        rotation_reference_date=_get(
            raw, "rotationReferenceDate", "rotationStartDate"
        ),
    )


def event_from_record(raw: Mapping[str, Any], cfg: Config) -> Event:
    return Event(
        collaborator_id=str(raw["collaboratorId"]),
        category=cfg.event_type(str(_get(raw, "category", "type", default=""))),
        start_date=raw["startDate"],
        end_date=raw["endDate"],
        status=raw.get("status"),
        temporary_schedule=_schedule(raw.get("temporarySchedule")),
        collaborator_accepted_counter_offer=bool(
            _get(raw, "collaboratorAcceptedCounterOffer", default=False)
        ),
        id=str(_get(raw, "id", default="")),
        observation=str(_get(raw, "observation", default="")),
    )


def on_call_from_record(raw: Mapping[str, Any]) -> OnCallRecord:
    return OnCallRecord(
        collaborator_id=str(raw["collaboratorId"]),
        start_date=raw["startDate"],
        end_date=raw["endDate"],
        start_time=raw["startTime"],
        end_time=raw["endTime"],
        id=str(_get(raw, "id", default="")),
        observation=str(_get(raw, "observation", default="")),
    )


def vacation_from_record(raw: Mapping[str, Any]) -> VacationRequest:
    return VacationRequest(
        collaborator_id=str(raw["collaboratorId"]),
        start_date=raw["startDate"],
        end_date=raw["endDate"],
        status=_get(raw, "status", default="pending"),
        id=str(_get(raw, "id", default="")),
        notes=str(_get(raw, "notes", default="")),
    )


def adjustment_from_record(raw: Mapping[str, Any]) -> BalanceAdjustment:
    return BalanceAdjustment(
        collaborator_id=str(raw["collaboratorId"]),
        amount=int(raw["amount"]),
        reason=str(_get(raw, "reason", default="")),
        created_at=raw["createdAt"],
        created_by=str(_get(raw, "createdBy", default="")),
        id=str(_get(raw, "id", default="")),
    )


def coverage_rule_from_record(raw: Mapping[str, Any]) -> CoverageRule:
    return CoverageRule(
        role_name=str(raw["roleName"]),
        min_people=int(_get(raw, "minPeople", default=0)),
        sector=_get(raw, "sector"),
        shift_label=_get(raw, "shiftLabel"),
    )
