# presence/resolver.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence, Type

import pandas as pd

from presence.config import Config, cfg as default_cfg
from presence.errors import DanglingReferenceError
from presence.input_data import Snapshot
from presence.result_types import (
    IDLE,
    CollaboratorStatus,
    PresenceStatus,
    PresenceSummary,
)
from presence.rules.base import RuleSpec, StatusQuery, StatusRule
from presence.rules.registry import build_rules, normalize_rule_specs
from presence.scope import (
    ALL,
    UNRESTRICTED,
    ScopeFilter,
    Visibility,
    filter_population,
)
from presence.staff import Collaborator


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


@dataclass(frozen=True)
class FixedClock:
    instant: datetime

    def now(self) -> datetime:
        return self.instant


class StatusResolver:
    """
    Merges schedule, rotation, vacation, on-call and event data into one
    presence status per collaborator.

    The evaluation instant is either passed explicitly or read from the
    injected clock; the resolver never reads the wall clock on its own.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        cfg: Config | None = None,
        clock: Clock | None = None,
        rules: Sequence[RuleSpec | Type[StatusRule]] | None = None,
    ):
        self.snapshot = snapshot
        self.cfg = cfg or default_cfg
        self.clock: Clock = clock or SystemClock()
        self._rules = build_rules(normalize_rule_specs(rules), self.cfg)

    @property
    def rules(self) -> list[StatusRule]:
        return list(self._rules)

    def _instant(self, at: Optional[datetime]) -> datetime:
        return at if at is not None else self.clock.now()

    def query(self, collaborator: Collaborator, at: datetime) -> StatusQuery:
        cid = collaborator.id
        return StatusQuery(
            collaborator=collaborator,
            instant=at,
            events=tuple(self.snapshot.events_for(cid)),
            on_calls=tuple(self.snapshot.on_calls_for(cid)),
            vacations=tuple(self.snapshot.vacations_for(cid)),
        )

    def resolve(
        self, collaborator: Collaborator | str, at: Optional[datetime] = None
    ) -> PresenceStatus:
        """First matching rule wins; no match resolves to idle."""
        if not isinstance(collaborator, Collaborator):
            if str(collaborator) not in self.snapshot.by_id:
                raise DanglingReferenceError("status query", str(collaborator))
            collaborator = self.snapshot.collaborator(collaborator)
        q = self.query(collaborator, self._instant(at))
        for rule in self._rules:
            status = rule.evaluate(q)
            if status is not None:
                return status
        return IDLE

    def resolve_all(
        self,
        scope: ScopeFilter = ALL,
        visibility: Visibility = UNRESTRICTED,
        at: Optional[datetime] = None,
    ) -> list[CollaboratorStatus]:
        """Every active, visible collaborator in scope; present ones first."""
        instant = self._instant(at)
        out = [
            CollaboratorStatus(
                collaborator_id=c.id,
                name=c.name,
                role=c.role,
                branch=c.branch,
                shift_label=c.shift_label,
                status=self.resolve(c, instant),
            )
            for c in filter_population(self.snapshot.collaborators, scope, visibility)
        ]
        # stable: original order kept within each group
        return sorted(out, key=lambda s: not s.status.present)

    def working(
        self,
        scope: ScopeFilter = ALL,
        visibility: Visibility = UNRESTRICTED,
        at: Optional[datetime] = None,
    ) -> list[CollaboratorStatus]:
        return [s for s in self.resolve_all(scope, visibility, at) if s.status.present]

    def missing(
        self,
        scope: ScopeFilter = ALL,
        visibility: Visibility = UNRESTRICTED,
        at: Optional[datetime] = None,
    ) -> list[CollaboratorStatus]:
        return [
            s for s in self.resolve_all(scope, visibility, at) if not s.status.present
        ]

    def summary(
        self,
        scope: ScopeFilter = ALL,
        visibility: Visibility = UNRESTRICTED,
        at: Optional[datetime] = None,
    ) -> PresenceSummary:
        statuses = self.resolve_all(scope, visibility, at)
        present = sum(1 for s in statuses if s.status.present)
        return PresenceSummary(
            total=len(statuses), present=present, absent=len(statuses) - present
        )

    def frame(
        self,
        scope: ScopeFilter = ALL,
        visibility: Visibility = UNRESTRICTED,
        at: Optional[datetime] = None,
    ) -> pd.DataFrame:
        cols = [
            "collaborator_id",
            "name",
            "role",
            "branch",
            "shift",
            "status",
            "label",
            "present",
        ]
        return pd.DataFrame(
            [
                {
                    "collaborator_id": s.collaborator_id,
                    "name": s.name,
                    "role": s.role,
                    "branch": s.branch,
                    "shift": s.shift_label,
                    "status": s.status.tag,
                    "label": s.status.label,
                    "present": s.status.present,
                }
                for s in self.resolve_all(scope, visibility, at)
            ],
            columns=cols,
        )
