from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Literal, Optional

import pandas as pd

from presence.dates import inclusive_days, parse_date
from presence.input_data import Snapshot
from presence.records import (
    BalanceAdjustment,
    Event,
    EventBehavior,
    EventCategory,
)
from presence.scope import UNRESTRICTED, Visibility


@dataclass(frozen=True)
class EventEffect:
    days_gained: int
    days_used: int

    @property
    def net(self) -> int:
        return self.days_gained - self.days_used


def effect_of(
    category: EventCategory | EventBehavior | str, start_date: Any, end_date: Any
) -> EventEffect:
    """Time-bank effect of an event spanning ``start_date..end_date`` inclusive."""
    if isinstance(category, EventCategory):
        behavior = category.behavior
    else:
        behavior = EventBehavior(category)
    days = inclusive_days(parse_date(start_date), parse_date(end_date))
    return EventEffect(days * behavior.gain_factor, days * behavior.use_factor)


def counted_events(events: Iterable[Event]) -> list[Event]:
    """Approved events plus legacy ones without a status."""
    return [e for e in events if e.counts_as_approved]


def net_balance(
    collaborator_id: str,
    events: Iterable[Event],
    adjustments: Iterable[BalanceAdjustment],
) -> int:
    cid = str(collaborator_id)
    gained = sum(
        e.days_gained - e.days_used
        for e in counted_events(events)
        if e.collaborator_id == cid
    )
    adjusted = sum(a.amount for a in adjustments if a.collaborator_id == cid)
    return gained + adjusted


def make_adjustment(
    collaborator_id: str,
    days: int,
    kind: Literal["credit", "debit"],
    reason: str,
    created_by: str,
    created_at: Optional[datetime] = None,
    id: str = "",
) -> BalanceAdjustment:
    """Validate operator input and produce an immutable adjustment."""
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise ValueError("Adjustment days must be an integer greater than zero.")
    if kind not in ("credit", "debit"):
        raise ValueError("kind must be 'credit' or 'debit'")
    if not reason or not reason.strip():
        raise ValueError("An adjustment needs a reason.")
    if not created_by:
        raise ValueError("An adjustment needs the acting user's identity.")
    return BalanceAdjustment(
        collaborator_id=str(collaborator_id),
        amount=days if kind == "credit" else -days,
        reason=reason.strip(),
        created_at=created_at or datetime.now(),
        created_by=created_by,
        id=id,
    )


@dataclass(frozen=True)
class BalanceRow:
    collaborator_id: str
    name: str
    total_gained: int
    total_used: int
    total_adjusted: int

    @property
    def balance(self) -> int:
        return self.total_gained - self.total_used + self.total_adjusted


class BalanceLedger:
    """Net time-bank balances over a snapshot. Recomputed from scratch each call."""

    def __init__(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot

    def net_balance(self, collaborator_id: str) -> int:
        cid = str(collaborator_id)
        return net_balance(
            cid,
            self.snapshot.events_for(cid),
            self.snapshot.adjustments_for(cid),
        )

    def row(self, collaborator_id: str) -> BalanceRow:
        cid = str(collaborator_id)
        events = counted_events(self.snapshot.events_for(cid))
        collab = self.snapshot.by_id.get(cid)
        return BalanceRow(
            collaborator_id=cid,
            name=collab.name if collab else "",
            total_gained=sum(e.days_gained for e in events),
            total_used=sum(e.days_used for e in events),
            total_adjusted=sum(a.amount for a in self.snapshot.adjustments_for(cid)),
        )

    def rows(self, visibility: Visibility = UNRESTRICTED) -> list[BalanceRow]:
        """One row per visible collaborator, highest balance first."""
        rows = [
            self.row(c.id)
            for c in self.snapshot.collaborators
            if visibility.allows(c)
        ]
        return sorted(rows, key=lambda r: (-r.balance, r.collaborator_id))

    def frame(self, visibility: Visibility = UNRESTRICTED) -> pd.DataFrame:
        cols = [
            "collaborator_id",
            "name",
            "total_gained",
            "total_used",
            "total_adjusted",
            "balance",
        ]
        rows = self.rows(visibility)
        if not rows:
            return pd.DataFrame(columns=cols)
        return pd.DataFrame(
            [
                {
                    "collaborator_id": r.collaborator_id,
                    "name": r.name,
                    "total_gained": r.total_gained,
                    "total_used": r.total_used,
                    "total_adjusted": r.total_adjusted,
                    "balance": r.balance,
                }
                for r in rows
            ],
            columns=cols,
        )

    def history(self, collaborator_id: str) -> pd.DataFrame:
        """Counted events and adjustments for one collaborator, oldest first."""
        cid = str(collaborator_id)
        entries: list[dict[str, Any]] = []
        for e in counted_events(self.snapshot.events_for(cid)):
            entries.append(
                {
                    "kind": "event",
                    "date": e.start_date,
                    "label": e.category.label,
                    "delta": e.days_gained - e.days_used,
                }
            )
        for a in self.snapshot.adjustments_for(cid):
            entries.append(
                {
                    "kind": "adjustment",
                    "date": a.created_at.date(),
                    "label": a.reason,
                    "delta": a.amount,
                }
            )
        df = pd.DataFrame(entries, columns=["kind", "date", "label", "delta"])
        if df.empty:
            return df
        df = df.sort_values(["date", "kind"], kind="stable").reset_index(drop=True)
        df["running_balance"] = df["delta"].cumsum()
        return df
