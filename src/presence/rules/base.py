# src/presence/rules/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Optional, Type

if TYPE_CHECKING:
    from presence.config import Config

from presence.records import Event, OnCallRecord, VacationRequest
from presence.result_types import PresenceStatus
from presence.staff import Collaborator


@dataclass(frozen=True)
class StatusQuery:
    """Everything a status rule may look at for one collaborator and instant."""

    collaborator: Collaborator
    instant: datetime
    events: tuple[Event, ...] = ()
    on_calls: tuple[OnCallRecord, ...] = ()
    vacations: tuple[VacationRequest, ...] = ()

    @property
    def day(self) -> date:
        return self.instant.date()


@dataclass
class RuleSpec:
    cls: Type["StatusRule"]
    order: int | None = None
    enabled: bool = True
    settings: dict[str, Any] = field(default_factory=dict)


class StatusRule(ABC):
    """
    One step of the status priority chain.

    Rules run in ascending ``order``; the first one returning a status wins.
    """

    order: int = 100
    enabled: bool = True
    name: str = "StatusRule"

    def __init__(self, cfg: Config, **settings: Any) -> None:
        self.cfg = cfg
        self._settings: dict[str, Any] = settings

    @abstractmethod
    def evaluate(self, query: StatusQuery) -> Optional[PresenceStatus]: ...

    # Helper for subclasses to read optional settings
    def setting(self, key: str, default: Any) -> Any:
        return self._settings.get(key, default)
