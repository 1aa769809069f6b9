from __future__ import annotations

from datetime import date

import pytest

from presence.config import Config
from presence.records import CoverageRule, Event
from presence.staff import Collaborator, WeeklySchedule

# 2024-03-04 is a Monday
MONDAY = date(2024, 3, 4)
OFFICE = WeeklySchedule.uniform("08:00", "17:00")


@pytest.fixture
def cfg() -> Config:
    """Config with no holidays so dates behave the same all year."""
    return Config(START_DATE=MONDAY, DAYS=7, HOLIDAYS={}, SEED=3)


@pytest.fixture
def make_collaborator():
    def _make(cid: str, role: str = "Analyst", **kwargs) -> Collaborator:
        kwargs.setdefault("name", f"Person {cid}")
        kwargs.setdefault("schedule", OFFICE)
        kwargs.setdefault("sector", "A")
        kwargs.setdefault("branch", "North")
        return Collaborator(id=cid, role=role, **kwargs)

    return _make


@pytest.fixture
def make_event(cfg: Config):
    def _make(cid: str, category: str, start, end=None, **kwargs) -> Event:
        return Event(cid, cfg.event_type(category), start, end or start, **kwargs)

    return _make


@pytest.fixture
def analyst_rules() -> list[CoverageRule]:
    return [
        CoverageRule("Analyst", 2, sector="A"),
        CoverageRule("Analyst", 3, sector="B"),
    ]
