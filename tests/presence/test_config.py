from __future__ import annotations

from datetime import date

import pytest

from presence.config import Config, add_event_type, add_holiday
from presence.records import EventBehavior


def test_defaults_validate():
    c = Config(START_DATE="2024-03-04", DAYS=10)
    c.validate()
    assert c.START_DATE == date(2024, 3, 4)
    assert c.END_DATE == date(2024, 3, 13)


@pytest.mark.parametrize(
    "overrides",
    [
        {"DAYS": 0},
        {"ROTATION_CYCLE_WEEKS": 0},
        {"ROTATION_ANCHOR_WEEKDAY": 7},
        {"FALLBACK_WEEKDAYS": (0, 9)},
        {"NUM_PARALLEL_WORKERS": 0},
        {"UPCOMING_LIMIT": -1},
        {"HOLIDAYS": {"christmas": "Christmas"}},
    ],
)
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        Config(**overrides).validate()


def test_duplicate_event_type_ids_rejected():
    c = Config()
    c.EVENT_TYPES = c.EVENT_TYPES + [c.EVENT_TYPES[0]]
    with pytest.raises(ValueError, match="unique"):
        c.validate()


def test_event_type_resolves_legacy_aliases(cfg):
    assert cfg.event_type("folga").id == "day_off"
    assert cfg.event_type("trabalhado").behavior is EventBehavior.CREDIT_2X
    unknown = cfg.event_type("training")
    assert unknown.behavior is EventBehavior.NEUTRAL
    assert unknown.label == "training"


def test_add_event_type_replaces_existing(cfg):
    add_event_type(cfg, "day_off", "Day off (paid)", "neutral")
    assert cfg.event_type("day_off").behavior is EventBehavior.NEUTRAL
    assert [t.id for t in cfg.EVENT_TYPES].count("day_off") == 1


def test_holidays():
    c = Config()
    assert c.holiday_name(date(2024, 12, 25)) == "Christmas Day"
    assert c.holiday_name(date(2024, 12, 24)) is None
    add_holiday(c, "2024-12-24", "Christmas Eve")
    add_holiday(c, "2024-06-10", "Founders Day", recurring=True)
    assert c.holiday_name(date(2024, 12, 24)) == "Christmas Eve"
    assert c.holiday_name(date(2025, 12, 24)) is None
    assert c.holiday_name(date(2031, 6, 10)) == "Founders Day"
    year = c.holidays_for_year(2024)
    assert year[date(2024, 1, 1)] == "New Year's Day"
    assert date(2024, 12, 24) in year


def test_holidays_skip_invalid_leap_day():
    c = Config(HOLIDAYS={"02-29": "Leap"})
    assert c.holidays_for_year(2023) == {}
    assert c.holidays_for_year(2024) == {date(2024, 2, 29): "Leap"}


def test_templates_are_usable(cfg):
    night = cfg.SCHEDULE_TEMPLATES["overnight_ending"]
    assert night.for_weekday(1).starts_previous_day
    assert not night.for_weekday(0).usable
    assert len(cfg.SCHEDULE_TEMPLATES["six_by_one"].enabled_weekdays()) == 7
