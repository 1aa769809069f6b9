from __future__ import annotations

from datetime import datetime

import pytest

from presence.input_data import Snapshot
from presence.resolver import StatusResolver
from presence.result_types import PresenceStatus, StatusKind
from presence.rules.base import RuleSpec, StatusRule
from presence.rules.event import EventRule
from presence.rules.on_call import OnCallRule
from presence.rules.registry import (
    build_rules,
    default_rule_specs,
    normalize_rule_specs,
)
from presence.rules.rotation import RotationRule
from presence.rules.schedule import ScheduleRule
from presence.rules.vacation import VacationRule


class AlwaysOnCall(StatusRule):
    order = 5
    name = "AlwaysOnCall"

    def evaluate(self, query):
        return PresenceStatus(
            StatusKind.ON_CALL, True, label=self.setting("label", "Pager")
        )


def test_default_priority_order(cfg):
    rules = build_rules(default_rule_specs(), cfg)
    assert [type(r) for r in rules] == [
        VacationRule,
        OnCallRule,
        EventRule,
        RotationRule,
        ScheduleRule,
    ]


def test_default_specs_are_fresh_copies():
    first = default_rule_specs()
    first[0].settings["label"] = "Changed"
    assert default_rule_specs()[0].settings["label"] == "Vacation"


def test_normalize_accepts_classes_and_specs():
    specs = normalize_rule_specs([ScheduleRule, RuleSpec(cls=VacationRule, order=1)])
    assert [s.cls for s in specs] == [ScheduleRule, VacationRule]
    assert specs[0].order is None
    with pytest.raises(TypeError):
        normalize_rule_specs(["schedule"])  # type: ignore[list-item]


def test_disabled_specs_are_skipped_and_class_order_used(cfg):
    rules = build_rules(
        [
            RuleSpec(cls=ScheduleRule),
            RuleSpec(cls=VacationRule, enabled=False),
            RuleSpec(cls=AlwaysOnCall),
        ],
        cfg,
    )
    assert [type(r) for r in rules] == [AlwaysOnCall, ScheduleRule]


def test_custom_rule_and_settings_reach_resolver(cfg, make_collaborator):
    snap = Snapshot(collaborators=[make_collaborator("1")])
    resolver = StatusResolver(
        snap,
        cfg,
        rules=[RuleSpec(cls=AlwaysOnCall, settings={"label": "Pager duty"})],
    )
    status = resolver.resolve("1", at=datetime(2024, 3, 9, 3, 0))
    assert status.tag == "on_call"
    assert status.label == "Pager duty"
