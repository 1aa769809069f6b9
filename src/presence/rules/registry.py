from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence, Tuple, Type

from presence.rules.base import RuleSpec, StatusRule
from presence.rules.event import EventRule
from presence.rules.on_call import OnCallRule
from presence.rules.rotation import RotationRule
from presence.rules.schedule import ScheduleRule
from presence.rules.vacation import VacationRule

if TYPE_CHECKING:
    from presence.config import Config

logger = logging.getLogger(__name__)

RuleTemplate = Tuple[Type[StatusRule], int, dict[str, str]]

VACATION_RULE_TEMPLATE: RuleTemplate = (VacationRule, 10, {"label": "Vacation"})
ON_CALL_RULE_TEMPLATE: RuleTemplate = (OnCallRule, 20, {"label": "On call"})
EVENT_RULE_TEMPLATE: RuleTemplate = (EventRule, 30, {})
ROTATION_RULE_TEMPLATE: RuleTemplate = (
    RotationRule,
    40,
    {"label": "Rotation day off"},
)
SCHEDULE_RULE_TEMPLATE: RuleTemplate = (ScheduleRule, 50, {"label": "Working"})

_DEFAULT_RULE_TEMPLATES: list[RuleTemplate] = [
    VACATION_RULE_TEMPLATE,
    ON_CALL_RULE_TEMPLATE,
    EVENT_RULE_TEMPLATE,
    ROTATION_RULE_TEMPLATE,
    SCHEDULE_RULE_TEMPLATE,
]


def default_rule_specs() -> list[RuleSpec]:
    """Return fresh copies of the default rule specifications."""
    logger.debug("Using default status rules")
    return [
        RuleSpec(cls=cls, order=order, settings=dict(settings))
        for cls, order, settings in _DEFAULT_RULE_TEMPLATES
    ]


def normalize_rule_specs(
    rules: Sequence[RuleSpec | Type[StatusRule]] | None,
) -> list[RuleSpec]:
    """Turn user-provided rules into RuleSpec objects."""
    if rules is None:
        return default_rule_specs()

    normalized: list[RuleSpec] = []
    for item in rules:
        if isinstance(item, RuleSpec):
            normalized.append(item)
        elif isinstance(item, type) and issubclass(item, StatusRule):
            normalized.append(RuleSpec(cls=item))
        else:
            raise TypeError(
                "Rules must be RuleSpec instances or StatusRule subclasses; "
                f"got {type(item)!r}"
            )
    return normalized


def build_rules(specs: Sequence[RuleSpec], cfg: Config) -> list[StatusRule]:
    """Instantiate enabled rules in evaluation order."""
    built: list[tuple[int, int, StatusRule]] = []
    for pos, spec in enumerate(specs):
        if not spec.enabled:
            continue
        rule = spec.cls(cfg, **spec.settings)
        if not getattr(rule, "enabled", True):
            continue
        order = spec.order if spec.order is not None else rule.order
        built.append((order, pos, rule))
    built.sort(key=lambda t: (t[0], t[1]))
    return [rule for _, _, rule in built]
