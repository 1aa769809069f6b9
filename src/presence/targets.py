"""Minimum-headcount targets resolved from scoped coverage rules."""

from __future__ import annotations

from typing import Iterable, Optional

from presence.records import CoverageRule
from presence.scope import ALL, ScopeFilter


def matching_rules(
    rules: Iterable[CoverageRule], role: str, scope: ScopeFilter = ALL
) -> list[CoverageRule]:
    """
    Rules for ``role`` that survive the scope's sector and shift selection.

    A selected sector (or shift) dimension only keeps rules that name one of
    the selected values; rules without a sector are dropped in that case.
    """
    out = []
    for r in rules:
        if r.role_name != role:
            continue
        if scope.sectors and (r.sector is None or r.sector not in scope.sectors):
            continue
        if scope.shifts and (
            r.shift_label is None or r.shift_label not in scope.shifts
        ):
            continue
        out.append(r)
    return out


def target_for(
    rules: Iterable[CoverageRule], role: str, scope: ScopeFilter = ALL
) -> int:
    """Sum of ``min_people`` over matching rules; 0 when nothing matches."""
    return sum(r.min_people for r in matching_rules(rules, role, scope))


def prune_rules(rules: Iterable[CoverageRule]) -> list[CoverageRule]:
    """Drop zero targets, which mean the same as no rule at all."""
    return [r for r in rules if r.min_people > 0]


def upsert_rule(
    rules: Iterable[CoverageRule],
    role: str,
    min_people: int,
    sector: Optional[str] = None,
    shift_label: Optional[str] = None,
) -> list[CoverageRule]:
    """
    Set the target for one (role, sector, shift) scope, replacing any rule
    already defined for exactly that scope.
    """
    new = CoverageRule(role, min_people, sector, shift_label)
    kept = [r for r in rules if r.scope != new.scope]
    return prune_rules(kept + [new])


def targets_by_role(
    rules: Iterable[CoverageRule], roles: Iterable[str], scope: ScopeFilter = ALL
) -> dict[str, int]:
    rule_list = list(rules)
    return {role: target_for(rule_list, role, scope) for role in roles}
