from __future__ import annotations

import sys
from typing import Any, Dict, List, Tuple

from presence.input_data import Snapshot
from presence.scope import (
    ALL,
    UNRESTRICTED,
    ScopeFilter,
    Visibility,
    filter_population,
)
from presence.targets import targets_by_role


def _role_headcounts(
    snapshot: Snapshot, scope: ScopeFilter, visibility: Visibility
) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for c in filter_population(snapshot.collaborators, scope, visibility):
        counts[c.role] = counts.get(c.role, 0) + 1
    return counts


def precheck_headcount(
    snapshot: Snapshot,
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
    *,
    verbose: bool = True,
    stream=None,
) -> Tuple[
    int,  # headcount
    int,  # target
    bool,  # ok
    Dict[str, Dict[str, Any]],  # role_stats
]:
    """
    Returns:
      headcount: active collaborators in scope
      target: Σ per-role targets for the scope
      ok: every role's target is within its headcount
      role_stats[role]: {
          'headcount': collaborators holding the role,
          'target': minimum people required on any given day,
          'slack': headcount - target,
          'unattainable': target > headcount (violation on every day)
      }
    Absences only lower availability further, so an unattainable role can
    never reach its target during a simulation.
    """
    stream = stream or sys.stdout
    counts = _role_headcounts(snapshot, scope, visibility)
    roles = sorted(scope.roles) if scope.roles else sorted(counts)
    targets = targets_by_role(snapshot.coverage_rules, roles, scope)

    role_stats: Dict[str, Dict[str, Any]] = {}
    for role in roles:
        have = counts.get(role, 0)
        need = targets[role]
        role_stats[role] = {
            "headcount": have,
            "target": need,
            "slack": have - need,
            "unattainable": need > have,
        }

    headcount = sum(counts.get(r, 0) for r in roles)
    target = sum(targets.values())
    ok = not any(s["unattainable"] for s in role_stats.values())

    if verbose:
        print_precheck_header(headcount, target, ok, stream=stream)
        print_role_status(role_stats, stream=stream)

    return headcount, target, ok, role_stats


def unattainable_roles(role_stats: Dict[str, Dict[str, Any]]) -> List[str]:
    return sorted(r for r, s in role_stats.items() if s["unattainable"])


def print_precheck_header(
    headcount: int, target: int, ok: bool, *, stream=sys.stdout
) -> None:
    """Print 'Pre-check' on its own line, then the headcount line with ✅/❌"""
    print("\nPre-check:\n", file=stream)
    if ok:
        print(f"✅ Headcount = {headcount:,} | daily target = {target:,} | OK", file=stream)
    else:
        print(
            f"❌ Headcount = {headcount:,} | daily target = {target:,} | NOT OK",
            file=stream,
        )
    print(
        "ℹ️  Pre-check only compares raw headcount with targets; schedules, "
        "rotations and absences can still cause shortfalls on individual days.",
        file=stream,
    )


def print_role_status(
    role_stats: Dict[str, Dict[str, Any]], *, stream=sys.stdout
) -> None:
    """One line per role using ✅/❌ only"""
    for role in sorted(role_stats):
        st = role_stats[role]
        suffix = f" | target {st['target']:,}, headcount {st['headcount']:,}"
        if st["headcount"] == 0 and st["target"] > 0:
            print(f"❌ {role} — no collaborator holds this role{suffix}", file=stream)
        elif st["unattainable"]:
            print(
                f"❌ {role} — short by {-st['slack']} even with full attendance"
                f"{suffix}",
                file=stream,
            )
        else:
            print(f"✅ {role} — attainable (slack={st['slack']}){suffix}", file=stream)
