from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from presence.config import Config, cfg
from presence.generate.staff import build_snapshot
from presence.input_data import Snapshot
from presence.records import DraftEvent
from presence.reporting import Reporter
from presence.resolver import FixedClock, StatusResolver
from presence.result_types import SimulationResult
from presence.scope import ALL, UNRESTRICTED, ScopeFilter, Visibility
from presence.simulator import CoverageSimulator

logger = logging.getLogger(__name__)

SnapshotBuilder = Callable[[Config], Snapshot]


def default_snapshot_builder(config: Config) -> Snapshot:
    """Build a synthetic snapshot using the project's generator."""
    return build_snapshot(config)


def run_simulation(
    config: Config | None = None,
    snapshot: Snapshot | None = None,
    snapshot_builder: SnapshotBuilder | None = None,
    reporter: Reporter | None = None,
    validate_config: bool = True,
    enable_reporting: bool = True,
    start: Any = None,
    end: Any = None,
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
    drafts: Iterable[DraftEvent] = (),
    strict: bool = False,
    export_csv: bool = True,
) -> SimulationResult:
    """
    Build, simulate, and optionally report on a coverage scenario.

    Parameters
    ----------
    config:
        The configuration for the run. Defaults to `presence.config.cfg` when omitted.
    snapshot:
        Pre-built `Snapshot`. When omitted then `snapshot_builder` (or the default
        synthetic builder) is used to construct one from the given config.
    snapshot_builder:
        Optional callable that accepts a `Config` and returns a `Snapshot`. Ignored
        when `snapshot` is supplied.
    reporter:
        Custom reporter instance. When `enable_reporting` is True and no reporter is
        provided, the default `Reporter` is used.
    start, end:
        Inclusive simulation range. Default to `config.START_DATE` and
        `config.END_DATE`.
    scope, visibility:
        Operator selection and access restriction applied to the population.
    drafts:
        What-if absences that only exist for this simulation.
    strict:
        Raise on the first record referencing an unknown collaborator instead
        of skipping it.

    Returns
    -------
    SimulationResult
        Structured output of the simulation.
    """
    cfg_obj = config or cfg
    if validate_config:
        cfg_obj.validate()

    snap = snapshot
    if snap is None:
        builder = snapshot_builder or default_snapshot_builder
        snap = builder(cfg_obj)

    active_reporter = reporter if enable_reporting else None
    if active_reporter is None and enable_reporting:
        active_reporter = Reporter(cfg_obj)

    if active_reporter is not None:
        active_reporter.pre_simulate(snap, scope, visibility)

    result = CoverageSimulator(snap, cfg_obj).simulate(
        start, end, scope=scope, visibility=visibility, drafts=drafts, strict=strict
    )

    if active_reporter is not None:
        active_reporter.post_simulate(result, snap, scope)

    if export_csv:
        export_simulation_csv(result)

    return result


def export_simulation_csv(
    result: SimulationResult, out_dir: Path = Path("outputs")
) -> list[Path]:
    """Write cells, daily totals and the role x date availability pivot."""
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = [
        out_dir / "coverage_cells.csv",
        out_dir / "coverage_totals.csv",
        out_dir / "coverage_pivot.csv",
    ]
    result.to_frame().to_csv(paths[0], index=False)
    result.totals_frame().to_csv(paths[1], index=False)
    result.pivot("available").to_csv(paths[2])
    logger.info("Wrote simulation CSVs to %s", out_dir)
    return paths


def print_status_board(
    snapshot: Snapshot,
    at: Optional[datetime] = None,
    config: Config | None = None,
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
) -> StatusResolver:
    """Print who is working and who is missing at ``at`` (default: now)."""
    clock = FixedClock(at) if at is not None else None
    resolver = StatusResolver(snapshot, config or cfg, clock=clock)
    summary = resolver.summary(scope, visibility)
    print(
        f"\nStatus board: total={summary.total} | present={summary.present} | "
        f"absent={summary.absent}"
    )
    df = resolver.frame(scope, visibility)
    if not df.empty:
        print(df.to_string(index=False))
    return resolver


def main() -> SimulationResult:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO, format="%(levelname)s %(name)s: %(message)s"
    )
    snapshot = default_snapshot_builder(cfg)
    print_status_board(snapshot)
    return run_simulation(
        config=cfg,
        snapshot=snapshot,
        validate_config=True,
        reporter=Reporter(cfg),
        enable_reporting=True,
    )


if __name__ == "__main__":
    main()
