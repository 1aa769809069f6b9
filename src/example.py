"""
Module with example code for running the coverage simulator.

There are three ways to run the code:

1. Run the code with default options. This will generate a synthetic
    directory from the config and simulate coverage for it.
2. Run the code with a custom snapshot defined via code, including a
    what-if vacation draft.
3. Run the code with a snapshot exported as JSON by the persistence layer.

Usage via cli:
    python3 -m src.example --option 1
"""

from __future__ import annotations

import argparse
from datetime import date, datetime
from pathlib import Path

from presence import Config, Snapshot, run_simulation
from presence.config import add_holiday
from presence.generate.staff import snapshot_from_json
from presence.main import default_snapshot_builder, print_status_board
from presence.records import CoverageRule, DraftEvent, Event
from presence.reporting import Reporter
from presence.scope import ScopeFilter
from presence.staff import Collaborator

cfg = Config(
    START_DATE=date(2024, 11, 18),
    DAYS=14,
    NUM_PARALLEL_WORKERS=4,
    SEED=11,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run coverage examples.")
    parser.add_argument(
        "--option",
        type=int,
        default=3,
        choices=(1, 2, 3),
        help="Example scenario to run (default: 3).",
    )
    return parser.parse_args()


def run_option(option: int) -> None:
    print(f"Running example code with option {option}")

    # Run the code with default options. This will generate a
    # synthetic directory from the config and simulate coverage for it.
    if option == 1:

        # The parameters below are defaults, with the exception of config,
        # they can be ommitted i.e. the below is equivalent to:
        # run_simulation(cfg)
        run_simulation(
            config=cfg,
            validate_config=True,
            snapshot_builder=default_snapshot_builder,
            reporter=Reporter(cfg),
            enable_reporting=True,
        )

    # Run the code with a snapshot defined via code.
    elif option == 2:

        office = cfg.SCHEDULE_TEMPLATES["business_hours"]
        night = cfg.SCHEDULE_TEMPLATES["overnight_ending"]
        collaborators = [
            Collaborator(
                id="1", name="Ana", role="Analyst", sector="A", schedule=office
            ),
            Collaborator(
                id="2", name="Bruno", role="Analyst", sector="A", schedule=office
            ),
            Collaborator(
                id="3", name="Carla", role="Analyst", sector="B", schedule=office
            ),
            Collaborator(
                id="4",
                name="Diego",
                role="Operator",
                sector="B",
                shift_label="overnight_ending",
                schedule=night,
                has_rotation=True,
                rotation_reference_date=date(2024, 11, 17),
            ),
        ]
        events = [
            Event("2", cfg.event_type("day_off"), "2024-11-20", "2024-11-20"),
        ]
        rules = [
            CoverageRule("Analyst", 2, sector="A"),
            CoverageRule("Analyst", 1, sector="B"),
            CoverageRule("Operator", 1),
        ]
        add_holiday(cfg, "2024-11-22", "Company day")
        snapshot = Snapshot(
            collaborators=collaborators, events=events, coverage_rules=rules
        )
        print_status_board(snapshot, at=datetime(2024, 11, 19, 9, 30), config=cfg)
        run_simulation(
            cfg,
            snapshot=snapshot,
            scope=ScopeFilter.of(sectors=["A", "B"]),
            drafts=[DraftEvent("3", "2024-11-25", "2024-11-29")],
        )

    # Run the code with a snapshot exported as JSON. Typical production use.
    elif option == 3:

        snapshot = snapshot_from_json(Path("src/example_snapshot.json"), cfg)
        cfg.INSPECT_COLLABORATOR_IDS = ["c2"]
        run_simulation(cfg, snapshot=snapshot)
    else:
        raise SystemExit(f"Unknown option {option}")


def main() -> None:
    args = parse_args()
    run_option(args.option)


if __name__ == "__main__":
    main()
