from __future__ import annotations

from datetime import date

import matplotlib
import pytest

matplotlib.use("Agg", force=True)

from presence.config import add_holiday
from presence.input_data import Snapshot
from presence.records import CoverageRule
from presence.simulator import simulate

MON, TUE, WED = date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6)


@pytest.fixture
def snapshot(make_collaborator, make_event) -> Snapshot:
    """Two analysts (one off on Tuesday) and a lone operator against a target of 2."""
    return Snapshot(
        collaborators=[
            make_collaborator("1", name="Ana"),
            make_collaborator("2", name="Bruno"),
            make_collaborator("3", role="Operator", name="Carla"),
        ],
        events=[make_event("1", "day_off", TUE)],
        coverage_rules=[CoverageRule("Analyst", 2), CoverageRule("Operator", 2)],
    )


@pytest.fixture
def result(cfg, snapshot):
    add_holiday(cfg, WED, "Carnival")
    return simulate(snapshot, MON, WED, cfg=cfg)
