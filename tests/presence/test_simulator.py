from __future__ import annotations

from datetime import date

import pytest

from presence.config import add_holiday
from presence.errors import DanglingReferenceError
from presence.input_data import Snapshot
from presence.records import CoverageRule, DraftEvent, VacationRequest
from presence.scope import ScopeFilter, Visibility
from presence.simulator import CoverageSimulator, simulate

MON = date(2024, 3, 4)
TUE = date(2024, 3, 5)
WED = date(2024, 3, 6)
SAT = date(2024, 3, 9)
SECTOR_A = ScopeFilter.of(sectors=["A"])


@pytest.fixture
def two_analysts(make_collaborator, analyst_rules) -> Snapshot:
    return Snapshot(
        collaborators=[make_collaborator("1"), make_collaborator("2")],
        coverage_rules=analyst_rules,
    )


def test_exact_target_is_alert_and_draft_causes_violation(cfg, two_analysts):
    result = simulate(
        two_analysts,
        MON,
        WED,
        scope=SECTOR_A,
        drafts=[DraftEvent("1", TUE, TUE)],
        cfg=cfg,
    )
    assert result.roles == ["Analyst"]
    assert [c.status for c in result.cells] == ["alert", "violation", "alert"]
    tue = result.cell(TUE, "Analyst")
    assert (tue.available, tue.min, tue.missing) == (1, 2, 1)


def test_surplus_is_ok(cfg, two_analysts, make_collaborator):
    snap = Snapshot(
        collaborators=list(two_analysts.collaborators) + [make_collaborator("3")],
        coverage_rules=two_analysts.coverage_rules,
    )
    result = simulate(snap, MON, MON, scope=SECTOR_A, cfg=cfg)
    assert result.cell(MON, "Analyst").status == "ok"
    total = result.total(MON)
    assert (total.available, total.min, total.status) == (3, 2, "ok")


def test_weekend_without_windows_is_violation(cfg, two_analysts):
    result = simulate(two_analysts, SAT, SAT, scope=SECTOR_A, cfg=cfg)
    assert result.cell(SAT, "Analyst").available == 0
    assert result.cell(SAT, "Analyst").status == "violation"


def test_adding_absences_never_increases_availability(cfg, two_analysts, make_event):
    base = simulate(two_analysts, MON, WED, scope=SECTOR_A, cfg=cfg)
    with_absences = Snapshot(
        collaborators=two_analysts.collaborators,
        coverage_rules=two_analysts.coverage_rules,
        events=[make_event("2", "day_off", MON, WED)],
        vacations=[VacationRequest("1", WED, WED, "approved")],
    )
    after = simulate(with_absences, MON, WED, scope=SECTOR_A, cfg=cfg)
    for before_cell, after_cell in zip(base.cells, after.cells):
        assert after_cell.available <= before_cell.available
    assert [c.available for c in after.cells] == [1, 1, 0]


def test_only_approved_absences_count(cfg, two_analysts, make_event):
    snap = Snapshot(
        collaborators=two_analysts.collaborators,
        coverage_rules=two_analysts.coverage_rules,
        events=[
            make_event("1", "day_off", MON, status="pending"),
            make_event("2", "worked_day", MON),
            make_event("2", "vacation", TUE),
        ],
        vacations=[VacationRequest("1", MON, MON, "negotiation")],
    )
    result = simulate(snap, MON, TUE, scope=SECTOR_A, cfg=cfg)
    assert result.cell(MON, "Analyst").available == 2
    # neutral categories are still absences
    assert result.cell(TUE, "Analyst").available == 1


def test_rotation_day_off_removes_sunday(cfg, make_collaborator):
    c = make_collaborator(
        "1",
        schedule=cfg.SCHEDULE_TEMPLATES["six_by_one"],
        has_rotation=True,
        rotation_reference_date=date(2024, 2, 10),  # Saturday before 02-11
    )
    snap = Snapshot(collaborators=[c], coverage_rules=[CoverageRule("Analyst", 1)])
    result = simulate(snap, "2024-03-09", "2024-03-11", cfg=cfg)
    assert [c.available for c in result.cells] == [1, 0, 1]


def test_holiday_cells_flagged_and_totals_zeroed(cfg, two_analysts):
    add_holiday(cfg, TUE, "Carnival")
    result = simulate(two_analysts, MON, WED, scope=SECTOR_A, cfg=cfg)
    assert result.cell(TUE, "Analyst").is_holiday
    assert not result.cell(MON, "Analyst").is_holiday
    total = result.total(TUE)
    assert (total.available, total.min, total.status) == (0, 0, "ok")
    assert total.holiday == "Carnival"
    assert result.total(MON).min == 2


def test_scope_and_visibility(cfg, make_collaborator, analyst_rules):
    snap = Snapshot(
        collaborators=[
            make_collaborator("1"),
            make_collaborator("2", sector="B"),
            make_collaborator("3", role="Operator", sector="B"),
            make_collaborator("4", sector=None),
        ],
        coverage_rules=analyst_rules + [CoverageRule("Operator", 1)],
    )
    everything = simulate(snap, MON, MON, cfg=cfg)
    assert everything.roles == ["Analyst", "Operator"]
    assert everything.cell(MON, "Analyst").available == 3
    assert everything.cell(MON, "Analyst").min == 5

    only_b = simulate(snap, MON, MON, visibility=Visibility(frozenset({"B"})), cfg=cfg)
    assert only_b.cell(MON, "Analyst").available == 1

    roles = simulate(snap, MON, MON, scope=ScopeFilter.of(roles=["Operator"]), cfg=cfg)
    assert roles.roles == ["Operator"]


def test_dangling_records_are_skipped_or_raised(cfg, two_analysts, make_event):
    snap = Snapshot(
        collaborators=two_analysts.collaborators,
        coverage_rules=two_analysts.coverage_rules,
        events=[make_event("ghost", "day_off", MON)],
    )
    result = simulate(
        snap, MON, MON, scope=SECTOR_A, drafts=[DraftEvent("nobody", MON, MON)], cfg=cfg
    )
    assert result.cell(MON, "Analyst").available == 2
    assert [e.record_kind for e in result.skipped] == ["event", "draft event"]
    with pytest.raises(DanglingReferenceError):
        simulate(snap, MON, MON, cfg=cfg, strict=True)


def test_default_horizon_comes_from_config(cfg, two_analysts):
    result = CoverageSimulator(two_analysts, cfg).simulate()
    assert result.dates[0] == cfg.START_DATE
    assert result.dates[-1] == cfg.END_DATE
    assert len(result.totals) == cfg.DAYS


def test_parallel_matches_serial(cfg, two_analysts, make_event):
    snap = Snapshot(
        collaborators=two_analysts.collaborators,
        coverage_rules=two_analysts.coverage_rules,
        events=[make_event("1", "day_off", TUE)],
    )
    serial = CoverageSimulator(snap, cfg, workers=1).simulate("2024-03-01", "2024-03-31")
    parallel = CoverageSimulator(snap, cfg, workers=4).simulate(
        "2024-03-01", "2024-03-31"
    )
    assert serial.cells == parallel.cells
    assert serial.totals == parallel.totals


def test_result_frames(cfg, two_analysts):
    result = simulate(two_analysts, MON, TUE, scope=SECTOR_A, cfg=cfg)
    df = result.to_frame()
    assert list(df.columns) == [
        "date",
        "role",
        "available",
        "min",
        "status",
        "missing",
        "is_holiday",
    ]
    pivot = result.pivot("status")
    assert pivot.loc["Analyst", MON] == "alert"
    assert list(result.totals_frame()["available"]) == [2, 2]


def test_empty_population(cfg):
    result = simulate(Snapshot(), MON, TUE, cfg=cfg)
    assert result.roles == []
    assert result.cells == []
    assert [(t.available, t.min) for t in result.totals] == [(0, 0), (0, 0)]
    assert result.pivot().empty
