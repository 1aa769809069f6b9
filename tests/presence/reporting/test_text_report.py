from __future__ import annotations

from presence.errors import DanglingReferenceError
from presence.reporting.text_report import (
    ReportDocument,
    print_precheck_summary,
    render_text_report,
    set_active_report,
)


def test_render_text_report_prints_summary(capsys, cfg, result, snapshot):
    render_text_report(cfg, result, snapshot, num_print_examples=2)
    out = capsys.readouterr().out
    assert "Coverage simulation: 2024-03-04 → 2024-03-06" in out
    assert "holidays=1" in out
    assert "Worst day: 2024-03-05 (2 people missing across roles)" in out
    assert "Top per-role gaps:" in out
    assert "Roles that can never reach their target:" in out
    assert "Time bank" in out


def test_render_text_report_lists_skipped_and_inspected(capsys, cfg, result, snapshot):
    result.skipped.append(DanglingReferenceError("event", "ghost"))
    cfg.INSPECT_COLLABORATOR_IDS = ["1", "nobody"]
    render_text_report(cfg, result, snapshot)
    out = capsys.readouterr().out
    assert "Skipped 1 record(s)" in out
    assert "'ghost'" in out
    assert "Ana (Analyst, ): available 2/3 days | off: 03-05" in out
    assert "nobody: not in the directory" in out


def test_report_lines_are_collected(tmp_path, cfg, result, snapshot):
    doc = ReportDocument(tmp_path / "report.pdf")
    set_active_report(doc)
    try:
        render_text_report(cfg, result, snapshot)
    finally:
        set_active_report(None)
    assert doc.lines[0].startswith("Coverage simulation")
    doc.write()
    assert (tmp_path / "report.pdf").stat().st_size > 0


def test_precheck_summary_when_everything_fits(capsys, snapshot):
    from presence.scope import ScopeFilter

    print_precheck_summary(snapshot, ScopeFilter.of(roles=["Analyst"]))
    out = capsys.readouterr().out
    assert "every role attainable" in out
    assert "No role is short" in out
