from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from presence.input_data import Snapshot
from presence.precheck import precheck_headcount
from presence.reporting.plots import show_coverage_heatmap, show_daily_totals
from presence.reporting.text_report import (
    ReportDocument,
    render_text_report,
    set_active_report,
)
from presence.result_types import SimulationResult
from presence.scope import ALL, UNRESTRICTED, ScopeFilter, Visibility

REPORT_PATH = Path("outputs/coverage_report.pdf")


class Reporter:
    """High-level orchestrator: runs the headcount precheck and renders reports."""

    def __init__(
        self,
        cfg: Any,
        num_print_examples: int = 6,
        enable_plots: bool = True,
        report_path: Path = REPORT_PATH,
    ) -> None:
        self.cfg = cfg
        self.num_print_examples = num_print_examples
        self.enable_plots = enable_plots
        self.report_path = Path(report_path)

    def pre_simulate(
        self,
        snapshot: Snapshot,
        scope: ScopeFilter = ALL,
        visibility: Visibility = UNRESTRICTED,
    ) -> None:
        """Headcount precheck; asks before continuing when a role is unattainable."""
        _, _, ok, _ = precheck_headcount(snapshot, scope, visibility)
        if not ok:
            proceed = self._prompt_yes_no_default_yes(
                "Pre-check shows roles that can never meet their target. Continue anyway?"
            )
            if not proceed:
                raise SystemExit("Stopped by user after failed pre-check.")

    def render_text_report(
        self, result: SimulationResult, snapshot: Snapshot, scope: ScopeFilter = ALL
    ) -> None:
        """Public entry point for callers that want text reporting only."""
        render_text_report(
            self.cfg,
            result,
            snapshot,
            scope=scope,
            num_print_examples=self.num_print_examples,
        )

    def post_simulate(
        self, result: SimulationResult, snapshot: Snapshot, scope: ScopeFilter = ALL
    ) -> None:
        """Render textual report (and optional plots) into the PDF report."""
        report_doc = ReportDocument(self.report_path)
        set_active_report(report_doc)
        try:
            self.render_text_report(result, snapshot, scope)
            if not self.enable_plots:
                return
            show_coverage_heatmap(result, enable_plot=self.enable_plots)
            show_daily_totals(result, enable_plot=self.enable_plots)
        finally:
            set_active_report(None)
            report_doc.write()

    # ---------- helpers ----------

    def _prompt_yes_no_default_yes(self, msg: str) -> bool:
        """Prompt '[Y/n]' and return True for yes (default)."""
        try:
            if not sys.stdin or not sys.stdin.isatty():
                print(f"{msg} [Y/n] (non-interactive -> default: Y)")
                return True

            while True:
                resp = input(f"{msg} [Y/n]: ").strip().lower()
                if resp in ("", "y", "yes"):
                    return True
                if resp in ("n", "no"):
                    return False
                print("Please type 'y' or 'n'.")
        except (EOFError, KeyboardInterrupt):
            print("\nAborted by user.")
            return False
