from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from presence.input_data import Snapshot
from presence.ledger import BalanceLedger
from presence.precheck import precheck_headcount
from presence.result_types import SimulationResult
from presence.scope import ALL, ScopeFilter
from presence.simulator import CoverageSimulator

from .metrics import compute_coverage_metrics, compute_role_gaps


class ReportDocument:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.lines: list[str] = []
        self.figures: list[plt.Figure] = []

    def add_text(self, text: str) -> None:
        self.lines.append(text)

    def add_figure(self, fig: plt.Figure) -> None:
        self.figures.append(fig)

    def write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with PdfPages(self.path) as pdf:
            if self.lines:
                fig, ax = plt.subplots(figsize=(8.27, 11.69))
                ax.axis("off")
                ax.text(
                    0.01,
                    0.99,
                    "\n".join(self.lines),
                    ha="left",
                    va="top",
                    fontsize=8,
                    family="monospace",
                )
                pdf.savefig(fig, bbox_inches="tight")
                plt.close(fig)
            elif not self.figures:
                fig, ax = plt.subplots(figsize=(8.27, 11.69))
                ax.axis("off")
                ax.text(
                    0.5,
                    0.5,
                    "Report contains no data.",
                    ha="center",
                    va="center",
                    fontsize=12,
                )
                pdf.savefig(fig, bbox_inches="tight")
                plt.close(fig)
            for fig in self.figures:
                pdf.savefig(fig, bbox_inches="tight")
                plt.close(fig)


_ACTIVE_REPORT: Optional[ReportDocument] = None


def set_active_report(doc: Optional[ReportDocument]) -> None:
    global _ACTIVE_REPORT
    _ACTIVE_REPORT = doc


def get_active_report() -> Optional[ReportDocument]:
    return _ACTIVE_REPORT


def _log_print(*args, **kwargs) -> None:
    from io import StringIO

    buf = StringIO()
    kwargs_copy = kwargs.copy()
    kwargs_copy["file"] = buf
    print(*args, **kwargs_copy)
    print(*args, **kwargs)
    if _ACTIVE_REPORT is not None:
        _ACTIVE_REPORT.add_text(buf.getvalue().rstrip("\n"))


def _fmt_pct(part: int, whole: int) -> str:
    return f"{100 * part / whole:.1f}%" if whole else "n/a"


def render_text_report(
    cfg: Any,
    result: SimulationResult,
    snapshot: Snapshot,
    *,
    scope: ScopeFilter = ALL,
    num_print_examples: int = 6,
) -> None:
    d0, d1 = result.dates[0], result.dates[-1]
    _log_print(f"Coverage simulation: {d0.isoformat()} → {d1.isoformat()}")
    _log_print(f"Roles simulated: {', '.join(result.roles) or '(none)'}")

    if result.skipped:
        _log_print(
            f"\n⚠️ Skipped {len(result.skipped)} record(s) "
            "with unknown collaborators:"
        )
        for err in result.skipped[:num_print_examples]:
            _log_print(f"  - {err}")
        if len(result.skipped) > num_print_examples:
            _log_print(f"  - … {len(result.skipped) - num_print_examples} more")

    if not result.roles:
        _log_print("\nNo collaborators in scope; nothing to report.")
        return

    m = compute_coverage_metrics(result)
    _log_print(
        f"\nSummary: dates={m.dates} (holidays={m.holiday_dates}) | "
        f"cells={m.cells:,} | ok={m.ok_cells:,} ({_fmt_pct(m.ok_cells, m.cells)}) | "
        f"alert={m.alert_cells:,} ({_fmt_pct(m.alert_cells, m.cells)}) | "
        f"violation={m.violation_cells:,} ({_fmt_pct(m.violation_cells, m.cells)})"
    )
    _log_print(
        "\nDefinitions:"
        "\n- cell: one role on one working date."
        "\n- alert: available headcount exactly meets the target."
        "\n- violation: available headcount is below the target."
        "\n- holidays are shown but left out of the grand totals.\n"
    )

    if m.worst_day is not None:
        _log_print(
            f"Worst day: {m.worst_day.isoformat()} "
            f"({m.worst_day_missing} people missing across roles)"
        )
    _log_print(f"Days with a grand-total violation: {m.violation_days}")

    _, df_gaps = compute_role_gaps(result, top=5)
    problems = df_gaps[(df_gaps["violation_days"] > 0) | (df_gaps["unattainable"])]
    if problems.empty:
        _log_print("\nPer-role gaps: every role meets its target on every working day.")
    else:
        _log_print("\nTop per-role gaps:")
        _log_print(problems.head(5).to_string(index=False))
        _log_print("")
        print_precheck_summary(snapshot, scope)

    totals = result.totals_frame()
    _log_print(f"\nDaily totals (first {num_print_examples}):")
    _log_print(totals.head(num_print_examples).to_string(index=False))

    _print_balance_summary(snapshot, num_print_examples=num_print_examples)
    _print_inspected(cfg, result, snapshot)


def _print_balance_summary(snapshot: Snapshot, *, num_print_examples: int = 6) -> None:
    df = BalanceLedger(snapshot).frame()
    if df.empty:
        _log_print("\nTime bank: (no collaborators)")
        return
    _log_print(f"\nTime bank, highest balances (top {num_print_examples}):")
    _log_print(df.head(num_print_examples).to_string(index=False))
    negative = int((df["balance"] < 0).sum())
    if negative:
        _log_print(f"Collaborators with a negative balance: {negative}")


def _print_inspected(cfg: Any, result: SimulationResult, snapshot: Snapshot) -> None:
    """Per-collaborator availability for ids listed in INSPECT_COLLABORATOR_IDS."""
    ids = [str(i) for i in getattr(cfg, "INSPECT_COLLABORATOR_IDS", []) or []]
    if not ids:
        return
    sim = CoverageSimulator(snapshot, cfg, workers=1)
    _log_print("\nInspected collaborators:")
    for cid in ids:
        c = snapshot.by_id.get(cid)
        if c is None:
            _log_print(f"  - {cid}: not in the directory")
            continue
        available = sim.availability([c], result.dates)[cid]
        off = [d for d in result.dates if d not in available]
        sample = ", ".join(d.strftime("%m-%d") for d in off[:10])
        more = f", +{len(off) - 10} more" if len(off) > 10 else ""
        _log_print(
            f"  - {c.name} ({c.role}, {c.shift_label}): available "
            f"{len(available)}/{len(result.dates)} days"
            f"{(' | off: ' + sample + more) if off else ''}"
        )


def print_precheck_summary(
    snapshot: Snapshot, scope: ScopeFilter = ALL
) -> None:
    headcount, target, ok, stats = precheck_headcount(snapshot, scope, verbose=False)
    _log_print(
        f"Headcount = {headcount:,} | daily target = {target:,} | "
        f"{'every role attainable' if ok else 'some roles unattainable'}"
    )
    short = [(r, s) for r, s in stats.items() if s["unattainable"]]
    if not short:
        _log_print("No role is short of its target on headcount alone.")
        return
    short.sort(key=lambda item: (item[1]["slack"], item[0]))
    _log_print("Roles that can never reach their target:")
    for role, s in short[:5]:
        _log_print(
            f"  - {role}: target={s['target']:,}, headcount={s['headcount']:,}, "
            f"slack={s['slack']}"
        )
