from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import ListedColormap

from presence.result_types import SimulationResult

from .text_report import get_active_report

# violation / alert / ok
STATUS_COLORS = ("#F87171", "#FBBF24", "#34D399")
_STATUS_CODE = {"violation": 0, "alert": 1, "ok": 2}


def _save_and_show(fig: plt.Figure, filename: str) -> None:
    """Persist the plot under outputs/ and show it."""
    out_dir = Path("outputs")
    out_dir.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_dir / filename, dpi=fig.dpi, bbox_inches="tight")
    plt.show()


def _date_ticks(dates: Sequence, max_ticks: int = 16) -> tuple[list[int], list[str]]:
    step = max(1, int(np.ceil(len(dates) / max_ticks)))
    idx = list(range(0, len(dates), step))
    return idx, [dates[i].strftime("%m-%d") for i in idx]


def show_coverage_heatmap(result: SimulationResult, enable_plot: bool = True) -> None:
    """Role x date grid coloured by coverage status, annotated with slack."""
    if not enable_plot or not result.roles or not result.dates:
        return

    status = result.pivot("status")
    codes = status.apply(lambda col: col.map(_STATUS_CODE)).to_numpy(dtype=float)
    available = result.pivot("available").to_numpy(dtype=float)
    minimum = result.pivot("min").to_numpy(dtype=float)
    slack = available - minimum

    n_roles, n_dates = codes.shape
    fig, ax = plt.subplots(
        figsize=(max(7.5, 0.3 * n_dates + 2), 1.2 + 0.45 * n_roles), dpi=150
    )
    ax.set_title("Coverage by role and day", pad=12)
    ax.imshow(
        codes,
        cmap=ListedColormap(STATUS_COLORS),
        vmin=0,
        vmax=2,
        aspect="auto",
        interpolation="nearest",
    )
    if n_dates <= 62:
        for r in range(n_roles):
            for d in range(n_dates):
                ax.text(
                    d,
                    r,
                    f"{int(slack[r, d]):+d}",
                    ha="center",
                    va="center",
                    fontsize=6,
                    color="black",
                )

    holidays = [i for i, t in enumerate(result.totals) if t.is_holiday]
    for i in holidays:
        ax.axvspan(i - 0.5, i + 0.5, color="0.3", alpha=0.25, linewidth=0)

    ticks, labels = _date_ticks(result.dates)
    ax.set_xticks(ticks, labels, rotation=90, fontsize=7)
    ax.set_yticks(range(n_roles), result.roles, fontsize=8)
    ax.set_xlabel("Date (shaded = holiday)")
    for spine in ax.spines.values():
        spine.set_visible(False)

    fig.tight_layout()
    _save_and_show(fig, "coverage_heatmap.png")
    report = get_active_report()
    if report is not None:
        report.add_figure(fig)


def show_daily_totals(result: SimulationResult, enable_plot: bool = True) -> None:
    """Grand-total available headcount against the summed target, per day."""
    if not enable_plot or not result.totals:
        return

    x = list(range(len(result.totals)))
    avail = [t.available if not t.is_holiday else np.nan for t in result.totals]
    target = [t.min if not t.is_holiday else np.nan for t in result.totals]

    fig, ax = plt.subplots(figsize=(7.5, 4), dpi=150)
    ax.set_title("Available vs required headcount", pad=35)
    ax.bar(x, avail, width=0.8, color="tab:blue", alpha=0.6, label="Available")
    ax.step(
        x,
        target,
        where="mid",
        color="tab:red",
        linewidth=1.5,
        label="Required (sum of targets)",
    )
    violations = [
        i for i, t in enumerate(result.totals) if t.status == "violation"
    ]
    if violations:
        ax.scatter(
            violations,
            [result.totals[i].available for i in violations],
            color="black",
            marker="x",
            zorder=3,
            label="Violation",
        )

    ticks, labels = _date_ticks(result.dates)
    ax.set_xticks(ticks, labels, rotation=90, fontsize=7)
    ax.set_ylabel("People")
    ax.set_xmargin(0.01)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.legend(
        loc="upper center",
        bbox_to_anchor=(0.5, 1.15),
        ncol=3,
        borderaxespad=0.3,
    )
    fig.tight_layout(rect=(0, 0, 1, 0.92))
    _save_and_show(fig, "daily_totals.png")
    report = get_active_report()
    if report is not None:
        report.add_figure(fig)
