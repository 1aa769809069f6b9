from __future__ import annotations

from .data_models import CoverageMetrics, RoleGap
from .metrics import compute_coverage_metrics, compute_role_gaps
from .reporter import Reporter

__all__ = [
    "Reporter",
    "CoverageMetrics",
    "RoleGap",
    "compute_coverage_metrics",
    "compute_role_gaps",
]
