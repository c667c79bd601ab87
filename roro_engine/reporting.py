"""Experiment reports: variant stats grouped per experiment, with a z-test for two-variant experiments."""

from collections import OrderedDict
from typing import Dict, List, Optional

from pydantic import BaseModel

from .models.telemetry import VariantStats
from .significance import DEFAULT_ALPHA, SignificanceResult, compare


class VariantSummary(BaseModel):
    variant: str
    exposures: int
    clicks: int
    ctr: float


class ExperimentReport(BaseModel):
    experiment: str
    variants: List[VariantSummary]
    # Present only when the experiment has exactly two variants (compared in name order).
    significance: Optional[SignificanceResult] = None


def build_experiment_reports(
    stats: List[VariantStats],
    alpha: float = DEFAULT_ALPHA,
) -> List[ExperimentReport]:
    grouped: Dict[str, List[VariantStats]] = OrderedDict()
    for s in sorted(stats, key=lambda s: (s.experiment, s.variant)):
        grouped.setdefault(s.experiment, []).append(s)

    reports = []
    for experiment, rows in grouped.items():
        significance = None
        if len(rows) == 2:
            a, b = rows
            significance = compare(a.exposures, a.clicks, b.exposures, b.clicks, alpha)
        reports.append(
            ExperimentReport(
                experiment=experiment,
                variants=[
                    VariantSummary(variant=r.variant, exposures=r.exposures, clicks=r.clicks, ctr=r.ctr)
                    for r in rows
                ],
                significance=significance,
            )
        )
    return reports
