"""
Historical Baseline Aggregator

Reduces past reports to a per-channel mean keyed by insight name.  The
result is an advisory trend signal only and never feeds classification.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, Optional

from .base import AnalysisReport


def historical_averages(reports: Iterable[AnalysisReport]) -> Optional[Dict[str, float]]:
    """
    Mean value of every insight name seen across ``reports``.

    Returns None when there is no history at all.  Channels never observed
    are simply absent from the result.
    """
    sums: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    seen_report = False

    for report in reports:
        seen_report = True
        for insight in report.biomarker_insights:
            sums[insight.name] += insight.value
            counts[insight.name] += 1

    if not seen_report:
        return None
    return {name: sums[name] / counts[name] for name in sums}
