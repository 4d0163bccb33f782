"""
Biomarker Evaluator

Classifies one channel value against its threshold pair and renders the
interpretation text, optionally annotated with a trend note when a
personal historical average exists for the channel.

Classification uses strict ``>`` on both bounds: a value exactly at a
bound is not yet escalated.
"""
from __future__ import annotations

import math
from typing import Optional

from odoursense.utils.exceptions import InvalidReadingError
from .base import BiomarkerInsight, BiomarkerStatus, Channel, ThresholdConfig

# Percent rise over the personal baseline that triggers a trend note
TREND_SPIKE_PCT    = 50.0
TREND_BASELINE_PCT = 25.0


def validate_reading(channel: Channel, value) -> float:
    """Reject absent, non-numeric, non-finite or negative values."""
    if value is None:
        raise InvalidReadingError(f"No reading for channel '{channel.key}'", channel=channel.key)
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidReadingError(
            f"Non-numeric reading {value!r} for channel '{channel.key}'", channel=channel.key
        ) from exc
    if not math.isfinite(value):
        raise InvalidReadingError(
            f"Non-finite reading {value} for channel '{channel.key}'", channel=channel.key
        )
    if value < 0:
        raise InvalidReadingError(
            f"Negative reading {value} for channel '{channel.key}'", channel=channel.key
        )
    return value


def classify(value: float, threshold: ThresholdConfig) -> BiomarkerStatus:
    if value > threshold.critical:
        return BiomarkerStatus.CRITICAL
    if value > threshold.warning:
        return BiomarkerStatus.ELEVATED
    return BiomarkerStatus.NORMAL


def trend_note(value: float, baseline: Optional[float], status: BiomarkerStatus) -> str:
    """
    Relative-trend annotation against the personal baseline.

    A spike above 50% is reported whatever the status; a rise above 25% is
    only reported for values that are still absolutely Normal.  Returns an
    empty string when there is no usable baseline.
    """
    if not baseline:
        return ""
    pct_change = (value - baseline) / baseline * 100
    if pct_change > TREND_SPIKE_PCT:
        return f" TREND ALERT: Significant spike (+{pct_change:.0f}%) compared to history."
    if pct_change > TREND_BASELINE_PCT and status is BiomarkerStatus.NORMAL:
        return f" NOTE: Value is {pct_change:.0f}% higher than your personal baseline."
    return ""


def evaluate_biomarker(
    channel: Channel,
    value,
    threshold: ThresholdConfig,
    baseline: Optional[float] = None,
) -> BiomarkerInsight:
    """
    Evaluate a single channel.

    Args:
        channel:   Catalogue entry carrying unit and interpretation templates.
        value:     Raw reading for the channel.
        threshold: Warning / critical pair for the channel.
        baseline:  Historical mean for the channel, if any.

    Raises:
        InvalidReadingError: the value is missing, NaN, infinite or negative.
    """
    value = validate_reading(channel, value)
    status = classify(value, threshold)
    interpretation = channel.template(status) + trend_note(value, baseline, status)
    return BiomarkerInsight(
        name=channel.name,
        value=value,
        unit=channel.unit,
        status=status,
        interpretation=interpretation,
    )
