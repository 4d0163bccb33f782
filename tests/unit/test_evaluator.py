"""
Unit Tests for the Biomarker Evaluator

Tests for status classification, reading validation and trend annotation.
"""
import math

import pytest

from odoursense.core.base import CHANNELS_BY_KEY, BiomarkerStatus, ThresholdConfig
from odoursense.core.evaluator import classify, evaluate_biomarker, trend_note
from odoursense.utils.exceptions import InvalidReadingError


ACETONE = CHANNELS_BY_KEY["acetone"]
AMMONIA = CHANNELS_BY_KEY["ammonia"]
NITRIC_OXIDE = CHANNELS_BY_KEY["nitric_oxide"]


@pytest.fixture
def acetone_limits() -> ThresholdConfig:
    return ThresholdConfig(warning=1.8, critical=5.0)


class TestClassification:
    """Strict '>' on both bounds."""

    @pytest.mark.parametrize("value, expected", [
        (0.0, BiomarkerStatus.NORMAL),
        (1.8, BiomarkerStatus.NORMAL),
        (1.81, BiomarkerStatus.ELEVATED),
        (5.0, BiomarkerStatus.ELEVATED),
        (5.01, BiomarkerStatus.CRITICAL),
        (60.0, BiomarkerStatus.CRITICAL),
    ])
    def test_boundaries(self, acetone_limits, value, expected):
        """Values exactly on a bound are not escalated."""
        assert classify(value, acetone_limits) is expected

    def test_equal_warning_and_critical(self):
        """Equal bounds jump straight from Normal to Critical."""
        limits = ThresholdConfig(warning=2.0, critical=2.0)
        assert classify(2.0, limits) is BiomarkerStatus.NORMAL
        assert classify(2.1, limits) is BiomarkerStatus.CRITICAL


class TestEvaluateBiomarker:

    def test_normal_insight(self, acetone_limits):
        """Normal insight carries the normal template."""
        insight = evaluate_biomarker(ACETONE, 0.5, acetone_limits)

        assert insight.name == "Acetone"
        assert insight.unit == "ppm"
        assert insight.value == 0.5
        assert insight.status is BiomarkerStatus.NORMAL
        assert insight.interpretation == ACETONE.normal

    def test_critical_uses_critical_template(self, acetone_limits):
        """Critical insight carries the critical template."""
        insight = evaluate_biomarker(ACETONE, 6.0, acetone_limits)

        assert insight.status is BiomarkerStatus.CRITICAL
        assert insight.interpretation == ACETONE.critical

    def test_ppb_unit(self):
        """Nitric oxide is reported in ppb."""
        insight = evaluate_biomarker(NITRIC_OXIDE, 30, ThresholdConfig(25, 50))
        assert insight.unit == "ppb"
        assert insight.status is BiomarkerStatus.ELEVATED

    @pytest.mark.parametrize("bad", [None, math.nan, math.inf, -0.1, "abc"])
    def test_invalid_reading(self, acetone_limits, bad):
        """Absent, non-finite, negative or non-numeric values are rejected."""
        with pytest.raises(InvalidReadingError) as exc_info:
            evaluate_biomarker(ACETONE, bad, acetone_limits)

        assert exc_info.value.channel == "acetone"
        assert exc_info.value.to_dict()["error"] == "INVALID_READING"

    def test_zero_is_valid(self, acetone_limits):
        """Zero is a real reading."""
        assert evaluate_biomarker(ACETONE, 0, acetone_limits).value == 0.0


class TestTrendAnnotation:
    """Personal-baseline notes."""

    def test_spike_on_critical_value(self):
        """Spike note is appended to a Critical interpretation."""
        limits = ThresholdConfig(warning=0.8, critical=2.0)
        insight = evaluate_biomarker(AMMONIA, 3.0, limits, baseline=1.5)

        assert insight.status is BiomarkerStatus.CRITICAL
        assert insight.interpretation.startswith(AMMONIA.critical)
        assert "TREND ALERT: Significant spike (+100%) compared to history." in insight.interpretation

    def test_baseline_note_on_normal_value(self, acetone_limits):
        """A 33% rise on a Normal value gets the baseline note."""
        insight = evaluate_biomarker(ACETONE, 1.6, acetone_limits, baseline=1.2)

        assert insight.status is BiomarkerStatus.NORMAL
        assert insight.interpretation == (
            ACETONE.normal + " NOTE: Value is 33% higher than your personal baseline."
        )

    def test_small_rise_not_annotated(self, acetone_limits):
        """A 20% rise is below both trend limits."""
        insight = evaluate_biomarker(ACETONE, 1.2, acetone_limits, baseline=1.0)
        assert insight.interpretation == ACETONE.normal

    def test_moderate_rise_on_elevated_value_not_annotated(self, acetone_limits):
        """The baseline note is for Normal values only."""
        insight = evaluate_biomarker(ACETONE, 2.6, acetone_limits, baseline=2.0)

        assert insight.status is BiomarkerStatus.ELEVATED
        assert insight.interpretation == ACETONE.elevated

    def test_spike_still_annotates_normal_value(self, acetone_limits):
        """A spike wins over the baseline note."""
        insight = evaluate_biomarker(ACETONE, 1.6, acetone_limits, baseline=1.0)

        assert insight.status is BiomarkerStatus.NORMAL
        assert "TREND ALERT" in insight.interpretation
        assert "NOTE:" not in insight.interpretation

    @pytest.mark.parametrize("baseline", [None, 0.0])
    def test_no_usable_baseline(self, baseline):
        """Missing or zero baselines give no note."""
        assert trend_note(5.0, baseline, BiomarkerStatus.NORMAL) == ""

    def test_drop_below_baseline_not_annotated(self):
        """Falling values are not annotated."""
        assert trend_note(1.0, 2.0, BiomarkerStatus.NORMAL) == ""
