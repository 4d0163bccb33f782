"""
Breath Analysis Engine

Single entry point of the scoring core.  Sequences one evaluation:

    history snapshot → baseline averages → per-channel evaluation
        → disease scoring → report composition → id / timestamp stamp

Usage:
    from odoursense.core import BreathAnalysisEngine

    engine = BreathAnalysisEngine(history_store=store)
    report = engine.analyze(readings, symptoms, thresholds)
    print(report.risk_level, report.summary)

The engine holds no mutable state.  The history store is read once per
call; the engine never writes to it (see AnalysisService for persistence).
"""
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from odoursense.utils import get_logger
from odoursense.utils.exceptions import (
    ConfigurationError,
    OdourSenseError,
    UpstreamUnavailableError,
)
from .base import (
    CHANNELS,
    AnalysisReport,
    BiomarkerInsight,
    SensorReadings,
    SymptomState,
    ThresholdConfig,
    now_ms,
    parse_thresholds,
)
from .baseline import historical_averages
from .composer import compose_report
from .evaluator import evaluate_biomarker
from .rules import CONDITION_CATALOGUE, ConditionRule
from .scoring import score_diseases

if TYPE_CHECKING:
    from odoursense.storage import HistoryStore, ThresholdStore

logger = get_logger(__name__)


def new_report_id() -> str:
    return f"RPT-{uuid.uuid4().hex[:8].upper()}"


class BreathAnalysisEngine:
    """
    Transforms a sensor snapshot plus symptoms into an AnalysisReport.

    Stateless, safe to call from multiple threads / concurrent requests.
    """

    def __init__(
        self,
        history_store: Optional["HistoryStore"] = None,
        threshold_store: Optional["ThresholdStore"] = None,
        catalogue: Sequence[ConditionRule] = CONDITION_CATALOGUE,
    ):
        self._history_store = history_store
        self._threshold_store = threshold_store
        self._catalogue = tuple(catalogue)

    def analyze(
        self,
        readings: Union[SensorReadings, Mapping[str, Any]],
        symptoms: Union[SymptomState, Mapping[str, Any], None] = None,
        thresholds: Optional[Mapping[str, Any]] = None,
    ) -> AnalysisReport:
        """
        Run one complete evaluation.

        Args:
            readings:   Sensor snapshot (or a mapping accepted by SensorReadings.from_dict).
            symptoms:   Symptom flags (or a mapping; unknown keys are ignored).
            thresholds: Channel → {warning, critical}.  Read from the threshold
                        store when omitted.

        Raises:
            InvalidReadingError: a channel value is missing, NaN or negative.
            InvalidSymptomError: a symptom flag is not a boolean.
            ConfigurationError: a channel has no usable threshold.
            UpstreamUnavailableError: a store failed to answer.
        """
        if not isinstance(readings, SensorReadings):
            readings = SensorReadings.from_dict(readings)
        if not isinstance(symptoms, SymptomState):
            symptoms = SymptomState.from_mapping(symptoms)

        app_thresholds = parse_thresholds(
            thresholds if thresholds is not None else self._current_thresholds()
        )
        baseline = historical_averages(self._history_snapshot())
        logger.debug(
            f"BreathAnalysisEngine: baseline "
            f"{'absent' if baseline is None else f'over {len(baseline)} channel(s)'}"
        )

        insights = self.evaluate_channels(readings, app_thresholds, baseline)
        diseases = score_diseases(insights, symptoms, self._catalogue)
        composed = compose_report(diseases, insights, symptoms, self._catalogue)

        report = AnalysisReport(
            id=new_report_id(),
            timestamp=now_ms(),
            risk_level=composed.risk_level,
            summary=composed.summary,
            diseases=tuple(diseases),
            explanation=composed.explanation,
            recommendation=composed.recommendation,
            biomarker_insights=tuple(insights),
        )
        logger.info(
            f"BreathAnalysisEngine [{report.id}]: {report.risk_level.value}: "
            + ", ".join(f"{d.name} ({d.probability}%)" for d in diseases)
        )
        return report

    @staticmethod
    def evaluate_channels(
        readings: SensorReadings,
        thresholds: Mapping[str, ThresholdConfig],
        baseline: Optional[Dict[str, float]] = None,
    ) -> List[BiomarkerInsight]:
        """Evaluate every catalogue channel; fails on the first bad channel."""
        insights = []
        for channel in CHANNELS:
            threshold = thresholds.get(channel.key)
            if threshold is None:
                raise ConfigurationError(
                    f"No threshold configured for channel '{channel.key}'", channel=channel.key
                )
            insights.append(evaluate_biomarker(
                channel,
                readings.value(channel.key),
                threshold,
                baseline.get(channel.name) if baseline else None,
            ))
        return insights

    # ── Collaborator reads ────────────────────────────────────────────────────

    def _history_snapshot(self) -> List[AnalysisReport]:
        if self._history_store is None:
            return []
        try:
            return list(self._history_store.list_all())
        except OdourSenseError:
            raise
        except Exception as exc:
            raise UpstreamUnavailableError(
                f"History store read failed: {exc}", collaborator="history"
            ) from exc

    def _current_thresholds(self) -> Mapping[str, Any]:
        if self._threshold_store is None:
            raise ConfigurationError(
                "No thresholds supplied and no threshold store configured"
            )
        try:
            return self._threshold_store.current()
        except OdourSenseError:
            raise
        except Exception as exc:
            raise UpstreamUnavailableError(
                f"Threshold store read failed: {exc}", collaborator="thresholds"
            ) from exc
