"""
Analysis Service - Breath Analysis Request Handling

Wires the engine to its storage collaborators and owns persistence of the
finished report, keeping the FastAPI endpoints free of business logic.
"""
from typing import Any, List, Mapping, Optional

from odoursense.config import Settings
from odoursense.core.base import (
    AnalysisReport,
    AppThresholds,
    SensorReadings,
    SymptomState,
    parse_thresholds,
    require_channels,
)
from odoursense.core.engine import BreathAnalysisEngine
from odoursense.simulation import MockSensorSource
from odoursense.storage import (
    HistoryStore,
    InMemoryHistoryStore,
    InMemoryThresholdStore,
    JsonFileHistoryStore,
    JsonFileThresholdStore,
    ThresholdStore,
)
from odoursense.utils import get_logger

logger = get_logger(__name__)


class AnalysisService:
    """
    Service class for breath analysis, threshold management and history.
    """

    def __init__(
        self,
        history_store: Optional[HistoryStore] = None,
        threshold_store: Optional[ThresholdStore] = None,
        sensor_source: Optional[MockSensorSource] = None,
    ):
        self.history_store = history_store or InMemoryHistoryStore()
        self.threshold_store = threshold_store or InMemoryThresholdStore()
        self.sensor_source = sensor_source or MockSensorSource()
        self.engine = BreathAnalysisEngine(
            history_store=self.history_store,
            threshold_store=self.threshold_store,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalysisService":
        """Build the service with file-backed stores where paths are configured."""
        history = JsonFileHistoryStore(settings.history_path) if settings.history_path else None
        thresholds = (
            JsonFileThresholdStore(settings.thresholds_path) if settings.thresholds_path else None
        )
        logger.info(
            f"AnalysisService: history={'file' if history else 'memory'}, "
            f"thresholds={'file' if thresholds else 'memory'}"
        )
        return cls(
            history_store=history,
            threshold_store=thresholds,
            sensor_source=MockSensorSource(seed=settings.simulation_seed),
        )

    def run_analysis(
        self,
        readings: SensorReadings,
        symptoms: SymptomState,
        thresholds: Optional[Mapping[str, Any]] = None,
    ) -> AnalysisReport:
        """
        Analyse one snapshot and record the report in history.

        The history write is fire-and-forget: a failing store is logged and
        the report is still returned to the caller.
        """
        report = self.engine.analyze(readings, symptoms, thresholds)
        try:
            self.history_store.append(report)
        except Exception as exc:
            logger.error(f"AnalysisService: could not store report {report.id}: {exc}", exc_info=True)
        return report

    def history(self) -> List[AnalysisReport]:
        return self.history_store.list_all()

    def report_count(self) -> int:
        return self.history_store.count()

    def current_thresholds(self) -> AppThresholds:
        return self.threshold_store.current()

    def update_thresholds(self, data: Mapping[str, Any]) -> AppThresholds:
        """Validate and replace the full threshold set."""
        thresholds = parse_thresholds(data)
        require_channels(thresholds)
        self.threshold_store.save(thresholds)
        logger.info(f"AnalysisService: thresholds updated for {len(thresholds)} channel(s)")
        return thresholds

    def reset_thresholds(self) -> AppThresholds:
        return self.threshold_store.reset()

    def simulate_reading(self) -> SensorReadings:
        return self.sensor_source.next_reading()
