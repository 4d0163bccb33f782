"""
Pytest Configuration and Fixtures

Shared fixtures for breath analysis tests.
"""
import pytest
from pathlib import Path
import sys

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from odoursense.core.base import (
    CHANNELS,
    DEFAULT_THRESHOLDS,
    SensorReadings,
    SymptomState,
    default_thresholds,
)
from odoursense.core.engine import BreathAnalysisEngine
from odoursense.storage import InMemoryHistoryStore, InMemoryThresholdStore


def make_readings(**overrides) -> SensorReadings:
    """Every gas at 10% of its default warning limit, with overrides applied."""
    values = {c.key: DEFAULT_THRESHOLDS[c.key].warning * 0.1 for c in CHANNELS}
    values.update(overrides)
    return SensorReadings(**values, timestamp=1_700_000_000_000)


@pytest.fixture
def quiet_readings() -> SensorReadings:
    """Snapshot with every channel well below its warning limit."""
    return make_readings()


@pytest.fixture
def no_symptoms() -> SymptomState:
    return SymptomState()


@pytest.fixture
def thresholds():
    return default_thresholds()


@pytest.fixture
def history_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def engine(history_store) -> BreathAnalysisEngine:
    return BreathAnalysisEngine(
        history_store=history_store,
        threshold_store=InMemoryThresholdStore(),
    )


@pytest.fixture
def readings_factory():
    """Build snapshots from the quiet baseline plus per-channel overrides."""
    return make_readings
