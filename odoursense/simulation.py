"""
Synthetic Sensor Source

Stands in for the gas sensor array when no hardware is attached.  Each
tick drifts every channel by a bounded random step from the previous
snapshot, with a humidity-dependent bias on acetone.
"""
from typing import Dict, Generator, Optional, Tuple

import numpy as np

from odoursense.core.base import SensorReadings, now_ms
from odoursense.utils import get_logger

logger = get_logger(__name__)

# Resting-state snapshot used for the first reading
RESTING_BASELINE: Dict[str, float] = {
    "acetone": 0.5,
    "ammonia": 0.2,
    "sulfur": 0.1,
    "ethanol": 0.0,
    "ether": 0.0,
    "hydrogen": 5.0,
    "methane": 2.0,
    "isoprene": 50.0,          # ppb
    "carbon_monoxide": 0.5,
    "nitric_oxide": 15.0,      # ppb
    "temperature": 36.5,
    "humidity": 45.0,
}

# channel -> (min, max, volatility); a step is uniform in ±volatility/2
DRIFT_PROFILE: Dict[str, Tuple[float, float, float]] = {
    "acetone":         (0.2, 10.0, 0.1),
    "ammonia":         (0.1, 5.0, 0.05),
    "sulfur":          (0.05, 2.0, 0.02),
    "ethanol":         (0.0, 300.0, 1.5),
    "ether":           (0.0, 100.0, 0.5),
    "hydrogen":        (2.0, 80.0, 1.0),
    "methane":         (0.0, 40.0, 0.5),
    "isoprene":        (20.0, 600.0, 5.0),
    "carbon_monoxide": (0.0, 15.0, 0.2),
    "nitric_oxide":    (5.0, 100.0, 2.0),
    "temperature":     (36.0, 37.5, 0.1),
    "humidity":        (30.0, 80.0, 2.0),
}

HUMID_AIR_PCT = 60.0
HUMID_ACETONE_FACTOR = 1.05


class MockSensorSource:
    """
    Drift generator for SensorReadings.

    Args:
        seed: Seed for the random generator (reproducible streams in tests).
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)
        self._last: Optional[SensorReadings] = None

    @property
    def last(self) -> Optional[SensorReadings]:
        return self._last

    def _drift(self, key: str, value: float) -> float:
        low, high, volatility = DRIFT_PROFILE[key]
        step = (self._rng.random() - 0.5) * volatility
        return float(np.clip(value + step, low, high))

    def next_reading(self) -> SensorReadings:
        """Produce the next snapshot (the resting baseline on the first call)."""
        prev = self._last
        if prev is None:
            reading = SensorReadings(**RESTING_BASELINE, timestamp=now_ms())
        else:
            values = {key: self._drift(key, prev.value(key)) for key in DRIFT_PROFILE}
            if values["humidity"] > HUMID_AIR_PCT:
                values["acetone"] *= HUMID_ACETONE_FACTOR
            reading = SensorReadings(**values, timestamp=now_ms())
        self._last = reading
        return reading

    def iter_readings(self, count: int) -> Generator[SensorReadings, None, None]:
        """
        Yield ``count`` consecutive snapshots.

        Args:
            count: Number of sampling ticks to simulate
        """
        for _ in range(count):
            yield self.next_reading()
        logger.debug(f"MockSensorSource: generated {count} synthetic reading(s)")
