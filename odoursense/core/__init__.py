"""
Breath Analysis Core

Turns a sensor snapshot plus symptom flags into a differential-diagnosis
report.

Usage:
    from odoursense.core import BreathAnalysisEngine, SensorReadings, SymptomState

    engine = BreathAnalysisEngine()
    report = engine.analyze(readings, symptoms, thresholds)
"""
from .engine import BreathAnalysisEngine
from .base import (
    AnalysisReport,
    BiomarkerInsight,
    BiomarkerStatus,
    DiseaseLikelihood,
    RiskLevel,
    SensorReadings,
    SymptomState,
    ThresholdConfig,
    DEFAULT_THRESHOLDS,
)

__all__ = [
    "BreathAnalysisEngine",
    "AnalysisReport",
    "BiomarkerInsight",
    "BiomarkerStatus",
    "DiseaseLikelihood",
    "RiskLevel",
    "SensorReadings",
    "SymptomState",
    "ThresholdConfig",
    "DEFAULT_THRESHOLDS",
]
