"""
Storage collaborators of the analysis engine: report history and threshold
configuration.
"""
from .history import HistoryStore, InMemoryHistoryStore, JsonFileHistoryStore
from .thresholds import ThresholdStore, InMemoryThresholdStore, JsonFileThresholdStore

__all__ = [
    "HistoryStore",
    "InMemoryHistoryStore",
    "JsonFileHistoryStore",
    "ThresholdStore",
    "InMemoryThresholdStore",
    "JsonFileThresholdStore",
]
