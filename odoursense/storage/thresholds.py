"""
Threshold Store

Supplies and persists the warning / critical limits per channel.  Limits
are replaced wholesale on save; ``reset`` restores the factory defaults.
"""
from __future__ import annotations

import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional, Union

from odoursense.core.base import (
    AppThresholds,
    ThresholdConfig,
    default_thresholds,
    parse_thresholds,
    thresholds_to_dict,
)
from odoursense.utils import get_logger
from odoursense.utils.exceptions import ConfigurationError, UpstreamUnavailableError

logger = get_logger(__name__)


class ThresholdStore(ABC):
    """Contract for threshold configuration backends."""

    @abstractmethod
    def current(self) -> AppThresholds:
        pass

    @abstractmethod
    def save(self, thresholds: Mapping[str, ThresholdConfig]) -> None:
        pass

    def reset(self) -> AppThresholds:
        """Restore and return the default thresholds."""
        defaults = default_thresholds()
        self.save(defaults)
        return defaults


class InMemoryThresholdStore(ThresholdStore):

    def __init__(self, initial: Optional[Mapping[str, ThresholdConfig]] = None):
        self._thresholds: AppThresholds = dict(initial) if initial else default_thresholds()
        self._lock = threading.Lock()

    def current(self) -> AppThresholds:
        with self._lock:
            return dict(self._thresholds)

    def save(self, thresholds: Mapping[str, ThresholdConfig]) -> None:
        with self._lock:
            self._thresholds = dict(thresholds)


class JsonFileThresholdStore(ThresholdStore):
    """
    Thresholds stored as ``{channel: {"warning": w, "critical": c}}``.

    A missing file yields the defaults.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def current(self) -> AppThresholds:
        with self._lock:
            if not self.path.exists():
                return default_thresholds()
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as exc:
                raise UpstreamUnavailableError(
                    f"Cannot read thresholds file {self.path}: {exc}", collaborator="thresholds"
                ) from exc
        if not isinstance(data, dict):
            raise UpstreamUnavailableError(
                f"Thresholds file {self.path} does not hold a JSON object",
                collaborator="thresholds",
            )
        try:
            return parse_thresholds(data)
        except ConfigurationError as exc:
            raise UpstreamUnavailableError(
                f"Corrupt thresholds file {self.path}: {exc.message}", collaborator="thresholds"
            ) from exc

    def save(self, thresholds: Mapping[str, ThresholdConfig]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(thresholds_to_dict(thresholds), f, indent=2)
                os.replace(tmp_path, self.path)
            except OSError as exc:
                raise UpstreamUnavailableError(
                    f"Cannot write thresholds file {self.path}: {exc}", collaborator="thresholds"
                ) from exc
        logger.info(f"JsonFileThresholdStore: saved {len(thresholds)} channel threshold(s)")
