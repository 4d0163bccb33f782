"""
History Store

Keyed storage of finished AnalysisReports.  The engine reads the full list
once per evaluation to compute personal baselines; the service appends each
new report after it has been returned.

Backends:
    InMemoryHistoryStore  : process-local list (default, tests)
    JsonFileHistoryStore  : one JSON array on disk
"""
from __future__ import annotations

import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from odoursense.core.base import AnalysisReport
from odoursense.utils import get_logger
from odoursense.utils.exceptions import UpstreamUnavailableError

logger = get_logger(__name__)


class HistoryStore(ABC):
    """Contract for report history backends."""

    @abstractmethod
    def append(self, report: AnalysisReport) -> None:
        """Persist one report."""
        pass

    @abstractmethod
    def list_all(self) -> List[AnalysisReport]:
        """Every stored report, oldest first."""
        pass

    def count(self) -> int:
        return len(self.list_all())


class InMemoryHistoryStore(HistoryStore):

    def __init__(self):
        self._reports: List[AnalysisReport] = []
        self._lock = threading.Lock()

    def append(self, report: AnalysisReport) -> None:
        with self._lock:
            self._reports.append(report)

    def list_all(self) -> List[AnalysisReport]:
        with self._lock:
            return list(self._reports)


class JsonFileHistoryStore(HistoryStore):
    """
    Reports serialised with ``AnalysisReport.to_dict`` into a JSON array.

    A missing file is an empty history.  Unreadable or corrupt files raise
    UpstreamUnavailableError rather than being treated as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, report: AnalysisReport) -> None:
        with self._lock:
            records = self._read_records()
            records.append(report.to_dict())
            self._write_records(records)
        logger.debug(f"JsonFileHistoryStore: appended {report.id} ({len(records)} total)")

    def count(self) -> int:
        """Number of stored reports, without rebuilding them."""
        with self._lock:
            return len(self._read_records())

    def list_all(self) -> List[AnalysisReport]:
        with self._lock:
            records = self._read_records()
        try:
            return [AnalysisReport.from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamUnavailableError(
                f"Corrupt report in {self.path}: {exc}", collaborator="history"
            ) from exc

    def _read_records(self) -> list:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, ValueError) as exc:
            raise UpstreamUnavailableError(
                f"Cannot read history file {self.path}: {exc}", collaborator="history"
            ) from exc
        if not isinstance(records, list):
            raise UpstreamUnavailableError(
                f"History file {self.path} does not hold a JSON array", collaborator="history"
            )
        return records

    def _write_records(self, records: list) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise UpstreamUnavailableError(
                f"Cannot write history file {self.path}: {exc}", collaborator="history"
            ) from exc
