"""
In-memory ingestion store for received measurement records.

Holds the most recent record and the full history in arrival order. The
history is unbounded and lives for the lifetime of the process.
"""

import threading
from typing import List, Optional

from .records import MeasurementRecord


class IngestionStore:
    """Append-only record history with a latest-record cache."""

    def __init__(self):
        self._latest: Optional[MeasurementRecord] = None
        self._history: List[MeasurementRecord] = []
        self._lock = threading.Lock()

    def append(self, record: MeasurementRecord) -> None:
        """Store a normalized record as the latest and at the end of the history.

        Records are not deduplicated: a repeated id adds another entry.
        """
        with self._lock:
            self._latest = record
            self._history.append(record)

    def get_latest(self) -> Optional[MeasurementRecord]:
        """Most recently appended record, or None if nothing was received yet."""
        with self._lock:
            return self._latest

    def get_all(self) -> List[MeasurementRecord]:
        """Snapshot of the full history in insertion order."""
        with self._lock:
            return list(self._history)

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)


# Global store instance, shared by all requests of this process
ingestion_store = IngestionStore()


def get_store() -> IngestionStore:
    """FastAPI dependency returning the process-wide store."""
    return ingestion_store
