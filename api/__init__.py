"""
API package for the WebPlot FastAPI backend.

This package provides:
- Measurement record normalization (records.py)
- The in-memory ingestion store (store.py)
- Webhook ingest and query endpoints (webhooks.py)
- System health and info (system.py)
- Environment configuration (config.py)
"""

from .records import MeasurementRecord, normalize_payload
from .store import IngestionStore, ingestion_store

__all__ = [
    "MeasurementRecord",
    "normalize_payload",
    "IngestionStore",
    "ingestion_store",
]
