"""Metrics module for ingestion and query observability."""

from .ingestion_metrics import (
    record_ingest,
    record_rejection,
    record_store_error,
    time_store_operation,
)

__all__ = [
    "record_ingest",
    "record_rejection",
    "record_store_error",
    "time_store_operation",
]
