"""Métricas Prometheus de ingesta y consultas."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

INGEST_REQUESTS = Counter(
    "latency_ingest_requests_total",
    "Total POST /api/latency requests by outcome",
    ["status"],  # accepted, rejected, store_error, cancelled
)
INGEST_REJECTIONS = Counter(
    "latency_ingest_rejections_total",
    "Rejected measurements by offending field",
    ["field"],
)
STORE_OPERATION_LATENCY = Histogram(
    "latency_store_operation_seconds",
    "Store operation duration",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
STORE_ERRORS = Counter(
    "latency_store_errors_total",
    "Store operations that failed",
    ["operation"],
)


def record_ingest(status: str) -> None:
    INGEST_REQUESTS.labels(status=status).inc()


def record_rejection(field: str | None) -> None:
    INGEST_REJECTIONS.labels(field=field or "body").inc()


def record_store_error(operation: str) -> None:
    STORE_ERRORS.labels(operation=operation).inc()


@contextmanager
def time_store_operation(operation: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        STORE_OPERATION_LATENCY.labels(operation=operation).observe(time.perf_counter() - start)
