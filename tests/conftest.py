"""Fixtures compartidos.

El store de los tests es un SQLite temporal creado con la misma migración
que PostgreSQL; todos los relojes son ``FixedClock``.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from common.config import Settings
from latency_api.core.clock import FixedClock
from latency_api.infrastructure.persistence import ensure_postgres_schema
from latency_api.main import create_app
from latency_api.queries import LatencyQueryEngine

# 03:00 UTC: dentro del tramo overnight
NOW = datetime(2026, 10, 19, 3, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def store_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'latency.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    ensure_postgres_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def query_engine(store_engine, fixed_clock) -> LatencyQueryEngine:
    return LatencyQueryEngine(store_engine, fixed_clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        db_host="localhost",
        db_port=5432,
        db_user="test",
        db_password="",
        db_name="test",
        app_port=3000,
    )


@pytest.fixture
def client(settings, store_engine, fixed_clock):
    app = create_app(
        settings,
        engine=store_engine,
        query_clock=fixed_clock,
        ingest_clock=fixed_clock,
    )
    with TestClient(app) as test_client:
        yield test_client
