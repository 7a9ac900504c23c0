"""FastAPI dependencies.

Los componentes viven en ``app.state`` (creados en el lifespan), no en globals
de módulo, para que los tests puedan inyectar engine y relojes.
"""

from __future__ import annotations

from fastapi import Request
from sqlalchemy.engine import Engine

from .core.validation import MeasurementValidator
from .queries import LatencyQueryEngine


def get_query_engine(request: Request) -> LatencyQueryEngine:
    return request.app.state.query_engine


def get_validator(request: Request) -> MeasurementValidator:
    return request.app.state.validator


def get_store_engine(request: Request) -> Engine:
    return request.app.state.store_engine
