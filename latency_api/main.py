from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from common.config import Settings, get_settings
from common.db import create_store_engine
from .core.clock import Clock, StoreClock, SystemClock
from .core.validation import MeasurementValidator
from .endpoints import health_router, latency_router, pages_router
from .errors import LatencyServiceError, QueryCancelled, StoreError
from .infrastructure.persistence import ensure_postgres_schema
from .queries import LatencyQueryEngine

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    query_clock: Optional[Clock] = None,
    ingest_clock: Optional[Clock] = None,
) -> FastAPI:
    """Construye la app.

    El engine (pool) se crea en el lifespan y se comparte entre componentes a
    través de ``app.state``. Si se pasa ``engine`` desde afuera, la app no lo
    cierra al terminar.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_engine = engine is None
        store_engine = engine if engine is not None else create_store_engine(settings)

        try:
            ensure_postgres_schema(store_engine)
        except SQLAlchemyError:
            # El servicio arranca igual; /ready informa si el store no responde.
            logger.error("[PostgreSQL] Store unavailable at startup, continuing")

        app.state.store_engine = store_engine
        app.state.query_engine = LatencyQueryEngine(store_engine, query_clock or StoreClock(store_engine))
        app.state.validator = MeasurementValidator(ingest_clock or SystemClock())

        logger.info("Server running at http://0.0.0.0:%s", settings.app_port)
        try:
            yield
        finally:
            if owns_engine:
                store_engine.dispose()

    app = FastAPI(title="Order Latency Service", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LatencyServiceError)
    async def latency_service_error_handler(request: Request, exc: LatencyServiceError) -> JSONResponse:
        if isinstance(exc, StoreError) and not isinstance(exc, QueryCancelled):
            logger.error("[HTTP] %s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.operation)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})

    app.include_router(pages_router)
    app.include_router(health_router)
    app.include_router(latency_router)

    return app


app = create_app()
