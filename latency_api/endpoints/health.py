"""Health, readiness and metrics endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.engine import Engine

from common.db import check_connection
from ..dependencies import get_store_engine

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe: always returns ok if process is running."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(engine: Engine = Depends(get_store_engine)):
    """Readiness probe: checks DB connectivity.

    No expone detalles de error al cliente; el fallo queda en el log.
    """
    if not await run_in_threadpool(check_connection, engine):
        raise HTTPException(status_code=503, detail="not ready")
    return {"status": "ready"}


@router.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
