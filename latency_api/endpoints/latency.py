"""Endpoints de latencia: ingesta y series por ventana temporal."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import orjson
from fastapi import APIRouter, Depends, Request, status

from ..core.validation import MeasurementValidator, Rejected
from ..dependencies import get_query_engine, get_validator
from ..errors import MalformedRequestError, MeasurementValidationError, QueryCancelled, StoreError
from ..metrics import record_ingest, record_rejection
from ..queries import LatencyQueryEngine
from ..schemas import ErrorResponse, IngestResult, LatencyPointOut
from .store_calls import run_store_call

router = APIRouter(tags=["latency"])
logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def decode_json_object(body: bytes) -> Dict[str, Any]:
    """Decodifica el body a un objeto JSON o lanza MalformedRequestError."""
    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError:
        raise MalformedRequestError("Malformed JSON body") from None
    if not isinstance(data, dict):
        raise MalformedRequestError("Request body must be a JSON object")
    return data


@router.get("/api/latency", response_model=List[LatencyPointOut], responses=_ERROR_RESPONSES)
async def get_overnight_latency(
    request: Request,
    engine: LatencyQueryEngine = Depends(get_query_engine),
):
    """Serie del tramo 00:00-06:00 de hoy, para el heatmap."""
    points = await run_store_call(request, "overnight", engine.overnight)
    return [p.to_dict() for p in points]


@router.get("/api/latency/timeseries", response_model=List[LatencyPointOut], responses=_ERROR_RESPONSES)
@router.get("/api/latency/rolling", response_model=List[LatencyPointOut], responses=_ERROR_RESPONSES)
async def get_rolling_latency(
    request: Request,
    engine: LatencyQueryEngine = Depends(get_query_engine),
):
    """Serie de la última hora. /rolling es un alias del mismo handler."""
    points = await run_store_call(request, "rolling", engine.rolling)
    return [p.to_dict() for p in points]


@router.post(
    "/api/latency",
    status_code=status.HTTP_201_CREATED,
    response_model=IngestResult,
    responses=_ERROR_RESPONSES,
)
async def ingest_latency(
    request: Request,
    engine: LatencyQueryEngine = Depends(get_query_engine),
    validator: MeasurementValidator = Depends(get_validator),
):
    """Valida y persiste una medición de latencia.

    La validación termina antes de tocar el store; un rechazo nunca escribe.
    """
    try:
        raw = decode_json_object(await request.body())
    except MalformedRequestError as e:
        record_ingest("rejected")
        record_rejection(None)
        logger.info("[INGEST] Malformed body: %s", e.public_message)
        raise

    result = validator.validate(raw)
    if isinstance(result, Rejected):
        record_ingest("rejected")
        record_rejection(result.field)
        raise MeasurementValidationError(result.reason, field=result.field)

    try:
        await run_store_call(request, "insert", engine.insert, result.measurement)
    except QueryCancelled:
        record_ingest("cancelled")
        raise
    except StoreError:
        record_ingest("store_error")
        raise

    record_ingest("accepted")
    return IngestResult(message="Data inserted successfully")
