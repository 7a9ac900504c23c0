from __future__ import annotations

from pydantic import BaseModel, Field


class LatencyPointOut(BaseModel):
    timestamp: float = Field(..., description="Epoch seconds, truncated to whole seconds")
    broker: str
    latency_ms: float


class IngestResult(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
