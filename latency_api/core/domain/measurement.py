"""Modelo de dominio para mediciones de latencia."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class Measurement:
    """Una observación de latencia con contexto de orden opcional.

    Solo la crea el validador; una vez persistida no se modifica.
    """
    timestamp: datetime
    broker: str
    latency_ms: float

    symbol: Optional[str] = None
    side: Optional[str] = None
    price: Optional[float] = None
    volume: Optional[int] = None

    def to_insert_params(self) -> dict:
        """Parámetros para el INSERT en order_latency."""
        return {
            "timestamp": self.timestamp,
            "broker": self.broker,
            "latency_ms": float(self.latency_ms),
            "symbol": self.symbol,
            "side": self.side,
            "price": self.price,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class LatencyPoint:
    """Punto de una serie: epoch en segundos enteros, broker y latencia."""
    timestamp: float
    broker: str
    latency_ms: float

    @classmethod
    def from_row(cls, timestamp: datetime, broker: str, latency_ms) -> "LatencyPoint":
        # Naive values come from columns without zone info and are UTC.
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            timestamp=float(math.floor(timestamp.timestamp())),
            broker=str(broker),
            latency_ms=float(latency_ms),
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "broker": self.broker,
            "latency_ms": self.latency_ms,
        }
