"""Validador de mediciones de latencia entrantes.

Convierte un registro JSON sin tipar en un ``Measurement`` normalizado o en un
rechazo con el campo y el motivo. Sin I/O: la única dependencia externa es el
reloj usado como timestamp por defecto.

Orden de chequeo (gana el primero que falla):
    presencia → broker → latency_ms → timestamp → symbol → side → price → volume
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from ..clock import Clock
from ..domain.measurement import Measurement

logger = logging.getLogger(__name__)

BROKER_MAX_LENGTH = 50
SYMBOL_MAX_LENGTH = 20

MISSING_FIELDS_REASON = "Missing required fields: broker and latency_ms are required"
BROKER_REASON = "broker must be a non-empty string with max 50 characters"
LATENCY_REASON = "latency_ms must be a non-negative finite number"
TIMESTAMP_REASON = "Invalid timestamp format"
SYMBOL_REASON = "symbol must be a string with max 20 characters"
SIDE_REASON = "side must be a single character"
PRICE_REASON = "price must be a non-negative finite number"
VOLUME_REASON = "volume must be a non-negative integer"


@dataclass(frozen=True)
class Accepted:
    measurement: Measurement


@dataclass(frozen=True)
class Rejected:
    field: Optional[str]
    reason: str


ValidationResult = Union[Accepted, Rejected]


def _is_number(value: Any) -> bool:
    # bool es subclase de int; JSON true/false no son números
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _non_negative_finite(value: Any) -> Optional[float]:
    if not _is_number(value):
        return None
    try:
        as_float = float(value)
    except OverflowError:
        return None
    if not math.isfinite(as_float) or as_float < 0:
        return None
    return as_float


def _non_negative_integer(value: Any) -> Optional[int]:
    if not _is_number(value):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if value < 0:
        return None
    return value


def _is_blank(value: Any) -> bool:
    # [] y {} no son "vacíos": pasan a parse_timestamp y se rechazan
    if value is None or value is False or value == "":
        return True
    if _is_number(value):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or epoch milliseconds into an aware UTC datetime.

    Strings without an offset are read as UTC. Returns None when the value
    cannot be interpreted as an instant.
    """
    if isinstance(value, bool):
        return None

    if _is_number(value):
        try:
            parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
        return parsed

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        try:
            return parsed.astimezone(timezone.utc)
        except OverflowError:
            return None

    return None


class MeasurementValidator:
    """Valida registros de latencia antes de persistirlos.

    Responsabilidades:
    - Chequear presencia de broker y latency_ms
    - Chequear tipo y rango de cada campo
    - Resolver el timestamp (parseado o hora de ingesta)
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    def validate(self, raw: Mapping[str, Any]) -> ValidationResult:
        """Valida un registro crudo.

        Args:
            raw: Objeto JSON decodificado

        Returns:
            Accepted con la medición normalizada, o Rejected con campo y motivo
        """
        broker = raw.get("broker")
        latency_ms = raw.get("latency_ms")

        if broker is None or latency_ms is None:
            missing = "broker" if broker is None else "latency_ms"
            return self._reject(missing, MISSING_FIELDS_REASON)

        if not isinstance(broker, str) or not 1 <= len(broker) <= BROKER_MAX_LENGTH:
            return self._reject("broker", BROKER_REASON)

        latency = _non_negative_finite(latency_ms)
        if latency is None:
            return self._reject("latency_ms", LATENCY_REASON)

        raw_timestamp = raw.get("timestamp")
        if _is_blank(raw_timestamp):
            timestamp = self._clock.now().astimezone(timezone.utc)
        else:
            timestamp = parse_timestamp(raw_timestamp)
            if timestamp is None:
                return self._reject("timestamp", TIMESTAMP_REASON)

        symbol = raw.get("symbol")
        if symbol is not None and (not isinstance(symbol, str) or len(symbol) > SYMBOL_MAX_LENGTH):
            return self._reject("symbol", SYMBOL_REASON)

        side = raw.get("side")
        if side is not None and (not isinstance(side, str) or len(side) != 1):
            return self._reject("side", SIDE_REASON)

        price = raw.get("price")
        if price is not None:
            price = _non_negative_finite(price)
            if price is None:
                return self._reject("price", PRICE_REASON)

        volume = raw.get("volume")
        if volume is not None:
            volume = _non_negative_integer(volume)
            if volume is None:
                return self._reject("volume", VOLUME_REASON)

        return Accepted(
            Measurement(
                timestamp=timestamp,
                broker=broker,
                latency_ms=latency,
                symbol=symbol,
                side=side,
                price=price,
                volume=volume,
            )
        )

    def _reject(self, field: str, reason: str) -> Rejected:
        logger.info("[VALIDATOR] Rejected measurement field=%s reason=%s", field, reason)
        return Rejected(field=field, reason=reason)
