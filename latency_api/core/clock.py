"""Fuentes de tiempo inyectables.

La lógica de negocio nunca llama a ``datetime.now()`` directamente:
recibe un ``Clock``. En producción el validador usa ``SystemClock`` (hora de
ingesta) y el motor de consultas usa ``StoreClock`` (hora y zona de la BD,
evaluadas en el momento de ejecutar la consulta). Los tests usan ``FixedClock``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> datetime:
        """Current instant as an aware datetime."""
        ...


class SystemClock:
    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """Reloj determinista para tests."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires an aware datetime")
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **kwargs: float) -> None:
        self._instant = self._instant + timedelta(**kwargs)


class StoreClock:
    """Reads the current instant and session time zone from the store.

    The overnight window is defined on the store's calendar date, so asking
    the store avoids any skew between application host and database.
    """

    _QUERY = text("SELECT NOW() AS now, current_setting('TimeZone') AS tz")

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def now(self) -> datetime:
        with self._engine.connect() as conn:
            row = conn.execute(self._QUERY).mappings().one()

        now = row["now"]
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        zone_name = row["tz"]
        try:
            return now.astimezone(ZoneInfo(zone_name))
        except (ZoneInfoNotFoundError, ValueError):
            # psycopg2 already returns NOW() shifted to the session offset.
            logger.warning("[CLOCK] Unknown store time zone %r, using offset %s", zone_name, now.utcoffset())
            return now
