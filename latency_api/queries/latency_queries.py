"""Motor de consultas sobre ``order_latency``.

Dos lecturas (overnight y rolling) y una escritura. Todas reciben opcionalmente
un ``StoreOperation`` para poder cancelarlas si el cliente se desconecta.
Cualquier error del store sale como ``StoreError``; nunca hay resultados parciales.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, List, Optional, TypeVar

from sqlalchemy import DateTime, Float, String, bindparam, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..core.clock import Clock
from ..core.domain.measurement import LatencyPoint, Measurement
from ..errors import QueryCancelled, StoreError
from ..infrastructure.persistence.cancellation import StoreOperation
from ..metrics import record_store_error, time_store_operation
from .windows import TimeWindow, overnight_window, rolling_window

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _window_query(upper_bound_op: str):
    # Ties ordered by broker and latency so identical queries return identical series.
    return (
        text(
            f"""
            SELECT timestamp, broker, latency_ms
            FROM order_latency
            WHERE timestamp >= :start
              AND timestamp {upper_bound_op} :end
            ORDER BY timestamp ASC, broker ASC, latency_ms ASC
            """
        )
        .bindparams(
            bindparam("start", type_=DateTime(timezone=True)),
            bindparam("end", type_=DateTime(timezone=True)),
        )
        .columns(
            timestamp=DateTime(timezone=True),
            broker=String,
            latency_ms=Float,
        )
    )


OVERNIGHT_QUERY = _window_query("<")
ROLLING_QUERY = _window_query("<=")

INSERT_QUERY = text(
    """
    INSERT INTO order_latency (timestamp, broker, latency_ms, symbol, side, price, volume)
    VALUES (:timestamp, :broker, :latency_ms, :symbol, :side, :price, :volume)
    """
).bindparams(bindparam("timestamp", type_=DateTime(timezone=True)))


class LatencyQueryEngine:
    """Lecturas por ventana temporal y escritura de mediciones.

    Args:
        engine: Engine con el pool acotado del proceso
        clock: Fuente de ``now`` para las ventanas (``StoreClock`` en producción)
    """

    def __init__(self, engine: Engine, clock: Clock) -> None:
        self._engine = engine
        self._clock = clock

    def overnight(self, operation: Optional[StoreOperation] = None) -> List[LatencyPoint]:
        """Serie de hoy (zona del reloj) entre las 00:00 y las 06:00."""
        return self._run(
            "overnight",
            lambda: self._fetch_window(OVERNIGHT_QUERY, overnight_window, operation),
            operation,
        )

    def rolling(self, operation: Optional[StoreOperation] = None) -> List[LatencyPoint]:
        """Serie de la última hora, [now - 1h, now]."""
        return self._run(
            "rolling",
            lambda: self._fetch_window(ROLLING_QUERY, rolling_window, operation),
            operation,
        )

    def insert(self, measurement: Measurement, operation: Optional[StoreOperation] = None) -> None:
        """Persiste exactamente una fila. Sin upsert ni deduplicación."""

        def work() -> None:
            with self._connection(operation, begin=True) as conn:
                conn.execute(INSERT_QUERY, measurement.to_insert_params())

        self._run("insert", work, operation)
        logger.info(
            "[INGEST] Stored latency broker=%s latency_ms=%s ts=%s",
            measurement.broker,
            measurement.latency_ms,
            measurement.timestamp.isoformat(),
        )

    def _fetch_window(
        self,
        statement,
        window_for: Callable[[datetime], TimeWindow],
        operation: Optional[StoreOperation],
    ) -> List[LatencyPoint]:
        # now se evalúa al ejecutar, no al llegar la request
        window = window_for(self._clock.now())
        with self._connection(operation, begin=False) as conn:
            rows = conn.execute(statement, window.as_utc_params()).all()

        logger.debug(
            "[QUERY] window=[%s, %s%s rows=%d",
            window.start.isoformat(),
            window.end.isoformat(),
            "]" if window.end_inclusive else ")",
            len(rows),
        )
        return [LatencyPoint.from_row(row.timestamp, row.broker, row.latency_ms) for row in rows]

    @contextmanager
    def _connection(self, operation: Optional[StoreOperation], *, begin: bool) -> Iterator[Connection]:
        context = self._engine.begin() if begin else self._engine.connect()
        with context as conn:
            if operation is not None:
                operation.bind(conn.connection.dbapi_connection)
            try:
                yield conn
            finally:
                if operation is not None:
                    operation.release()

    def _run(self, name: str, work: Callable[[], T], operation: Optional[StoreOperation]) -> T:
        with time_store_operation(name):
            try:
                return work()
            except QueryCancelled:
                logger.info("[QUERY] %s cancelled before reaching the store", name)
                raise
            except SQLAlchemyError as e:
                if operation is not None and operation.cancelled:
                    logger.info("[QUERY] %s cancelled by client disconnect", name)
                    raise QueryCancelled(name) from e
                record_store_error(name)
                logger.exception("[DB] %s failed err=%s", name, type(e).__name__)
                raise StoreError(name) from e
            except Exception as e:
                # Fallos del driver que no son errores DBAPI (p.ej. psycopg2 con NUL en un string)
                record_store_error(name)
                logger.exception("[DB] %s failed err=%s", name, type(e).__name__)
                raise StoreError(name) from e
