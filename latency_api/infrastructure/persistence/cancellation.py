"""Cancelación de operaciones en curso contra el store.

Cuando el cliente HTTP abandona la request, el endpoint llama a
``StoreOperation.cancel()`` desde el event loop. Si la sentencia ya está
ejecutándose en un worker thread se cancela a nivel DBAPI (``cancel()`` en
psycopg2, ``interrupt()`` en sqlite3) y la conexión vuelve al pool.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from ...errors import QueryCancelled

logger = logging.getLogger(__name__)

_CANCEL_METHODS = ("cancel", "interrupt")


class StoreOperation:
    """Handle for one in-flight store call, shared between loop and worker thread."""

    def __init__(self, name: str = "store") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._dbapi_connection: Optional[Any] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, dbapi_connection: Any) -> None:
        """Registra la conexión DBAPI que va a ejecutar la sentencia."""
        with self._lock:
            if self._cancelled:
                raise QueryCancelled(self.name)
            self._dbapi_connection = dbapi_connection

    def release(self) -> None:
        with self._lock:
            self._dbapi_connection = None

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            conn = self._dbapi_connection

        if conn is None:
            return

        for method_name in _CANCEL_METHODS:
            method = getattr(conn, method_name, None)
            if callable(method):
                try:
                    method()
                    logger.info("[DB] Cancelled in-flight %s statement", self.name)
                except Exception:
                    logger.warning("[DB] Failed to cancel %s statement", self.name, exc_info=True)
                return

        logger.warning("[DB] DBAPI connection %s does not support cancellation", type(conn).__name__)
