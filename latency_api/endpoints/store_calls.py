"""Ejecución de llamadas al store con cancelación por desconexión del cliente.

La llamada bloqueante corre en el threadpool. Mientras tanto el event loop
consulta ``request.is_disconnected()``; si el cliente se fue, se cancela la
sentencia en curso y se espera a que el worker libere la conexión.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from ..infrastructure.persistence.cancellation import StoreOperation

logger = logging.getLogger(__name__)

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.25


async def run_store_call(
    request: Request,
    name: str,
    func: Callable[..., T],
    *args: Any,
    poll_interval: float = DISCONNECT_POLL_SECONDS,
) -> T:
    """Run ``func(*args, operation=...)`` in the threadpool, cancelling it on disconnect."""
    operation = StoreOperation(name)
    task = asyncio.ensure_future(run_in_threadpool(func, *args, operation=operation))

    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("[HTTP] Client disconnected during %s, cancelling", name)
                operation.cancel()
                return await task
    except asyncio.CancelledError:
        operation.cancel()
        raise
