"""Errores del servicio de latencias.

Cada excepción lleva el status HTTP y el mensaje público que ve el cliente.
El handler registrado en ``main.create_app`` los serializa como ``{"error": ...}``.
"""

from __future__ import annotations

from typing import Optional


class LatencyServiceError(Exception):
    """Base for every error the HTTP layer knows how to render."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.public_message)
        if message is not None:
            self.public_message = message


class MeasurementValidationError(LatencyServiceError):
    """Client-caused rejection; the reason is returned verbatim."""

    status_code = 400

    def __init__(self, reason: str, *, field: Optional[str] = None) -> None:
        super().__init__(reason)
        self.field = field


class MalformedRequestError(MeasurementValidationError):
    """Body could not be decoded into a JSON object."""


class StoreError(LatencyServiceError):
    """Infrastructure failure. Detail goes to the log, never to the client."""

    status_code = 500
    public_message = "Database error"

    def __init__(self, operation: str) -> None:
        super().__init__()
        self.operation = operation


class QueryCancelled(StoreError):
    """The client went away and the in-flight statement was cancelled."""

    status_code = 499
    public_message = "Client closed request"
