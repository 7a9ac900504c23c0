"""Módulo de endpoints HTTP.

Contiene los endpoints del servicio de latencias organizados por función.
"""

from .health import router as health_router
from .latency import router as latency_router
from .pages import router as pages_router

__all__ = [
    "health_router",
    "latency_router",
    "pages_router",
]
