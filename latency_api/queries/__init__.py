"""Queries - lecturas por ventana temporal y escritura de mediciones."""

from .latency_queries import LatencyQueryEngine
from .windows import TimeWindow, overnight_window, rolling_window

__all__ = ["LatencyQueryEngine", "TimeWindow", "overnight_window", "rolling_window"]
