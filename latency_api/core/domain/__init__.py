"""Domain layer - entidades del servicio."""

from .measurement import LatencyPoint, Measurement

__all__ = ["LatencyPoint", "Measurement"]
