"""Validation layer - Validación de mediciones entrantes."""

from .measurement_validator import (
    Accepted,
    MeasurementValidator,
    Rejected,
    ValidationResult,
    parse_timestamp,
)

__all__ = ["Accepted", "MeasurementValidator", "Rejected", "ValidationResult", "parse_timestamp"]
