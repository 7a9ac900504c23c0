"""Persistence - esquema del store y cancelación de operaciones."""

from .cancellation import StoreOperation
from .postgres_setup import ensure_postgres_schema

__all__ = ["StoreOperation", "ensure_postgres_schema"]
