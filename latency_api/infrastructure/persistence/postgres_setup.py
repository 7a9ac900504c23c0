"""PostgreSQL schema setup.

Applies the SQL files under ``migrations/`` in name order. Every statement is
``IF NOT EXISTS``, so it is safe to call on each startup.
"""

from __future__ import annotations

import logging
import pathlib
from typing import List

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = pathlib.Path(__file__).parent / "migrations"


def _split_statements(sql_content: str) -> List[str]:
    lines = [line for line in sql_content.splitlines() if not line.strip().startswith("--")]
    return [s.strip() for s in "\n".join(lines).split(";") if s.strip()]


def ensure_postgres_schema(engine: Engine) -> None:
    """Ensure the order_latency table and its index exist.

    Args:
        engine: Store engine
    """
    logger.info("[PostgreSQL] Ensuring schema exists")

    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not sql_files:
        logger.warning("[PostgreSQL] No migration files in %s - skipping schema creation", MIGRATIONS_DIR)
        return

    try:
        with engine.begin() as conn:
            for sql_file in sql_files:
                for statement in _split_statements(sql_file.read_text()):
                    conn.execute(text(statement))

        logger.info("[PostgreSQL] Schema creation completed successfully")

    except Exception as e:
        logger.exception("[PostgreSQL] Schema creation failed: %s", e)
        raise
