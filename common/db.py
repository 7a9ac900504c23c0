from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine

from .config import Settings, get_settings


logger = logging.getLogger(__name__)


def build_sqlalchemy_url(settings: Settings) -> URL:
    # URL.create escapes credentials, so passwords with special characters are safe.
    return URL.create(
        "postgresql+psycopg2",
        username=settings.db_user,
        password=settings.db_password or None,
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
    )


def create_store_engine(settings: Settings | None = None) -> Engine:
    """Create the process-wide engine with a bounded connection pool."""
    settings = settings or get_settings()
    url = build_sqlalchemy_url(settings)

    # Connection parameters without the password
    logger.info(
        "[DB] Creating PostgreSQL engine host=%s port=%s db=%s user=%s pool_size=%s pool_timeout=%ss",
        settings.db_host,
        settings.db_port,
        settings.db_name,
        settings.db_user,
        settings.pool_size,
        settings.pool_timeout_seconds,
    )

    return create_engine(
        url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout_seconds,
        pool_pre_ping=True,
        pool_recycle=300,
        connect_args={
            "connect_timeout": max(1, int(settings.pool_timeout_seconds)),
            "options": f"-c statement_timeout={settings.statement_timeout_ms}",
        },
        future=True,
    )


def check_connection(engine: Engine) -> bool:
    """SELECT 1 against the store; True if it answered."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("[DB] Connection test FAILED")
        return False
