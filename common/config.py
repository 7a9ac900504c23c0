from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str

    app_port: int

    # Bounded pool: acquisition never waits longer than pool_timeout_seconds.
    pool_size: int = 10
    max_overflow: int = 0
    pool_timeout_seconds: float = 10.0
    statement_timeout_ms: int = 30000

    log_level: str = "INFO"


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("LATENCY_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    pool_size = _env_int("DB_POOL_SIZE", "10")
    pool_timeout = _env_float("DB_POOL_TIMEOUT_SECONDS", "10")
    if pool_size < 1:
        raise ValueError(f"DB_POOL_SIZE must be >= 1, got {pool_size}")
    if pool_timeout <= 0:
        raise ValueError(f"DB_POOL_TIMEOUT_SECONDS must be > 0, got {pool_timeout}")

    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=_env_int("DB_PORT", "5432"),
        db_user=os.getenv("POSTGRES_USER", "postgres"),
        db_password=os.getenv("POSTGRES_PASSWORD", ""),
        db_name=os.getenv("POSTGRES_DB", "postgres"),
        app_port=_env_int("APP_PORT", "3000"),
        pool_size=pool_size,
        max_overflow=_env_int("DB_MAX_OVERFLOW", "0"),
        pool_timeout_seconds=pool_timeout,
        statement_timeout_ms=_env_int("DB_STATEMENT_TIMEOUT_MS", "30000"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
