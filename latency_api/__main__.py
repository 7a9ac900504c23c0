"""Entry point: ``python -m latency_api``."""

from __future__ import annotations

import logging

import uvicorn

from common.config import get_settings


def main() -> None:
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    uvicorn.run(
        "latency_api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
