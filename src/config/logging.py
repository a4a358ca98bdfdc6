"""Logging configuration for the service and its command-line tools."""

from __future__ import annotations

import logging
import os


def configure_logging(level: str | None = None) -> None:
    """Configure Python logging for the process.

    Bound query values are only ever logged at DEBUG.
    """

    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # Pool maintenance chatter is noisy at INFO.
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)
