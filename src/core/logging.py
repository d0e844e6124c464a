"""Logging: console configuration."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: Optional[str] = None) -> None:
    """Configure console logging for the application.

    Args:
        log_level: Optional log level override (e.g., "INFO", "DEBUG").
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        force=True,
    )


__all__ = ["LOG_FORMAT", "configure_logging"]
