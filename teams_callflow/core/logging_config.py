"""Logging setup shared by the CLI and library callers."""

from __future__ import annotations

import logging
import sys
from typing import Optional

LOGGER_NAME = "teams_callflow"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the package logger with a console handler and an optional file handler."""
    log_level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Clear any existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not open log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)

    return logger


__all__ = ["setup_logging", "LOGGER_NAME", "LOG_FORMAT"]
