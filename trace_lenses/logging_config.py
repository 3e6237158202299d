"""Logging configuration for trace lens entry points."""

import logging
import logging.config
import os
from typing import Optional


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Configure console logging for the application.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to TRACE_LENSES_LOG_LEVEL env var or WARNING.
    """
    if log_level is None:
        log_level = os.getenv("TRACE_LENSES_LOG_LEVEL", "WARNING")

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": log_level.upper(),
            "handlers": ["console"],
        },
    })
