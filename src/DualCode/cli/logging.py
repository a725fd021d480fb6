"""Logging utilities for the DualCode CLI."""

from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "DualCode.cli"


def configure_logging(log_path: Optional[Path], log_format: str, verbose: bool) -> logging.Logger:
    """Configure console logging and, when ``log_path`` is given, a file handler.

    The console handler writes to stderr so command output on stdout stays
    machine readable.
    """

    if log_format not in {"text", "json"}:
        raise ValueError("log_format must be 'text' or 'json'")
    level = "DEBUG" if verbose else "WARNING"
    formatter = "json" if log_format == "json" else "text"
    handlers: dict[str, dict[str, object]] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": sys.stderr,
            "formatter": formatter,
            "level": level,
        }
    }
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": str(log_path),
            "mode": "a",
            "encoding": "utf-8",
            "formatter": formatter,
            "level": "DEBUG" if verbose else "INFO",
        }

    formatters = {
        "text": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "loggers": {
                "DualCode": {
                    "handlers": list(handlers.keys()),
                    "level": "DEBUG" if verbose else "INFO",
                    "propagate": False,
                }
            },
        }
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.debug("Logging configured", extra={"log_path": str(log_path), "log_format": log_format})
    return logger
