"""
Structured logging for the SwiftGate backend.
Every record is emitted as a single JSON line on stderr.
"""

import json
import logging
from datetime import datetime, timezone

LOGGER_NAME = "swiftgate"


class JSONFormatter(logging.Formatter):
    """Render log records as JSON objects."""

    def format(self, record):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "account": getattr(record, "account", None),
            "route": getattr(record, "route", None),
        }
        entry = {k: v for k, v in entry.items() if v is not None}

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a JSON handler to the package logger.

    Calling it again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger(LOGGER_NAME)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    return logger


def get_logger(name: str = "") -> logging.Logger:
    """Get a child of the package logger, e.g. ``get_logger("pipeline")``."""
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
