"""Logging setup for the loan tracker service."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Top-level packages whose loggers follow LOG_LEVEL
SERVICE_LOGGERS = ("components", "restapi", "scripts")

# Passed with ``extra=`` and copied into JSON output
CONTEXT_FIELDS = ("loan_id", "payment_id", "member_id")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with any loan context attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                entry[field] = getattr(record, field)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """
    Route log records to stdout.

    Args:
        level: Level name for the service loggers; unknown names mean INFO
        format_type: "json" for structured output, anything else for text
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in SERVICE_LOGGERS:
        logging.getLogger(name).setLevel(log_level)


def get_logger(name: str) -> logging.Logger:
    """Logger for a service module, usually called with ``__name__``."""
    return logging.getLogger(name)
