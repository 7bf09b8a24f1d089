# redoc/logging_config.py
"""
Stderr-only logging configuration.

stdout carries command output (questions, document paths), so every log
record goes to stderr, either as JSON lines or in a short human format.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

HUMAN_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Chatty client libraries log every request at INFO
_NOISY_LOGGERS = ["httpx", "httpcore", "openai"]


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON line."""
        log_data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def level_for_verbosity(verbosity: str) -> int:
    """Map output.verbosity onto a logging level."""
    return {
        "quiet": logging.ERROR,
        "normal": logging.WARNING,
        "verbose": logging.INFO,
    }.get(verbosity, logging.WARNING)


def configure_logging(level: int = logging.WARNING, json_output: bool = False) -> None:
    """
    Route all logging to stderr.

    Clears existing root handlers so repeated calls (tests, nested CLI
    invocations) never duplicate output.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(HUMAN_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(level, logging.WARNING))
