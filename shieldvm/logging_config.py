"""
Structured JSON logging configuration.

Each log line is one JSON object: timestamp, level, logger, message and
execution_id, plus the program and function being executed when the line
is emitted inside an execution.  duration_ms is added when attached via
``extra``.  A logged ExecutionError contributes its type, function and
register as fields of its own instead of leaving them only in the text.
"""

import json
import logging
from datetime import datetime, timezone

from shieldvm.config import settings
from shieldvm.errors import ExecutionError
from shieldvm.execution.context import get_execution_id, get_execution_target


class JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "execution_id": get_execution_id(),
        }

        target = get_execution_target()
        if target is not None:
            log_entry["program"], log_entry["function"] = target

        if hasattr(record, "duration_ms"):
            log_entry["duration_ms"] = record.duration_ms

        if record.exc_info and record.exc_info[1]:
            exc = record.exc_info[1]
            log_entry["exception"] = self.formatException(record.exc_info)
            if isinstance(exc, ExecutionError):
                log_entry["error"] = {
                    "type": type(exc).__name__,
                    "function_name": exc.function_name,
                    "register": exc.register,
                }

        return json.dumps(log_entry, default=str)


def configure_json_logging(log_level: str = "INFO"):
    """Install a single JSON handler on the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def configure_logging(log_level: str | None = None, json_output: bool | None = None):
    """Configure JSON or plain-text logging for the process (defaults from settings)."""
    log_level = log_level or settings.log_level
    json_output = settings.log_json if json_output is None else json_output
    if json_output:
        configure_json_logging(log_level)
        return
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
