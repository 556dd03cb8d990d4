"""Structured logging utility with JSON output."""

import logging
import json
import sys
import os
from datetime import datetime, timezone
from typing import Any, Dict

# Strings longer than this are truncated in log output
MAX_VALUE_LENGTH = 500


def _sanitize(value: Any) -> Any:
    """Replace raw image payloads with size placeholders."""
    if isinstance(value, bytes):
        return f"<bytes: {len(value)} bytes>"
    if isinstance(value, str) and value.startswith("data:"):
        return f"<data-uri: {len(value)} chars>"
    return value


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    # Fields that Python's logging adds automatically (exclude these)
    BUILTIN_ATTRS = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs',
        'pathname', 'process', 'processName', 'relativeCreated',
        'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
        'taskName', 'message',
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in self.BUILTIN_ATTRS or key.startswith('_'):
                continue

            if isinstance(value, (list, tuple)):
                value = [_sanitize(item) for item in value]
            else:
                value = _sanitize(value)

            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                str_value = str(value)
                if len(str_value) > MAX_VALUE_LENGTH:
                    str_value = str_value[:MAX_VALUE_LENGTH] + "...[truncated]"
                log_data[key] = str_value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, log_level, logging.INFO))

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

        logger.propagate = False

    return logger
