"""Structured JSON logging configuration.

Configures Python logging to emit one JSON object per line with the fields
timestamp, level, logger, message and request_id. The per-request access
record adds method, path, target_url, status, duration_ms, cookie_count,
challenged and mode.

SECURITY: Never logs the bypass token, authorization or cookie values.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

# Patterns that should be redacted from log output
_SENSITIVE_PATTERNS = re.compile(
    r"(bypass.token|authorization|cookie|secret|password|token)"
    r"[\s]*[=:]\s*\S+",
    re.IGNORECASE,
)

# Access-record attributes copied when present; string values are redacted
_RECORD_FIELDS: tuple[str, ...] = (
    "method",
    "path",
    "target_url",
    "status",
    "duration_ms",
    "cookie_count",
    "challenged",
    "mode",
)


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields.

    Each entry contains at minimum: timestamp, level, logger, message and
    request_id. Access-record fields are attached via the ``extra`` dict on
    log calls.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }

        for name in _RECORD_FIELDS:
            if hasattr(record, name):
                value = getattr(record, name)
                entry[name] = self._sanitize(value) if isinstance(value, str) else value

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(
                self.formatException(record.exc_info)
            )

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Remove sensitive values from log text."""
        return _SENSITIVE_PATTERNS.sub("[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
