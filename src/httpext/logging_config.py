"""Logging setup for the httpext service.

Request logs carry their details as ``extra`` fields. The JSON formatter lifts
them into the emitted object; the text formatter appends them as
``key=value`` pairs.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Attributes copied from a LogRecord when a request log sets them.
REQUEST_FIELDS = ("request_id", "method", "path", "status", "duration_ms", "content_range")

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _request_extras(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: getattr(record, key)
        for key in REQUEST_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message and extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_request_extras(record))
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with request extras appended as key=value."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _request_extras(record)
        if extras:
            line += " " + " ".join(f"{key}={value}" for key, value in extras.items())
        return line


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: 'text' for human-readable lines, 'json' for structured output.

    Raises:
        ValueError: If ``level`` or ``fmt`` is not recognised.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    if fmt not in ("text", "json"):
        raise ValueError(f"Unknown log format: {fmt}")

    root = logging.getLogger()
    root.setLevel(numeric_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)
