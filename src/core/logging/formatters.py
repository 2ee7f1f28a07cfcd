"""
Log formatters.

Console / file line:
    2026-01-11 12:00:00 | INFO  | news.aggregator | [a1b2c3d4] [Aggregator] 12 articles

JSON (one object per line):
    {"timestamp": "2026-01-11T12:00:00Z", "level": "INFO", "logger": "news.aggregator",
     "request_id": "a1b2c3d4", "company": "Apple", "message": "..."}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from src.core.logging.context import get_company, get_request_id

LOGGER_NAME_WIDTH = 25

# Attributes every LogRecord has; anything else came in through ``extra=``
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def _line(record: logging.LogRecord, formatter: logging.Formatter, timestamp: str, level: str, name: str) -> str:
    request_id = get_request_id()
    prefix = f"[{request_id}] " if request_id else ""
    message = record.getMessage()
    if record.exc_info:
        message = f"{message}\n{formatter.formatException(record.exc_info)}"
    return f"{timestamp} | {level} | {name} | {prefix}{message}"


class DevFormatter(logging.Formatter):
    """Console output, optionally colored by level."""

    COLORS = {
        "DEBUG": "\x1b[38;5;244m",
        "INFO": "\x1b[38;5;39m",
        "WARNING": "\x1b[38;5;208m",
        "ERROR": "\x1b[38;5;196m",
        "CRITICAL": "\x1b[38;5;196;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if len(name) > LOGGER_NAME_WIDTH:
            name = "..." + name[-(LOGGER_NAME_WIDTH - 3):]

        line = _line(
            record,
            self,
            datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname.ljust(5),
            name.ljust(LOGGER_NAME_WIDTH),
        )
        if not self.use_colors:
            return line
        return f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"


class FileFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return _line(
            record,
            self,
            datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S,%f")[:23],
            record.levelname.ljust(8),
            record.name,
        )


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the query context and any extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id
        company = get_company()
        if company:
            entry["company"] = company

        entry["source"] = {"file": record.pathname, "line": record.lineno, "function": record.funcName}

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        extras = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extras:
            entry["extra"] = extras

        return json.dumps(entry, ensure_ascii=False, default=str)
