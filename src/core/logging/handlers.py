"""
Log Handlers
============

Daily rotating file handlers, one directory per category:

logs/
├── app/
├── news/
├── generation/
└── error/

File naming: {category}.log, rotated at midnight with a date suffix.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from src.core.logging.formatters import FileFormatter, JsonFormatter


CATEGORIES = ["app", "news", "generation", "error"]

# Keyword in logger name -> category. First hit wins.
CATEGORY_KEYWORDS = {
    "news": ["news_aggregator", "company", "news", "source", "aggregat", "processing"],
    "generation": ["content_generation", "generation", "provider", "orchestrat", "quality", "health"],
}


def category_for_logger(logger_name: str) -> str:
    """Determine the category for a logger name."""
    name_lower = logger_name.lower()
    for prefix in ("news.", "generation.", "app."):
        if name_lower.startswith(prefix):
            return prefix[:-1]
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(kw in name_lower for kw in keywords):
            return category
    return "app"


def ensure_log_directories(log_dir: str) -> None:
    base_dir = Path(log_dir)
    for category in CATEGORIES:
        (base_dir / category).mkdir(parents=True, exist_ok=True)


class CategoryFilter(logging.Filter):
    """Passes only records whose logger maps to the given category."""

    def __init__(self, category: str):
        super().__init__()
        self.category = category

    def filter(self, record: logging.LogRecord) -> bool:
        return category_for_logger(record.name) == self.category


def _make_file_handler(
    log_dir: str,
    category: str,
    retention_days: int,
    use_json: bool,
) -> TimedRotatingFileHandler:
    path = Path(log_dir) / category / f"{category}.log"
    handler = TimedRotatingFileHandler(
        filename=str(path),
        when="midnight",
        backupCount=retention_days,
        encoding="utf-8",
        delay=True,
    )
    handler.setFormatter(JsonFormatter() if use_json else FileFormatter())
    return handler


def create_category_handler(
    log_dir: str,
    category: str,
    retention_days: int = 15,
    use_json: bool = False,
    level: int = logging.DEBUG,
) -> logging.Handler:
    """Handler writing only the records routed to ``category``."""
    handler = _make_file_handler(log_dir, category, retention_days, use_json)
    handler.setLevel(level)
    handler.addFilter(CategoryFilter(category))
    return handler


def create_error_handler(
    log_dir: str,
    retention_days: int = 15,
    use_json: bool = False,
) -> logging.Handler:
    """Handler mirroring ERROR and CRITICAL from every category."""
    handler = _make_file_handler(log_dir, "error", retention_days, use_json)
    handler.setLevel(logging.ERROR)
    return handler
