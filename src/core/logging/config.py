"""
Logging Configuration
=====================

Environment Variables:
---------------------
- LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- LOG_FORMAT: "json" for production, "text" for development (default)
- LOG_DIR: Base directory for log files (default: ./logs)
- LOG_RETENTION_DAYS: Days to keep rotated files (default: 15)
- LOG_CONSOLE: "true" to enable console output (default: true)
- LOG_FILES: "false" to disable file output (default: true)
"""

import os
import sys
import logging
from typing import Dict, Optional

from src.core.logging.formatters import DevFormatter, JsonFormatter
from src.core.logging.handlers import (
    CATEGORIES,
    ensure_log_directories,
    create_category_handler,
    create_error_handler,
)


_configured_loggers: Dict[str, logging.Logger] = {}
_logging_initialized = False

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "asyncio",
    "openai",
    "anthropic",
    "redis",
]


def get_config() -> dict:
    """Get logging configuration from environment."""
    return {
        "level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "format": os.environ.get("LOG_FORMAT", "text").lower(),
        "log_dir": os.environ.get("LOG_DIR", "logs"),
        "retention_days": int(os.environ.get("LOG_RETENTION_DAYS", "15")),
        "console_enabled": os.environ.get("LOG_CONSOLE", "true").lower() == "true",
        "files_enabled": os.environ.get("LOG_FILES", "true").lower() == "true",
        "is_production": os.environ.get("ENV", "development").lower() == "production",
    }


def setup_logging(
    level: Optional[str] = None,
    use_json: Optional[bool] = None,
    console: Optional[bool] = None,
    files: Optional[bool] = None,
) -> None:
    """
    Initialize the logging system. Call once at application startup.

    Args:
        level: Override log level
        use_json: Override format (True for JSON, False for text)
        console: Override console output
        files: Override category file output
    """
    global _logging_initialized

    if _logging_initialized:
        return

    config = get_config()
    if level:
        config["level"] = level.upper()
    if use_json is not None:
        config["format"] = "json" if use_json else "text"
    if console is not None:
        config["console_enabled"] = console
    if files is not None:
        config["files_enabled"] = files

    log_level = getattr(logging, config["level"], logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter
    root_logger.handlers.clear()

    use_json_format = config["format"] == "json" or config["is_production"]

    if config["console_enabled"]:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(JsonFormatter() if use_json_format else DevFormatter(use_colors=True))
        root_logger.addHandler(console_handler)

    if config["files_enabled"]:
        ensure_log_directories(config["log_dir"])
        for category in CATEGORIES:
            if category == "error":
                continue
            root_logger.addHandler(
                create_category_handler(
                    config["log_dir"],
                    category,
                    retention_days=config["retention_days"],
                    use_json=use_json_format,
                    level=log_level,
                )
            )
        root_logger.addHandler(
            create_error_handler(
                config["log_dir"],
                retention_days=config["retention_days"],
                use_json=use_json_format,
            )
        )

    _configure_third_party_loggers(log_level)
    _logging_initialized = True

    root_logger.info(
        f"Logging initialized: level={config['level']}, "
        f"format={'json' if use_json_format else 'text'}, "
        f"dir={config['log_dir'] if config['files_enabled'] else '-'}"
    )


def _configure_third_party_loggers(level: int) -> None:
    """Raise third-party library loggers to WARNING to reduce noise."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(
    name: Optional[str] = None,
    category: Optional[str] = None,
) -> logging.Logger:
    """
    Get a logger routed to a category file.

    Routing is by logger name, so ``category`` only prefixes the name when
    the name would not route there by itself.

    Examples:
        get_logger("news.aggregator")  → logs/news/
        get_logger("orchestrator", category="generation")  → logs/generation/
        get_logger()  → logs/app/
    """
    if name is None:
        name = "app"

    if category and category not in name.lower():
        name = f"{category}.{name}"

    if name in _configured_loggers:
        return _configured_loggers[name]

    logger = logging.getLogger(name)
    _configured_loggers[name] = logger
    return logger


def shutdown_logging() -> None:
    """Flush and close all handlers."""
    global _logging_initialized

    logging.shutdown()
    _configured_loggers.clear()
    _logging_initialized = False
