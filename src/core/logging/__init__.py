"""
Logging System
==============

Category-aware logging for the news pipeline:
- Category log files (app, news, generation, error)
- Daily rotation with configurable retention
- Request ID tracing via contextvars
- JSON format for production, colored text for development

Usage:
------
```python
from src.core.logging import setup_logging, get_logger, RequestContext

setup_logging()

logger = get_logger("news")        # Logs to logs/news/
logger = get_logger("generation")  # Logs to logs/generation/

with RequestContext():
    logger.info("Processing query")  # Includes [a1b2c3d4] in log
```

Directory Structure:
-------------------
logs/
├── app/          # Everything not routed elsewhere
├── news/         # Sources, aggregation, processing, company resolution
├── generation/   # Providers, health checks, orchestration, validation
└── error/        # ERROR + CRITICAL from every category
"""

from src.core.logging.config import setup_logging, get_logger, shutdown_logging
from src.core.logging.context import (
    RequestContext,
    bind_company,
    get_company,
    get_request_id,
    set_request_id,
    clear_request_id,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "RequestContext",
    "bind_company",
    "get_company",
    "get_request_id",
    "set_request_id",
    "clear_request_id",
]
