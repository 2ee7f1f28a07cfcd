"""
Custom Logging - class-level bridge to src.core.logging
=======================================================

Usage:
    from src.utils.logger.custom_logging import LoggerMixin

    class CompanyResolver(LoggerMixin):
        def resolve(self, text):
            self.logger.info("[Resolver] ...")
"""

import logging
from typing import Optional

from src.core.logging import get_logger as _get_category_logger
from src.core.logging.handlers import category_for_logger


class LogHandler(object):
    """Hands out loggers routed to the category their name maps to."""

    def get_logger(self, logger_name: str, category: Optional[str] = None) -> logging.Logger:
        """
        Get a logger by name.

        Args:
            logger_name: Name of the logger (usually module.ClassName)
            category: Force a specific category (app, news, generation)
        """
        if category is None:
            category = category_for_logger(logger_name)
        return _get_category_logger(logger_name, category=category)


class LoggerMixin:
    """
    Mixin class that provides a ``self.logger`` attribute.

    Example:
        class NewsAggregatorService(LoggerMixin):
            def __init__(self):
                super().__init__()
                self.logger.info("[Aggregator] ready")
    """

    def __init__(self) -> None:
        logger_name = f"{self.__class__.__module__}.{self.__class__.__name__}"
        self.logger = LogHandler().get_logger(logger_name)


def get_logger(name: str, category: Optional[str] = None) -> logging.Logger:
    """Quick function to get a category-routed logger."""
    return LogHandler().get_logger(name, category)
