"""
Company -> NewsAPI Source ────────┐
           Alpha Vantage Source ──┴→ Dedupe → Score → Sort → Filter → Articles
"""
from src.news_aggregator.schemas.article import NewsSource, RawArticle, ScoredArticle
from src.news_aggregator.schemas.results import (
    AggregationResult,
    FilterCriteria,
    ProcessingResult,
    SourceError,
    SourceHealth,
)

from src.news_aggregator.services.aggregator_service import AggregatorConfig, NewsAggregatorService
from src.news_aggregator.services.deduplication import DeduplicationService
from src.news_aggregator.services.keyword_matcher import KeywordMatcher
from src.news_aggregator.services.processing_service import NewsProcessingService
from src.news_aggregator.services.highlight_extractor import SimpleHighlightExtractor

from src.news_aggregator.providers.base_provider import BaseNewsProvider
from src.news_aggregator.providers.newsapi_provider import NewsAPIProvider
from src.news_aggregator.providers.alpha_vantage_provider import AlphaVantageNewsProvider

__version__ = "1.0.0"
__all__ = [
    # Schemas
    "NewsSource",
    "RawArticle",
    "ScoredArticle",
    "AggregationResult",
    "FilterCriteria",
    "ProcessingResult",
    "SourceError",
    "SourceHealth",
    # Services
    "AggregatorConfig",
    "NewsAggregatorService",
    "DeduplicationService",
    "KeywordMatcher",
    "NewsProcessingService",
    "SimpleHighlightExtractor",
    # Providers
    "BaseNewsProvider",
    "NewsAPIProvider",
    "AlphaVantageNewsProvider",
]
