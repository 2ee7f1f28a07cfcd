# src/news_aggregator/services/aggregator_service.py
"""
News Aggregator Service
Fans out to every news source concurrently, merges, deduplicates and
relevance-sorts the results.
"""

import math
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from src.core.exceptions import SourceUnavailableError, ValidationError
from src.news_aggregator.providers.base_provider import BaseNewsProvider
from src.news_aggregator.providers.alpha_vantage_provider import AlphaVantageNewsProvider
from src.news_aggregator.providers.newsapi_provider import NewsAPIProvider
from src.news_aggregator.schemas.article import RawArticle
from src.news_aggregator.schemas.results import AggregationResult, SourceError, SourceHealth
from src.news_aggregator.services.deduplication import DeduplicationService
from src.news_aggregator.services.keyword_matcher import KeywordMatcher
from src.utils.time_utils import utc_now
from src.utils.async_wrappers import FanOutResult, gather_with_timeout
from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin

logger = logging.getLogger(__name__)


@dataclass
class AggregatorConfig:
    """Per-source cap and per-source timeout."""

    max_articles_per_source: int = 10
    timeout_ms: int = 10000

    def validate(self) -> None:
        reasons = []
        if not 1 <= self.max_articles_per_source <= 100:
            reasons.append("max_articles_per_source must be between 1 and 100")
        if not 1000 <= self.timeout_ms <= 60000:
            reasons.append("timeout_ms must be between 1000 and 60000")
        if reasons:
            raise ValidationError("aggregator_config", reasons)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AggregatorConfig":
        return cls(
            max_articles_per_source=settings.NEWS_MAX_ARTICLES_PER_SOURCE,
            timeout_ms=settings.NEWS_TIMEOUT_MS,
        )


class NewsAggregatorService(LoggerMixin):
    """
    Main service for news aggregation.

    Pipeline:
    1. Fetch from every source concurrently, each bounded by the timeout
    2. Capture per-source failures as SourceError
    3. Deduplicate on normalized title + URL
    4. Score relevance locally
    5. Sort by relevance, then publish time
    6. Truncate to max_articles
    """

    def __init__(
        self,
        sources: Sequence[BaseNewsProvider],
        config: Optional[AggregatorConfig] = None,
        dedup_service: Optional[DeduplicationService] = None,
        keyword_matcher: Optional[KeywordMatcher] = None,
    ):
        super().__init__()
        self.config = config or AggregatorConfig()
        self.config.validate()
        self.sources: List[BaseNewsProvider] = list(sources)
        self.dedup_service = dedup_service or DeduplicationService()
        self.keyword_matcher = keyword_matcher or KeywordMatcher()

        if not self.sources:
            self.logger.warning("[Aggregator] No news sources configured. Aggregation will fail.")

    @classmethod
    def from_settings(cls, settings: Settings) -> "NewsAggregatorService":
        """Build the service with every source whose API key is configured."""
        config = AggregatorConfig.from_settings(settings)
        timeout_seconds = config.timeout_ms / 1000
        sources: List[BaseNewsProvider] = []

        try:
            sources.append(NewsAPIProvider(
                api_key=settings.NEWSAPI_KEY,
                timeout=timeout_seconds,
                base_url=settings.NEWSAPI_BASE_URL,
            ))
        except ValueError as e:
            logger.warning(f"[Aggregator] NewsAPI source not available: {e}")

        try:
            sources.append(AlphaVantageNewsProvider(
                api_key=settings.ALPHA_VANTAGE_API_KEY,
                timeout=timeout_seconds,
                base_url=settings.ALPHA_VANTAGE_BASE_URL,
            ))
        except ValueError as e:
            logger.warning(f"[Aggregator] AlphaVantage source not available: {e}")

        return cls(sources=sources, config=config)

    @property
    def source_names(self) -> List[str]:
        return [s.source_id for s in self.sources]

    def per_source_quota(self, max_articles: int) -> int:
        """ceil(max_articles / source count), capped by the per-source maximum."""
        if not self.sources:
            return 0
        return min(math.ceil(max_articles / len(self.sources)), self.config.max_articles_per_source)

    def _to_source_errors(self, outcome: FanOutResult) -> List[SourceError]:
        errors = []
        for name, exc in outcome.errors.items():
            if outcome.timed_out(name):
                code, message = "TIMEOUT", f"Request timeout for {name} after {self.config.timeout_ms}ms"
            elif isinstance(exc, SourceUnavailableError):
                code, message = exc.code, exc.message
            else:
                code, message = "CLIENT_ERROR", f"Client {name} failed: {exc}"
            self.logger.warning(f"[Aggregator] Source {name} failed ({code}): {message}")
            errors.append(SourceError(code=code, source=name, message=message))
        return errors

    def _score(self, articles: List[RawArticle], company_name: str, now: datetime) -> List[RawArticle]:
        scored = []
        for article in articles:
            local = self.keyword_matcher.basic_relevance(article, company_name, now)
            scored.append(article.model_copy(update={"relevance_score": max(article.relevance_score, local)}))
        return scored

    async def aggregate(self, company_name: str, max_articles: int = 20) -> AggregationResult:
        """
        Main aggregation method.

        Args:
            company_name: Company to search for
            max_articles: Maximum number of articles returned

        Returns:
            AggregationResult with articles, successful sources and captured errors

        Raises:
            ValidationError: empty company name or non-positive max_articles
            SourceUnavailableError: every source failed and nothing was collected
        """
        reasons = []
        if not company_name or not company_name.strip():
            reasons.append("company name is required")
        if max_articles < 1:
            reasons.append("max_articles must be at least 1")
        if reasons:
            raise ValidationError("aggregate_request", reasons)
        if not self.sources:
            raise SourceUnavailableError("NO_SOURCES", "aggregator", "No news sources configured")

        total_start = time.time()
        company_name = company_name.strip()
        quota = self.per_source_quota(max_articles)

        self.logger.info(
            f"[Aggregator] Starting aggregation: company='{company_name}', "
            f"max={max_articles}, per_source={quota}, sources={self.source_names}"
        )

        # ========================================
        # PHASE 1: FETCH FROM SOURCES
        # ========================================

        operations = {
            source.source_id: (lambda s=source: s.fetch(company_name, quota))
            for source in self.sources
        }
        outcome = await gather_with_timeout(operations, self.config.timeout_ms / 1000)

        all_articles: List[RawArticle] = []
        sources: List[str] = []
        for name in self.source_names:
            if name in outcome.results:
                all_articles.extend(outcome.results[name])
                sources.append(name)
        errors = self._to_source_errors(outcome)

        if not all_articles and errors and not sources:
            first = errors[0]
            raise SourceUnavailableError(first.code, first.source, first.message)

        # ========================================
        # PHASE 2: DEDUPLICATE
        # ========================================

        unique_articles = self.dedup_service.deduplicate(all_articles)

        # ========================================
        # PHASE 3: SCORE, SORT AND LIMIT
        # ========================================

        scored = self._score(unique_articles, company_name, utc_now())
        scored.sort(key=lambda a: (a.relevance_score, a.published_at.timestamp()), reverse=True)
        final_articles = scored[:max_articles]

        processing_time_ms = int((time.time() - total_start) * 1000)
        self.logger.info(
            f"[Aggregator] Complete: {len(final_articles)} articles "
            f"({len(all_articles)} fetched, {len(errors)} source errors) in {processing_time_ms}ms"
        )

        return AggregationResult(
            articles=final_articles,
            sources=sources,
            errors=errors,
            total_fetched=len(all_articles),
            after_dedup=len(unique_articles),
            processing_time_ms=processing_time_ms,
            source_times_ms=dict(outcome.elapsed_ms),
        )

    async def health_check(self) -> SourceHealth:
        """
        Probe every source concurrently.

        healthy: all sources respond; degraded: some; unhealthy: none.
        """
        operations = {s.source_id: s.health_check for s in self.sources}
        outcome = await gather_with_timeout(operations, self.config.timeout_ms / 1000)

        statuses: Dict[str, bool] = {name: name in outcome.results for name in self.source_names}
        healthy_count = sum(statuses.values())
        if statuses and healthy_count == len(statuses):
            status = "healthy"
        elif healthy_count > 0:
            status = "degraded"
        else:
            status = "unhealthy"

        self.logger.info(f"[Aggregator] Health: {status} ({healthy_count}/{len(statuses)})")
        return SourceHealth(
            status=status,
            sources=statuses,
            errors={name: str(exc) or type(exc).__name__ for name, exc in outcome.errors.items()},
        )

    async def close(self):
        """Cleanup resources"""
        for source in self.sources:
            await source.close()
