# src/services/news_service.py
"""
News Service
Facade over company resolution, aggregation, processing, persistence and
content generation. Every collaborator is constructed explicitly and
injected; ``from_settings`` wires the production set.
"""

import logging
import time
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from src.company.resolver import CompanyResolver
from src.company.schemas import CompanyMatch
from src.content_generation.schemas.generation import GenerationResponse, ProviderHealth
from src.content_generation.schemas.highlights import HighlightRequest, HighlightResult
from src.content_generation.schemas.social import (
    SocialContentRequest,
    SocialContentResult,
    SocialPlatform,
    Tone,
)
from src.content_generation.services.orchestrator import GenerationOrchestrator
from src.core.exceptions import NotFoundError, ValidationError
from src.core.logging import RequestContext, bind_company, setup_logging
from src.database.models.record_schemas import (
    CompanySchema,
    NewsArticleSchema,
    SocialContentCreate,
)
from src.database.repository.company_repository import CompanyRepository
from src.database.repository.news_article_repository import NewsArticleRepository
from src.database.repository.social_content_repository import SocialContentRepository
from src.database.session_manager import SessionManager
from src.helpers.cache import CacheBackend, CacheKeyGenerator, InMemoryTTLCache, create_cache
from src.news_aggregator.schemas.article import ScoredArticle
from src.news_aggregator.schemas.results import FilterCriteria, SourceError, SourceHealth
from src.news_aggregator.services.aggregator_service import NewsAggregatorService
from src.news_aggregator.services.processing_service import NewsProcessingService
from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin

logger = logging.getLogger(__name__)

SEARCH_CACHE_TTL = 60
HEALTH_CACHE_TTL = 30


# ============================================================================
# RESULTS
# ============================================================================

class ProcessingStats(BaseModel):
    total_fetched: int = 0
    after_dedup: int = 0
    original_count: int = 0
    filtered_count: int = 0
    duplicates_removed: int = 0
    rejections: Dict[str, int] = Field(default_factory=dict)
    stored_count: int = 0


class CompanyNewsResult(BaseModel):
    company: CompanySchema
    articles: List[ScoredArticle] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    errors: List[SourceError] = Field(default_factory=list)
    stats: ProcessingStats = Field(default_factory=ProcessingStats)
    processing_time_ms: int = 0
    from_cache: bool = False


class ArticleContentResult(BaseModel):
    article_id: int
    highlights: GenerationResponse[HighlightResult]
    social: GenerationResponse[SocialContentResult]
    persisted: bool = False


class ServiceHealth(BaseModel):
    status: str = Field(..., description="healthy / degraded / unhealthy")
    sources: SourceHealth
    providers: Dict[str, ProviderHealth] = Field(default_factory=dict)
    database: bool = False


# ============================================================================
# FACADE
# ============================================================================

class NewsService(LoggerMixin):
    """
    Query flow:
    1. Resolve (or create) the canonical company
    2. Serve from cache when possible
    3. Aggregate from every source
    4. Process: score, dedupe, filter, sort
    5. Persist new articles (best effort)
    6. Cache the result (best effort)
    """

    def __init__(
        self,
        session_manager: SessionManager,
        aggregator: NewsAggregatorService,
        orchestrator: GenerationOrchestrator,
        processor: Optional[NewsProcessingService] = None,
        cache: Optional[CacheBackend] = None,
        news_cache_ttl: int = 900,
    ):
        super().__init__()
        self.session_manager = session_manager
        self.companies = CompanyRepository(session_manager)
        self.articles = NewsArticleRepository(session_manager)
        self.social_contents = SocialContentRepository(session_manager)
        self.resolver = CompanyResolver(self.companies)
        self.aggregator = aggregator
        self.processor = processor or NewsProcessingService()
        self.orchestrator = orchestrator
        self.cache = cache or InMemoryTTLCache()
        self.news_cache_ttl = news_cache_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "NewsService":
        setup_logging(level=settings.LOG_LEVEL, use_json=settings.LOG_FORMAT == "json")
        session_manager = SessionManager(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        session_manager.create_tables()
        return cls(
            session_manager=session_manager,
            aggregator=NewsAggregatorService.from_settings(settings),
            orchestrator=GenerationOrchestrator.from_settings(settings),
            cache=create_cache(settings),
            news_cache_ttl=settings.CACHE_TTL_NEWS,
        )

    # ========================================================================
    # NEWS
    # ========================================================================

    async def search_company_news(
        self,
        company_name: str,
        limit: int = 10,
        ticker: Optional[str] = None,
        criteria: Optional[FilterCriteria] = None,
    ) -> CompanyNewsResult:
        """
        Resolve the company and return its processed news.

        Complete results for default criteria are cached per (company, limit).

        Raises:
            ValidationError: invalid company name or limit
            SourceUnavailableError: every source failed and nothing was collected
        """
        if limit < 1:
            raise ValidationError("limit", ["limit must be at least 1"])

        async with RequestContext():
            start = time.time()
            company = await self.resolver.find_or_create(company_name, ticker)
            bind_company(company.name)

            cache_key = CacheKeyGenerator.news(company.name, limit)
            if criteria is None:
                cached = await self.cache.get(cache_key)
                if cached is not None:
                    self.logger.info(f"[NewsService] Cache hit for '{company.name}' (limit={limit})")
                    result = CompanyNewsResult.model_validate(cached)
                    return result.model_copy(update={"from_cache": True})

            # ===== PHASE 1: AGGREGATE =====
            aggregation = await self.aggregator.aggregate(company.name, limit)

            # ===== PHASE 2: PROCESS =====
            processing = self.processor.process_and_filter_news(aggregation.articles, company.name, criteria)

            # ===== PHASE 3: PERSIST =====
            stored_count = await self._store_articles(processing.articles, company.id)

            result = CompanyNewsResult(
                company=company,
                articles=processing.articles,
                sources=aggregation.sources,
                errors=aggregation.errors,
                stats=ProcessingStats(
                    total_fetched=aggregation.total_fetched,
                    after_dedup=aggregation.after_dedup,
                    original_count=processing.original_count,
                    filtered_count=processing.filtered_count,
                    duplicates_removed=processing.duplicates_removed,
                    rejections=processing.rejections,
                    stored_count=stored_count,
                ),
                processing_time_ms=int((time.time() - start) * 1000),
            )

            # Partial results (some source failed) are not cached
            if criteria is None and not aggregation.errors:
                await self.cache.set(cache_key, result.model_dump(mode="json"), self.news_cache_ttl)
            elif aggregation.errors:
                self.logger.info(f"[NewsService] Not caching partial result for '{company.name}'")

            self.logger.info(
                f"[NewsService] '{company.name}': {result.stats.filtered_count} articles, "
                f"{stored_count} new, {len(result.errors)} source errors in {result.processing_time_ms}ms"
            )
            return result

    async def _store_articles(self, articles: Sequence[ScoredArticle], company_id: int) -> int:
        """Side effect allowed to fail: errors are logged and count as nothing stored."""
        try:
            records = self.processor.to_news_articles(articles, company_id)
            created = await self.articles.create_many_skip_existing(records)
            return len(created)
        except SQLAlchemyError as e:
            self.logger.warning(f"[NewsService] Storing articles failed: {e}")
            return 0

    async def get_recent_articles(self, company_name: str, limit: int = 20) -> List[NewsArticleSchema]:
        """
        Stored articles of the resolved company, newest first. Unknown
        companies yield an empty list.
        """
        result = await self.resolver.resolve(company_name)
        if not result.is_valid:
            raise ValidationError("company_name", result.validation_errors)

        best = result.best_match
        if best is None or best.confidence <= self.resolver.AUTO_MATCH_CONFIDENCE:
            return []
        return await self.articles.find_by_company(best.company.id, limit=limit)

    # ========================================================================
    # CONTENT GENERATION
    # ========================================================================

    async def generate_article_content(
        self,
        article_id: int,
        platforms: Sequence[SocialPlatform],
        tone: Tone = Tone.PROFESSIONAL,
    ) -> ArticleContentResult:
        """
        Extract highlights for a stored article, then generate posts for the
        requested platforms. Highlights and posts are stored best-effort.

        Raises:
            NotFoundError: no article with that id
            ValidationError: no platforms requested, or no highlights could be extracted
            AllProvidersFailedError: no provider produced a result
        """
        if not platforms:
            raise ValidationError("platforms", ["at least one platform is required"])

        async with RequestContext():
            article = await self.articles.find_by_id(article_id)
            if article is None:
                raise NotFoundError("article", article_id)

            company = await self.companies.find_by_id(article.company_id)
            company_name = company.name if company else ""
            bind_company(company_name or None)

            highlights = await self.orchestrator.extract_highlights(HighlightRequest(
                title=article.title,
                content=article.content,
                source_name=article.source_name,
                company_name=company_name,
            ))
            if not highlights.data.highlights:
                raise ValidationError("highlights", [f"no highlights could be extracted from article {article_id}"])

            social = await self.orchestrator.generate_social_content(SocialContentRequest(
                highlights=highlights.data.highlights,
                company_name=company_name,
                platforms=list(platforms),
                tone=Tone(tone),
            ))

            persisted = await self._store_generated_content(article_id, highlights.data, social.data)
            return ArticleContentResult(
                article_id=article_id,
                highlights=highlights,
                social=social,
                persisted=persisted,
            )

    async def _store_generated_content(
        self,
        article_id: int,
        highlights: HighlightResult,
        social: SocialContentResult,
    ) -> bool:
        try:
            await self.articles.update_highlights(article_id, highlights.highlights)
            for post in social.posts:
                await self.social_contents.upsert(SocialContentCreate(
                    article_id=article_id,
                    platform=post.platform,
                    content=post.content,
                    hashtags=post.hashtags,
                    character_count=post.character_count,
                ))
            return True
        except SQLAlchemyError as e:
            self.logger.warning(f"[NewsService] Storing generated content for article {article_id} failed: {e}")
            return False

    # ========================================================================
    # COMPANIES
    # ========================================================================

    async def search_companies(self, query: str) -> List[CompanyMatch]:
        """Known companies matching ``query`` with confidence above 0.5."""
        cache_key = CacheKeyGenerator.company_search(query)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return [CompanyMatch.model_validate(m) for m in cached]

        matches = await self.resolver.search(query)
        await self.cache.set(cache_key, [m.model_dump(mode="json") for m in matches], SEARCH_CACHE_TTL)
        return matches

    # ========================================================================
    # HEALTH / LIFECYCLE
    # ========================================================================

    async def health_check(self) -> ServiceHealth:
        """
        healthy: every source and at least one provider up
        unhealthy: no source and no provider up
        degraded: anything in between
        """
        cache_key = CacheKeyGenerator.health("service")
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return ServiceHealth.model_validate(cached)

        sources = await self.aggregator.health_check()
        providers = await self.orchestrator.health_checker.get_health()
        providers_up = any(h.is_healthy for h in providers.values())
        database = self.session_manager.test_connection()

        if sources.status == "healthy" and providers_up and database:
            status = "healthy"
        elif sources.status == "unhealthy" and not providers_up:
            status = "unhealthy"
        else:
            status = "degraded"

        health = ServiceHealth(status=status, sources=sources, providers=providers, database=database)
        await self.cache.set(cache_key, health.model_dump(mode="json"), HEALTH_CACHE_TTL)
        self.logger.info(f"[NewsService] Health: {status}")
        return health

    async def close(self):
        """Cleanup resources"""
        await self.aggregator.close()
        await self.orchestrator.close()
        await self.cache.close()
        self.session_manager.close()
