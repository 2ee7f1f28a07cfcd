"""
End-to-end tests for the NewsService facade on an in-memory record store,
fake news sources and the rule-based generation provider.
"""

from typing import List, Optional

import pytest

from src.content_generation.providers.rule_based_provider import RuleBasedGenerationProvider
from src.content_generation.schemas.social import SocialPlatform
from src.content_generation.services.orchestrator import GenerationOrchestrator
from src.core.exceptions import NotFoundError, SourceUnavailableError, ValidationError
from src.helpers.cache import InMemoryTTLCache
from src.news_aggregator.providers.base_provider import BaseNewsProvider
from src.news_aggregator.schemas.article import NewsSource, RawArticle
from src.news_aggregator.schemas.results import FilterCriteria
from src.news_aggregator.services.aggregator_service import NewsAggregatorService
from src.services.news_service import NewsService
from tests.conftest import make_article


class StaticSource(BaseNewsProvider):
    """Returns the same articles on every search; ``error`` breaks it."""

    def __init__(self, articles: List[RawArticle], error: Optional[Exception] = None, name: str = "newsapi"):
        super().__init__()
        self._name = name
        self.articles = articles
        self.error = error
        self.searches = 0
        self.closed = False

    @property
    def provider_name(self) -> NewsSource:
        return NewsSource.NEWSAPI

    @property
    def source_id(self) -> str:
        return self._name

    async def _search(self, company_name: str, limit: int) -> List[RawArticle]:
        self.searches += 1
        if self.error:
            raise self.error
        return list(self.articles)

    async def close(self):
        self.closed = True


APPLE_ARTICLES = [
    make_article(
        title="Apple reports record quarterly revenue",
        url="https://news.example.com/apple/revenue",
        content=(
            "Apple reported record quarterly revenue of $94.8 billion on Thursday. "
            "The company said iPhone sales grew 6 percent compared with last year. "
            "Apple shares rose 3% in after-hours trading following the results."
        ),
        hours_old=2,
    ),
    make_article(
        title="Apple announces partnership with chip supplier",
        url="https://news.example.com/apple/partnership",
        content=(
            "Apple announced a multi-year partnership with a major chip supplier. "
            "The agreement covers the production of processors for 2025 devices."
        ),
        hours_old=5,
    ),
    make_article(
        title="Apple expands retail presence in India",
        url="https://news.example.com/apple/india",
        content=(
            "Apple opened two new stores in India as part of its growth strategy. "
            "Analysts expect the market to become a key driver of future revenue."
        ),
        hours_old=8,
    ),
]


@pytest.fixture
def source():
    return StaticSource(APPLE_ARTICLES)


@pytest.fixture
def service(session_manager, source):
    return NewsService(
        session_manager=session_manager,
        aggregator=NewsAggregatorService([source]),
        orchestrator=GenerationOrchestrator.from_providers([RuleBasedGenerationProvider()]),
        cache=InMemoryTTLCache(),
    )


# ============================================================================
# NEWS SEARCH
# ============================================================================

class TestSearchCompanyNews:

    @pytest.mark.asyncio
    async def test_resolves_processes_and_stores(self, service):
        result = await service.search_company_news("Apple", limit=5)

        assert result.company.name == "Apple"
        assert result.sources == ["newsapi"]
        assert result.errors == []
        assert len(result.articles) == 3
        assert result.stats.total_fetched == 3
        assert result.stats.stored_count == 3
        assert not result.from_cache

        stored = await service.articles.find_by_company(result.company.id)
        assert {a.source_url for a in stored} == {a.source_url for a in APPLE_ARTICLES}

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, service, source):
        first = await service.search_company_news("Apple", limit=5)
        second = await service.search_company_news("Apple", limit=5)

        assert second.from_cache
        assert source.searches == 1
        assert [a.source_url for a in second.articles] == [a.source_url for a in first.articles]

    @pytest.mark.asyncio
    async def test_custom_criteria_bypass_cache_and_skip_stored_articles(self, service, source):
        await service.search_company_news("Apple", limit=5)
        again = await service.search_company_news("Apple", limit=5, criteria=FilterCriteria())

        assert source.searches == 2
        assert not again.from_cache
        assert again.stats.stored_count == 0

    @pytest.mark.asyncio
    async def test_same_company_is_reused(self, service, company_repository):
        await service.search_company_news("Apple", limit=5)
        await service.search_company_news("apple inc.", limit=3)

        assert await company_repository.count() == 1

    @pytest.mark.asyncio
    async def test_invalid_limit(self, service):
        with pytest.raises(ValidationError):
            await service.search_company_news("Apple", limit=0)

    @pytest.mark.asyncio
    async def test_every_source_failing_raises(self, session_manager):
        service = NewsService(
            session_manager=session_manager,
            aggregator=NewsAggregatorService([StaticSource([], error=RuntimeError("down"))]),
            orchestrator=GenerationOrchestrator.from_providers([RuleBasedGenerationProvider()]),
        )
        with pytest.raises(SourceUnavailableError) as exc_info:
            await service.search_company_news("Apple", limit=5)
        assert exc_info.value.source == "newsapi"

        empty = NewsService(
            session_manager=session_manager,
            aggregator=NewsAggregatorService([]),
            orchestrator=GenerationOrchestrator.from_providers([RuleBasedGenerationProvider()]),
        )
        with pytest.raises(SourceUnavailableError):
            await empty.search_company_news("Apple", limit=5)

    @pytest.mark.asyncio
    async def test_partial_results_are_not_cached(self, session_manager, source):
        broken = StaticSource([], error=RuntimeError("down"), name="alpha_vantage")
        service = NewsService(
            session_manager=session_manager,
            aggregator=NewsAggregatorService([source, broken]),
            orchestrator=GenerationOrchestrator.from_providers([RuleBasedGenerationProvider()]),
            cache=InMemoryTTLCache(),
        )

        first = await service.search_company_news("Apple", limit=6)
        second = await service.search_company_news("Apple", limit=6)

        assert [e.source for e in first.errors] == ["alpha_vantage"]
        assert len(first.articles) == 3
        assert not second.from_cache
        assert source.searches == 2
        assert broken.searches == 2


class TestRecentArticles:

    @pytest.mark.asyncio
    async def test_recent_articles_newest_first(self, service):
        await service.search_company_news("Apple", limit=5)

        recent = await service.get_recent_articles("Apple", limit=2)

        assert [a.source_url for a in recent] == [
            "https://news.example.com/apple/revenue",
            "https://news.example.com/apple/partnership",
        ]

    @pytest.mark.asyncio
    async def test_unknown_company(self, service):
        assert await service.get_recent_articles("Zyxwv Holdings") == []

    @pytest.mark.asyncio
    async def test_invalid_name(self, service):
        with pytest.raises(ValidationError):
            await service.get_recent_articles("1")


# ============================================================================
# CONTENT GENERATION
# ============================================================================

class TestGenerateArticleContent:

    @pytest.mark.asyncio
    async def test_generates_and_stores(self, service):
        await service.search_company_news("Apple", limit=5)
        article = (await service.get_recent_articles("Apple", limit=1))[0]

        result = await service.generate_article_content(
            article.id, [SocialPlatform.TWITTER, SocialPlatform.LINKEDIN]
        )

        assert result.persisted
        assert result.highlights.provider == "rule_based"
        assert result.highlights.data.highlights
        assert {p.platform for p in result.social.data.posts} == {
            SocialPlatform.TWITTER,
            SocialPlatform.LINKEDIN,
        }
        for post in result.social.data.posts:
            assert post.character_count <= post.platform.max_length

        stored_posts = await service.social_contents.find_by_article(article.id)
        assert {p.platform for p in stored_posts} == {SocialPlatform.TWITTER, SocialPlatform.LINKEDIN}

        stored_article = await service.articles.find_by_id(article.id)
        assert len(stored_article.highlights) == len(result.highlights.data.highlights)

    @pytest.mark.asyncio
    async def test_missing_article(self, service):
        with pytest.raises(NotFoundError):
            await service.generate_article_content(999, [SocialPlatform.TWITTER])

    @pytest.mark.asyncio
    async def test_platforms_required(self, service):
        with pytest.raises(ValidationError):
            await service.generate_article_content(1, [])


# ============================================================================
# COMPANIES / HEALTH / LIFECYCLE
# ============================================================================

class TestCompaniesAndHealth:

    @pytest.mark.asyncio
    async def test_search_companies(self, service):
        await service.search_company_news("Apple", limit=5)

        matches = await service.search_companies("Apple")

        assert [m.company.name for m in matches] == ["Apple"]
        # Served from cache the second time
        assert [m.company.name for m in await service.search_companies("Apple")] == ["Apple"]

    @pytest.mark.asyncio
    async def test_healthy(self, service):
        health = await service.health_check()

        assert health.status == "healthy"
        assert health.database
        assert health.providers["rule_based"].is_healthy

    @pytest.mark.asyncio
    async def test_degraded_when_sources_are_down(self, session_manager):
        service = NewsService(
            session_manager=session_manager,
            aggregator=NewsAggregatorService([StaticSource([], error=RuntimeError("down"))]),
            orchestrator=GenerationOrchestrator.from_providers([RuleBasedGenerationProvider()]),
        )

        health = await service.health_check()

        assert health.status == "degraded"
        assert health.sources.status == "unhealthy"

    @pytest.mark.asyncio
    async def test_close(self, service, source):
        await service.close()
        assert source.closed
