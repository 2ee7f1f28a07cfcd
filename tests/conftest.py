"""
Shared fixtures: an in-memory record store, article and highlight builders,
and a scriptable generation provider.
"""

import asyncio
from datetime import timedelta
from typing import List, Optional

import pytest

from src.content_generation.providers.base_provider import GenerationProvider
from src.content_generation.schemas.highlights import (
    Highlight,
    HighlightCategory,
    HighlightRequest,
    HighlightResult,
)
from src.content_generation.schemas.social import SocialContentRequest, SocialContentResult
from src.database.repository.company_repository import CompanyRepository
from src.database.repository.news_article_repository import NewsArticleRepository
from src.database.repository.social_content_repository import SocialContentRepository
from src.database.session_manager import SessionManager
from src.news_aggregator.schemas.article import RawArticle
from src.utils.time_utils import utc_now


# ============================================================================
# RECORD STORE
# ============================================================================

@pytest.fixture
def session_manager():
    """Fresh in-memory SQLite database per test"""
    manager = SessionManager("sqlite://")
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def company_repository(session_manager):
    return CompanyRepository(session_manager)


@pytest.fixture
def article_repository(session_manager):
    return NewsArticleRepository(session_manager)


@pytest.fixture
def social_repository(session_manager):
    return SocialContentRepository(session_manager)


# ============================================================================
# BUILDERS
# ============================================================================

def make_article(
    title: str,
    url: str,
    content: str = "",
    source_name: str = "Reuters",
    hours_old: float = 2.0,
    relevance_score: float = 0.0,
    provider: Optional[str] = None,
) -> RawArticle:
    return RawArticle(
        title=title,
        content=content,
        source_url=url,
        source_name=source_name,
        published_at=utc_now() - timedelta(hours=hours_old),
        relevance_score=relevance_score,
        provider=provider,
    )


def make_highlights() -> List[Highlight]:
    """Three well-formed highlights about Apple."""
    return [
        Highlight(
            text="Apple reported quarterly revenue of $94.8 billion, up 5 percent year over year.",
            importance=5,
            category=HighlightCategory.FINANCIAL,
        ),
        Highlight(
            text="Apple announced a new partnership with a major chip supplier for 2025 devices.",
            importance=4,
            category=HighlightCategory.STRATEGIC,
        ),
        Highlight(
            text="Apple shares rose 3% in after-hours trading following the results.",
            importance=3,
            category=HighlightCategory.MARKET,
        ),
    ]


# ============================================================================
# GENERATION PROVIDER STUB
# ============================================================================

class StubGenerationProvider(GenerationProvider):
    """
    Scriptable provider: returns fixed results or raises ``error``.
    ``healthy=False`` makes the health probe fail; ``ping_delay`` slows it.
    """

    def __init__(
        self,
        provider_id: str,
        highlights: Optional[List[Highlight]] = None,
        social: Optional[SocialContentResult] = None,
        error: Optional[Exception] = None,
        healthy: bool = True,
        last_resort: bool = False,
        ping_delay: float = 0.0,
    ):
        super().__init__()
        self._provider_id = provider_id
        self.highlights = highlights if highlights is not None else make_highlights()
        self.social = social or SocialContentResult()
        self.error = error
        self.healthy = healthy
        self.last_resort = last_resort
        self.ping_delay = ping_delay
        self.calls = 0
        self.pings = 0
        self.closed = False

    @property
    def provider_id(self) -> str:
        return self._provider_id

    @property
    def is_last_resort(self) -> bool:
        return self.last_resort

    async def extract_highlights(self, request: HighlightRequest) -> HighlightResult:
        self.calls += 1
        if self.error:
            raise self.error
        return HighlightResult(highlights=list(self.highlights), model=self._provider_id)

    async def generate_social_content(self, request: SocialContentRequest) -> SocialContentResult:
        self.calls += 1
        if self.error:
            raise self.error
        return self.social

    async def ping(self) -> None:
        self.pings += 1
        if self.ping_delay:
            await asyncio.sleep(self.ping_delay)
        if not self.healthy:
            raise ConnectionError(f"{self._provider_id} is down")

    async def close(self):
        self.closed = True
