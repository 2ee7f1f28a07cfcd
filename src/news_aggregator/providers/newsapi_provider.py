# src/news_aggregator/providers/newsapi_provider.py
"""
NewsAPI Provider
Searches https://newsapi.org/v2/everything for company coverage.
"""

import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from src.core.exceptions import SourceUnavailableError
from src.news_aggregator.providers.base_provider import BaseNewsProvider
from src.news_aggregator.schemas.article import NewsSource, RawArticle
from src.news_aggregator.services.keyword_matcher import KeywordMatcher


class NewsAPIProvider(BaseNewsProvider):
    """
    NewsAPI implementation.

    Broad publisher coverage, sorted by publish time. Relevance is scored
    locally from company-term frequency since the API returns none.
    """

    BASE_URL = "https://newsapi.org/v2"
    MAX_PAGE_SIZE = 100
    REMOVED_MARKER = "[Removed]"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            api_key: NewsAPI key. If not provided, reads from NEWSAPI_KEY env var.
            timeout: Request timeout in seconds
        """
        super().__init__(timeout=timeout, client=client)
        self.api_key = api_key or os.getenv("NEWSAPI_KEY")
        if not self.api_key:
            raise ValueError("NEWSAPI_KEY is required")
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.matcher = KeywordMatcher()

    @property
    def provider_name(self) -> NewsSource:
        return NewsSource.NEWSAPI

    async def _search(self, company_name: str, limit: int) -> List[RawArticle]:
        params = {
            "q": f'"{company_name}"',
            "sortBy": "publishedAt",
            "language": "en",
            "pageSize": min(limit, self.MAX_PAGE_SIZE),
        }
        client = await self._get_client()
        response = await client.get(
            f"{self.base_url}/everything",
            params=params,
            headers={"X-Api-Key": self.api_key},
        )
        response.raise_for_status()

        data = response.json()
        if data.get("status") != "ok":
            raise SourceUnavailableError(
                "API_ERROR", self.source_id, f"NewsAPI returned status: {data.get('status')} ({data.get('message', '')})"
            )

        articles = []
        for item in data.get("articles") or []:
            article = self._convert_article(item, company_name)
            if article:
                articles.append(article)
        return articles

    def _convert_article(self, item: Dict[str, Any], company_name: str) -> Optional[RawArticle]:
        """
        Convert a NewsAPI article to RawArticle.

        NewsAPI article format:
        {
            "source": {"id": "reuters", "name": "Reuters"},
            "title": "...",
            "description": "...",
            "url": "https://...",
            "publishedAt": "2024-01-15T10:00:00Z",
            "content": "..."
        }
        """
        title = (item.get("title") or "").strip()
        url = (item.get("url") or "").strip()
        if not title or not url or title == self.REMOVED_MARKER:
            return None

        try:
            published_at = datetime.fromisoformat(item["publishedAt"].replace("Z", "+00:00"))
        except (KeyError, AttributeError, ValueError):
            self.logger.debug(f"[NewsAPI] Skipping article without valid publishedAt: {url}")
            return None

        content = item.get("description") or item.get("content") or ""
        source_name = (item.get("source") or {}).get("name") or ""

        return RawArticle(
            title=title,
            content=content,
            source_url=url,
            source_name=source_name,
            published_at=published_at,
            relevance_score=self.matcher.term_frequency_score(company_name, title, content),
            provider=self.provider_name.value,
        )
