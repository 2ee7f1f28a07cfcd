# src/news_aggregator/providers/alpha_vantage_provider.py
"""
Alpha Vantage News Provider
Uses the NEWS_SENTIMENT function, which carries per-ticker relevance and
sentiment scores used for source-local ranking.
"""

import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from src.news_aggregator.providers.base_provider import BaseNewsProvider
from src.news_aggregator.schemas.article import NewsSource, RawArticle


class AlphaVantageNewsProvider(BaseNewsProvider):
    """
    Alpha Vantage implementation.

    Searches by ticker. When the ticker search yields nothing, falls back to
    the technology topic feed and keeps items that mention the company.
    """

    BASE_URL = "https://www.alphavantage.co/query"
    MAX_LIMIT = 50
    FALLBACK_TOPIC = "technology"
    FALLBACK_LIMIT = 200

    # Well-known names -> ticker. Whole-word match on the lower-cased name.
    TICKER_MAP = {
        "apple": "AAPL",
        "microsoft": "MSFT",
        "google": "GOOGL",
        "alphabet": "GOOGL",
        "amazon": "AMZN",
        "tesla": "TSLA",
        "meta": "META",
        "facebook": "META",
        "netflix": "NFLX",
        "nvidia": "NVDA",
        "accenture": "ACN",
        "wipro": "WIT",
        "tata consultancy": "TCS",
        "tcs": "TCS",
        "infosys": "INFY",
        "ibm": "IBM",
        "oracle": "ORCL",
        "salesforce": "CRM",
        "cognizant": "CTSH",
    }

    # Extra search terms for names whose coverage uses another form
    SEARCH_ALIASES = {
        "tcs": ["Tata Consultancy Services", "Tata Consultancy"],
        "tata consultancy": ["TCS"],
        "cognizant": ["CTSH"],
        "alphabet": ["Google"],
        "meta": ["Facebook"],
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            api_key: Alpha Vantage key. If not provided, reads from ALPHA_VANTAGE_API_KEY env var.
            timeout: Request timeout in seconds
        """
        super().__init__(timeout=timeout, client=client)
        self.api_key = api_key or os.getenv("ALPHA_VANTAGE_API_KEY")
        if not self.api_key:
            raise ValueError("ALPHA_VANTAGE_API_KEY is required")
        self.base_url = base_url or self.BASE_URL

    @property
    def provider_name(self) -> NewsSource:
        return NewsSource.ALPHA_VANTAGE

    @staticmethod
    def _has_word(key: str, lower_name: str) -> bool:
        return re.search(rf"\b{re.escape(key)}\b", lower_name) is not None

    def ticker_for(self, company_name: str) -> str:
        """
        Map a company name to a ticker, else the first 4 letters upper-cased.
        Empty when the name has no letters.
        """
        lower_name = company_name.lower().strip()
        for key, ticker in self.TICKER_MAP.items():
            if self._has_word(key, lower_name):
                return ticker
        return re.sub(r"[^A-Z]", "", company_name.upper())[:4]

    def search_terms(self, company_name: str) -> List[str]:
        terms = [company_name]
        lower_name = company_name.lower().strip()
        for key, aliases in self.SEARCH_ALIASES.items():
            if self._has_word(key, lower_name):
                terms.extend(aliases)
                break
        return terms

    async def _query(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        client = await self._get_client()
        response = await client.get(
            self.base_url,
            params={"function": "NEWS_SENTIMENT", "sort": "LATEST", "apikey": self.api_key, **params},
        )
        response.raise_for_status()
        data = response.json()

        # Rate limit and bad-key responses come back as 200 with a message
        if "feed" not in data:
            message = data.get("Note") or data.get("Information") or data.get("Error Message")
            if message:
                self.logger.warning(f"[AlphaVantage] API message: {message}")
            return []
        return data.get("feed") or []

    async def _search(self, company_name: str, limit: int) -> List[RawArticle]:
        ticker = self.ticker_for(company_name)
        feed = []
        if ticker:
            feed = await self._query({"tickers": ticker, "limit": min(limit, self.MAX_LIMIT)})

        if not feed:
            self.logger.info(
                f"[AlphaVantage] No feed for ticker {ticker}, trying topics={self.FALLBACK_TOPIC}"
            )
            feed = await self._query({"topics": self.FALLBACK_TOPIC, "limit": self.FALLBACK_LIMIT})

        articles = []
        for item in feed:
            if not self._is_relevant(item, company_name):
                continue
            article = self._convert_item(item, company_name, ticker)
            if article:
                articles.append(article)

        articles.sort(key=lambda a: a.relevance_score, reverse=True)
        return articles[:limit]

    def _is_relevant(self, item: Dict[str, Any], company_name: str) -> bool:
        text = f"{item.get('title', '')} {item.get('summary', '')}".lower()
        return any(term.lower() in text for term in self.search_terms(company_name))

    def _convert_item(self, item: Dict[str, Any], company_name: str, ticker: str) -> Optional[RawArticle]:
        """
        Convert an Alpha Vantage feed item to RawArticle.

        Feed item format:
        {
            "title": "...",
            "url": "https://...",
            "time_published": "20240115T103000",
            "summary": "...",
            "source": "Benzinga",
            "overall_sentiment_score": 0.21,
            "ticker_sentiment": [{"ticker": "AAPL", "relevance_score": "0.82", ...}]
        }
        """
        title = (item.get("title") or "").strip()
        url = (item.get("url") or "").strip()
        source = item.get("source") or ""
        if not title or not url or not source:
            return None

        try:
            published_at = datetime.strptime(item["time_published"], "%Y%m%dT%H%M%S").replace(tzinfo=timezone.utc)
        except (KeyError, TypeError, ValueError):
            return None

        return RawArticle(
            title=title,
            content=item.get("summary") or "",
            source_url=url,
            source_name=source,
            published_at=published_at,
            relevance_score=self._relevance_score(item, company_name, ticker),
            provider=self.provider_name.value,
        )

    def _relevance_score(self, item: Dict[str, Any], company_name: str, ticker: str) -> float:
        """
        Sentiment-weighted relevance (0-100):
        - |overall sentiment| x 10
        - ticker relevance x 20 for the company's ticker
        - 5 per occurrence of each name word in title + summary
        """
        score = 0.0

        try:
            score += abs(float(item.get("overall_sentiment_score") or 0)) * 10
        except (TypeError, ValueError):
            pass

        for entry in item.get("ticker_sentiment") or []:
            if (entry.get("ticker") or "").upper() != ticker.upper():
                continue
            try:
                score += float(entry.get("relevance_score") or 0) * 20
            except (TypeError, ValueError):
                continue

        text = f"{item.get('title', '')} {item.get('summary', '')}".lower()
        for term in company_name.lower().split():
            score += text.count(term) * 5

        return round(min(score, 100.0), 2)
