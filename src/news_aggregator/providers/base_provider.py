from abc import ABC, abstractmethod
from typing import List, Optional
import time

import httpx

from src.core.exceptions import SourceUnavailableError
from src.news_aggregator.schemas.article import NewsSource, RawArticle
from src.utils.logger.custom_logging import LoggerMixin


class BaseNewsProvider(LoggerMixin, ABC):
    """
    Abstract base class for news sources.

    Each source must:
    1. Search its API for articles about a company
    2. Convert results to RawArticle with a source-local relevance score
    3. Report failures from ``fetch`` as SourceUnavailableError;
       ``search`` is the fail-closed variant returning []
    """

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        super().__init__()
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = client

    @property
    @abstractmethod
    def provider_name(self) -> NewsSource:
        """Return the source identifier"""
        pass

    @property
    def source_id(self) -> str:
        """Name used for errors, stats and logs."""
        return self.provider_name.value

    @abstractmethod
    async def _search(self, company_name: str, limit: int) -> List[RawArticle]:
        """Source-specific search. May raise; ``fetch`` maps errors to SourceUnavailableError."""
        pass

    async def fetch(self, company_name: str, limit: int = 10) -> List[RawArticle]:
        """
        Search for articles about ``company_name``, reporting failures.

        Raises:
            SourceUnavailableError: ``HTTP_<status>``, ``NETWORK_ERROR``,
                ``PARSE_ERROR`` or a source-specific code
        """
        self._log_fetch_start(company_name, limit)
        start_time = time.time()
        try:
            articles = await self._search(company_name, limit)
        except SourceUnavailableError:
            raise
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise SourceUnavailableError(
                f"HTTP_{status}", self.source_id, f"{self.source_id} returned HTTP {status}"
            ) from e
        except httpx.RequestError as e:
            raise SourceUnavailableError(
                "NETWORK_ERROR", self.source_id, f"Network error calling {self.source_id}: {e}"
            ) from e
        except (ValueError, KeyError, TypeError) as e:
            # response.json() raises a ValueError subclass on bad bodies
            raise SourceUnavailableError(
                "PARSE_ERROR", self.source_id, f"Unreadable response from {self.source_id}: {e}"
            ) from e

        articles = articles[:limit]
        self._log_fetch_complete(company_name, len(articles), int((time.time() - start_time) * 1000))
        return articles

    async def search(self, company_name: str, limit: int = 10) -> List[RawArticle]:
        """
        Fail-closed variant of ``fetch``: any failure is logged and returns [].
        """
        try:
            return await self.fetch(company_name, limit)
        except SourceUnavailableError as e:
            self._log_fetch_error(company_name, f"{e.code}: {e.message}")
            return []
        except Exception as e:
            self._log_fetch_error(company_name, f"{type(e).__name__}: {e}")
            return []

    async def health_check(self) -> bool:
        """Minimal request against the live API. Raises on failure."""
        await self._search("Apple", 1)
        return True

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _log_fetch_start(self, company_name: str, limit: int):
        self.logger.info(f"[{self.provider_name.value}] Searching '{company_name}' limit={limit}")

    def _log_fetch_complete(self, company_name: str, count: int, time_ms: int):
        self.logger.info(f"[{self.provider_name.value}] Fetched {count} articles for '{company_name}' in {time_ms}ms")

    def _log_fetch_error(self, company_name: str, error: str):
        self.logger.error(f"[{self.provider_name.value}] Error searching '{company_name}': {error}")
