# src/content_generation/providers/base_provider.py
"""
Base Generation Provider
Abstract interface every text-generation backend implements.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from src.content_generation.schemas.generation import ProviderHealth, ProviderStatus
from src.content_generation.schemas.highlights import HighlightRequest, HighlightResult
from src.content_generation.schemas.social import SocialContentRequest, SocialContentResult
from src.core.exceptions import ProviderError
from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin


@dataclass
class GenerationConfig:
    """Model call settings shared by the AI-backed providers."""
    max_tokens: int = 1000
    temperature: float = 0.3
    timeout_ms: int = 30000
    quality_threshold_highlights: float = 60.0
    quality_threshold_social: float = 60.0
    health_check_interval_seconds: int = 300
    unhealthy_cooldown_seconds: int = 300
    # Primary plus one fallback hop
    max_provider_attempts: int = 2

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationConfig":
        return cls(
            max_tokens=settings.AI_MAX_TOKENS,
            temperature=settings.AI_TEMPERATURE,
            timeout_ms=settings.AI_TIMEOUT_MS,
            quality_threshold_highlights=settings.QUALITY_THRESHOLD_HIGHLIGHTS,
            quality_threshold_social=settings.QUALITY_THRESHOLD_SOCIAL,
            health_check_interval_seconds=settings.AI_HEALTH_CHECK_INTERVAL_SECONDS,
            unhealthy_cooldown_seconds=settings.AI_UNHEALTHY_COOLDOWN_SECONDS,
            max_provider_attempts=settings.AI_MAX_PROVIDER_ATTEMPTS,
        )


class GenerationProvider(LoggerMixin, ABC):
    """
    Abstract base class for generation providers.

    Methods raise ProviderError (with a machine-readable code and this
    provider's id) on failure. check_health never raises.
    """

    def __init__(self, config: Optional[GenerationConfig] = None):
        super().__init__()
        self.config = config or GenerationConfig()

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Stable identifier, e.g. 'openai'"""
        pass

    @property
    def model_name(self) -> str:
        return self.provider_id

    @property
    def is_last_resort(self) -> bool:
        """Last-resort providers are ordered after every other provider."""
        return False

    @abstractmethod
    async def extract_highlights(self, request: HighlightRequest) -> HighlightResult:
        pass

    @abstractmethod
    async def generate_social_content(self, request: SocialContentRequest) -> SocialContentResult:
        pass

    async def ping(self) -> None:
        """Cheapest possible call proving the backend answers. Raises on failure."""
        return None

    async def check_health(self) -> ProviderHealth:
        start = time.perf_counter()
        try:
            await self.ping()
            return ProviderHealth(
                provider=self.provider_id,
                status=ProviderStatus.HEALTHY,
                response_time_ms=int((time.perf_counter() - start) * 1000),
            )
        except Exception as e:
            self.logger.warning(f"[{self.provider_id}] Health check failed: {e}")
            return ProviderHealth(
                provider=self.provider_id,
                status=ProviderStatus.UNHEALTHY,
                response_time_ms=int((time.perf_counter() - start) * 1000),
                error=str(e) or type(e).__name__,
            )

    def error(self, code: str, message: str, original: Optional[BaseException] = None) -> ProviderError:
        return ProviderError(code, self.provider_id, message, original)

    async def close(self):
        """Release SDK clients. No-op by default."""
        return None
