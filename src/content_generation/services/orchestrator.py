# src/content_generation/services/orchestrator.py
"""
Generation Orchestrator
Tries providers one at a time in health order, quality-gates each result
and falls back when a provider fails or scores below the threshold.

    SELECT_ORDER -> TRY_PRIMARY -> (ACCEPT | TRY_SECONDARY) -> (ACCEPT | FAIL)
"""

import logging
import time
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Type, TypeVar

from src.content_generation.providers.anthropic_provider import AnthropicGenerationProvider
from src.content_generation.providers.base_provider import GenerationConfig, GenerationProvider
from src.content_generation.providers.openai_provider import OpenAIGenerationProvider
from src.content_generation.providers.rule_based_provider import RuleBasedGenerationProvider
from src.content_generation.schemas.generation import GenerationAttempt, GenerationResponse, QualityReport
from src.content_generation.schemas.highlights import HighlightRequest, HighlightResult
from src.content_generation.schemas.social import SocialContentRequest, SocialContentResult
from src.content_generation.services.health_checker import ProviderHealthChecker
from src.content_generation.services.quality_validator import ContentQualityValidator
from src.core.exceptions import AllProvidersFailedError, ProviderError
from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin

T = TypeVar("T")

logger = logging.getLogger(__name__)


class GenerationOrchestrator(LoggerMixin):
    """
    Sequential provider fallback with quality gating.

    Never calls two providers at once for one request. Returns the first
    acceptable result, else the best-scoring one; raises only when no
    attempted provider produced anything.
    """

    def __init__(
        self,
        health_checker: ProviderHealthChecker,
        validator: Optional[ContentQualityValidator] = None,
        config: Optional[GenerationConfig] = None,
    ):
        super().__init__()
        self.config = config or GenerationConfig()
        self.health_checker = health_checker
        self.validator = validator or ContentQualityValidator(
            highlight_threshold=self.config.quality_threshold_highlights,
            social_threshold=self.config.quality_threshold_social,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationOrchestrator":
        """Register every provider whose credentials are configured, in preference order."""
        config = GenerationConfig.from_settings(settings)
        providers: List[GenerationProvider] = []

        try:
            providers.append(OpenAIGenerationProvider(
                api_key=settings.OPENAI_API_KEY,
                model=settings.OPENAI_MODEL,
                config=config,
            ))
        except ValueError as e:
            logger.warning(f"[Orchestrator] OpenAI provider not available: {e}")

        try:
            providers.append(AnthropicGenerationProvider(
                api_key=settings.ANTHROPIC_API_KEY,
                model=settings.ANTHROPIC_MODEL,
                config=config,
            ))
        except ValueError as e:
            logger.warning(f"[Orchestrator] Anthropic provider not available: {e}")

        if settings.ENABLE_RULE_BASED_PROVIDER:
            providers.append(RuleBasedGenerationProvider(config=config))

        return cls.from_providers(providers, config=config)

    @classmethod
    def from_providers(
        cls,
        providers: Sequence[GenerationProvider],
        config: Optional[GenerationConfig] = None,
        validator: Optional[ContentQualityValidator] = None,
    ) -> "GenerationOrchestrator":
        config = config or GenerationConfig()
        checker = ProviderHealthChecker(
            providers,
            check_interval_seconds=config.health_check_interval_seconds,
            unhealthy_cooldown_seconds=config.unhealthy_cooldown_seconds,
            timeout_seconds=config.timeout_seconds,
        )
        return cls(checker, validator=validator, config=config)

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    async def extract_highlights(self, request: HighlightRequest) -> GenerationResponse[HighlightResult]:
        return await self._run(
            "extract_highlights",
            GenerationResponse[HighlightResult],
            lambda provider: provider.extract_highlights(request),
            lambda result: self.validator.validate_highlights(result.highlights, request.company_name),
        )

    async def generate_social_content(self, request: SocialContentRequest) -> GenerationResponse[SocialContentResult]:
        return await self._run(
            "generate_social_content",
            GenerationResponse[SocialContentResult],
            lambda provider: provider.generate_social_content(request),
            lambda result: self.validator.validate_social_content(result, request.platforms, request.company_name),
        )

    # ========================================================================
    # FALLBACK LOOP
    # ========================================================================

    async def _select_order(self) -> List[GenerationProvider]:
        await self.health_checker.get_health()
        order = self.health_checker.provider_order()
        return order[: self.config.max_provider_attempts]

    async def _run(
        self,
        operation: str,
        response_model: Type[GenerationResponse],
        call: Callable[[GenerationProvider], Awaitable[T]],
        score: Callable[[T], QualityReport],
    ) -> GenerationResponse[T]:
        start = time.perf_counter()

        # ===== SELECT_ORDER =====
        order = await self._select_order()
        if not order:
            raise AllProvidersFailedError(
                ProviderError("UNAVAILABLE", "orchestrator", "No generation providers configured"),
                [],
            )
        self.logger.info(f"[Orchestrator] {operation}: order={[p.provider_id for p in order]}")

        attempts: List[GenerationAttempt] = []
        best: Optional[Tuple[T, QualityReport, str]] = None
        last_error: Optional[ProviderError] = None

        # ===== TRY_PRIMARY / TRY_SECONDARY =====
        for provider in order:
            attempt_start = time.perf_counter()
            try:
                result = await call(provider)
            except Exception as e:
                error = e if isinstance(e, ProviderError) else ProviderError(
                    "FALLBACK_SERVICE_ERROR", provider.provider_id, str(e) or type(e).__name__, e
                )
                attempts.append(GenerationAttempt(
                    provider=provider.provider_id,
                    success=False,
                    duration_ms=int((time.perf_counter() - attempt_start) * 1000),
                    error=error.message,
                    error_code=error.code,
                ))
                last_error = error
                self.health_checker.mark_unhealthy(provider.provider_id, error.message)
                self.logger.warning(f"[Orchestrator] {provider.provider_id} failed ({error.code}): {error.message}")
                continue

            report = score(result)
            attempts.append(GenerationAttempt(
                provider=provider.provider_id,
                success=True,
                quality_score=report.score,
                duration_ms=int((time.perf_counter() - attempt_start) * 1000),
            ))
            self.logger.info(
                f"[Orchestrator] {provider.provider_id} scored {report.score} "
                f"(acceptable={report.is_acceptable})"
            )

            if report.is_acceptable:
                best = (result, report, provider.provider_id)
                break
            if best is None or report.score > best[1].score:
                best = (result, report, provider.provider_id)

        # ===== ACCEPT | FAIL =====
        total_ms = int((time.perf_counter() - start) * 1000)
        if best is None:
            raise AllProvidersFailedError(last_error, [a.provider for a in attempts])

        data, report, provider_id = best
        if not report.is_acceptable:
            self.logger.warning(
                f"[Orchestrator] {operation}: no result reached the threshold, "
                f"returning best ({provider_id}, {report.score})"
            )

        return response_model(
            data=data,
            primary_attempt=attempts[0],
            fallback_attempt=attempts[1] if len(attempts) > 1 else None,
            attempts=attempts,
            final_quality_score=report.score,
            total_processing_time_ms=total_ms,
            quality_report=report,
            is_acceptable=report.is_acceptable,
            provider=provider_id,
        )

    async def close(self):
        """Cleanup resources"""
        for provider in self.health_checker.providers:
            await provider.close()
