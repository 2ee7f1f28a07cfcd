"""
Tests for GenerationOrchestrator sequential fallback and quality gating
"""

from unittest.mock import MagicMock

import pytest

from src.content_generation.providers.base_provider import GenerationConfig
from src.content_generation.providers.rule_based_provider import RuleBasedGenerationProvider
from src.content_generation.schemas.generation import QualityReport
from src.content_generation.schemas.highlights import Highlight, HighlightCategory, HighlightRequest
from src.content_generation.schemas.social import SocialContentRequest, SocialPlatform
from src.content_generation.services.orchestrator import GenerationOrchestrator
from src.content_generation.services.quality_validator import ContentQualityValidator
from src.core.exceptions import AllProvidersFailedError, ProviderError
from src.utils.config import Settings
from tests.conftest import StubGenerationProvider, make_highlights


# ============================================================================
# TEST FIXTURES
# ============================================================================

@pytest.fixture
def highlight_request():
    return HighlightRequest(
        title="Apple reports record revenue",
        content="Apple revenue rose 8 percent to 90 billion dollars this quarter.",
        company_name="Apple",
    )


def report(score: float) -> QualityReport:
    return QualityReport(score=score, is_acceptable=score >= 60)


def scripted_validator(*scores: float) -> MagicMock:
    validator = MagicMock(spec=ContentQualityValidator)
    validator.validate_highlights.side_effect = [report(s) for s in scores]
    return validator


def secondary_highlights():
    return [Highlight(text="Apple expanded its buyback by $110 billion", importance=5, category=HighlightCategory.STRATEGIC)]


# ============================================================================
# FALLBACK
# ============================================================================

class TestFallback:

    @pytest.mark.asyncio
    async def test_acceptable_primary_skips_secondary(self, highlight_request):
        primary = StubGenerationProvider("openai")
        secondary = StubGenerationProvider("anthropic")
        orchestrator = GenerationOrchestrator.from_providers(
            [primary, secondary], validator=scripted_validator(85)
        )

        response = await orchestrator.extract_highlights(highlight_request)

        assert response.provider == "openai"
        assert response.is_acceptable
        assert response.fallback_attempt is None
        assert secondary.calls == 0

    @pytest.mark.asyncio
    async def test_low_quality_primary_falls_back(self, highlight_request):
        primary = StubGenerationProvider("openai")
        secondary = StubGenerationProvider("anthropic", highlights=secondary_highlights())
        orchestrator = GenerationOrchestrator.from_providers(
            [primary, secondary], validator=scripted_validator(40, 85)
        )

        response = await orchestrator.extract_highlights(highlight_request)

        assert response.provider == "anthropic"
        assert response.data.highlights == secondary_highlights()
        assert response.final_quality_score == 85
        assert response.is_acceptable
        assert response.primary_attempt.provider == "openai"
        assert response.primary_attempt.success
        assert response.primary_attempt.quality_score == 40
        assert response.fallback_attempt.provider == "anthropic"
        assert response.fallback_attempt.success
        assert [a.provider for a in response.attempts] == ["openai", "anthropic"]

    @pytest.mark.asyncio
    async def test_failed_primary_falls_back_and_is_marked(self, highlight_request):
        primary = StubGenerationProvider("openai", error=ProviderError("TIMEOUT", "openai", "timed out"))
        secondary = StubGenerationProvider("anthropic")
        orchestrator = GenerationOrchestrator.from_providers([primary, secondary])

        response = await orchestrator.extract_highlights(highlight_request)

        assert response.provider == "anthropic"
        assert not response.primary_attempt.success
        assert response.primary_attempt.error_code == "TIMEOUT"
        assert not orchestrator.health_checker.is_available("openai")

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_wrapped(self, highlight_request):
        primary = StubGenerationProvider("openai", error=RuntimeError("socket closed"))
        secondary = StubGenerationProvider("anthropic")
        orchestrator = GenerationOrchestrator.from_providers([primary, secondary])

        response = await orchestrator.extract_highlights(highlight_request)

        assert response.primary_attempt.error_code == "FALLBACK_SERVICE_ERROR"
        assert response.primary_attempt.error == "socket closed"

    @pytest.mark.asyncio
    async def test_best_so_far_when_nothing_acceptable(self, highlight_request):
        primary = StubGenerationProvider("openai")
        secondary = StubGenerationProvider("anthropic", highlights=secondary_highlights())
        orchestrator = GenerationOrchestrator.from_providers(
            [primary, secondary], validator=scripted_validator(50, 30)
        )

        response = await orchestrator.extract_highlights(highlight_request)

        assert response.provider == "openai"
        assert response.final_quality_score == 50
        assert not response.is_acceptable
        assert response.data.highlights == make_highlights()

    @pytest.mark.asyncio
    async def test_all_failing_raises_with_last_error(self, highlight_request):
        primary = StubGenerationProvider("openai", error=ProviderError("TIMEOUT", "openai", "timed out"))
        secondary = StubGenerationProvider("anthropic", error=ProviderError("API_ERROR", "anthropic", "overloaded"))
        orchestrator = GenerationOrchestrator.from_providers([primary, secondary])

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await orchestrator.extract_highlights(highlight_request)

        assert exc_info.value.provider == "anthropic"
        assert exc_info.value.code == "API_ERROR"
        assert exc_info.value.attempted == ["openai", "anthropic"]

    @pytest.mark.asyncio
    async def test_attempts_capped(self, highlight_request):
        failing = ProviderError("API_ERROR", "x", "down")
        third = StubGenerationProvider("third")
        orchestrator = GenerationOrchestrator.from_providers(
            [StubGenerationProvider("first", error=failing), StubGenerationProvider("second", error=failing), third],
            config=GenerationConfig(max_provider_attempts=2),
        )

        with pytest.raises(AllProvidersFailedError):
            await orchestrator.extract_highlights(highlight_request)
        assert third.calls == 0

    @pytest.mark.asyncio
    async def test_no_providers(self, highlight_request):
        orchestrator = GenerationOrchestrator.from_providers([])

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await orchestrator.extract_highlights(highlight_request)
        assert exc_info.value.code == "UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_unhealthy_provider_tried_after_healthy(self, highlight_request):
        down = StubGenerationProvider("openai", healthy=False)
        up = StubGenerationProvider("anthropic")
        orchestrator = GenerationOrchestrator.from_providers([down, up])

        response = await orchestrator.extract_highlights(highlight_request)

        assert response.provider == "anthropic"
        assert down.calls == 0


# ============================================================================
# RULE-BASED LAST RESORT
# ============================================================================

class TestLastResort:

    @pytest.mark.asyncio
    async def test_rule_based_used_when_ai_provider_fails(self, highlight_request):
        failing = StubGenerationProvider("openai", error=ProviderError("API_ERROR", "openai", "down"))
        orchestrator = GenerationOrchestrator.from_providers([RuleBasedGenerationProvider(), failing])

        response = await orchestrator.extract_highlights(highlight_request)

        assert response.primary_attempt.provider == "openai"
        assert response.provider == "rule_based"
        assert response.data.highlights

    @pytest.mark.asyncio
    async def test_social_content_end_to_end(self):
        orchestrator = GenerationOrchestrator.from_providers([RuleBasedGenerationProvider()])
        request = SocialContentRequest(
            highlights=make_highlights(),
            company_name="Apple",
            platforms=[SocialPlatform.LINKEDIN, SocialPlatform.TWITTER],
        )

        response = await orchestrator.generate_social_content(request)

        assert response.is_acceptable
        assert response.quality_report.score >= 60
        assert {p.platform for p in response.data.posts} == set(request.platforms)


# ============================================================================
# CONSTRUCTION / LIFECYCLE
# ============================================================================

class TestConstruction:

    def test_from_settings_skips_unconfigured_providers(self):
        settings = Settings(OPENAI_API_KEY="", ANTHROPIC_API_KEY="", ENABLE_RULE_BASED_PROVIDER=True)
        orchestrator = GenerationOrchestrator.from_settings(settings)

        assert orchestrator.health_checker.provider_ids == ["rule_based"]

    def test_from_settings_registers_configured_providers(self):
        settings = Settings(OPENAI_API_KEY="sk-test", ANTHROPIC_API_KEY="sk-ant-test", ENABLE_RULE_BASED_PROVIDER=False)
        orchestrator = GenerationOrchestrator.from_settings(settings)

        assert orchestrator.health_checker.provider_ids == ["openai", "anthropic"]

    @pytest.mark.asyncio
    async def test_close_closes_every_provider(self):
        providers = [StubGenerationProvider("openai"), StubGenerationProvider("anthropic")]
        orchestrator = GenerationOrchestrator.from_providers(providers)

        await orchestrator.close()

        assert all(p.closed for p in providers)
