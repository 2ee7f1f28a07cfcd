"""
Tests for ProviderHealthChecker caching, cooldown and ordering
"""

import pytest

from src.content_generation.schemas.generation import ProviderStatus
from src.content_generation.services.health_checker import ProviderHealthChecker
from tests.conftest import StubGenerationProvider


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def make_checker(providers, clock, **kwargs):
    kwargs.setdefault("check_interval_seconds", 300)
    kwargs.setdefault("unhealthy_cooldown_seconds", 60)
    return ProviderHealthChecker(providers, clock=clock, **kwargs)


# ============================================================================
# HEALTH CACHE
# ============================================================================

class TestHealthCache:

    @pytest.mark.asyncio
    async def test_results_cached_within_interval(self, clock):
        provider = StubGenerationProvider("openai")
        checker = make_checker([provider], clock)

        first = await checker.get_health()
        clock.advance(100)
        second = await checker.get_health()

        assert provider.pings == 1
        assert first["openai"].status == ProviderStatus.HEALTHY
        assert second["openai"].status == ProviderStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_refreshed_after_interval_or_when_forced(self, clock):
        provider = StubGenerationProvider("openai")
        checker = make_checker([provider], clock)

        await checker.get_health()
        clock.advance(301)
        await checker.get_health()
        await checker.get_health(force=True)

        assert provider.pings == 3

    @pytest.mark.asyncio
    async def test_reset_forces_recheck(self, clock):
        provider = StubGenerationProvider("openai")
        checker = make_checker([provider], clock)

        await checker.get_health()
        checker.reset()
        await checker.get_health()

        assert provider.pings == 2

    @pytest.mark.asyncio
    async def test_failed_probe_marks_unhealthy(self, clock):
        checker = make_checker([StubGenerationProvider("openai", healthy=False)], clock)

        health = await checker.get_health()

        assert health["openai"].status == ProviderStatus.UNHEALTHY
        assert health["openai"].error == "openai is down"
        assert not checker.is_available("openai")

    @pytest.mark.asyncio
    async def test_slow_probe_times_out(self, clock):
        slow = StubGenerationProvider("anthropic", ping_delay=0.5)
        fast = StubGenerationProvider("openai")
        checker = make_checker([fast, slow], clock, timeout_seconds=0.05)

        health = await checker.get_health()

        assert health["openai"].is_healthy
        assert health["anthropic"].status == ProviderStatus.UNHEALTHY
        assert health["anthropic"].error == "Health check timed out"


# ============================================================================
# COOLDOWN
# ============================================================================

class TestCooldown:

    def test_unknown_provider_is_available(self, clock):
        checker = make_checker([StubGenerationProvider("openai")], clock)
        assert checker.is_available("openai")

    @pytest.mark.asyncio
    async def test_mark_unhealthy_until_cooldown_expires(self, clock):
        provider = StubGenerationProvider("openai")
        checker = make_checker([provider], clock)
        await checker.get_health()

        checker.mark_unhealthy("openai", "rate limited")

        assert not checker.is_available("openai")
        assert (await checker.get_health())["openai"].error == "rate limited"
        assert provider.pings == 1

        clock.advance(61)
        health = await checker.get_health()

        assert provider.pings == 2
        assert health["openai"].is_healthy
        assert checker.is_available("openai")


# ============================================================================
# ORDERING
# ============================================================================

class TestProviderOrder:

    def test_registration_order_when_all_available(self, clock):
        providers = [StubGenerationProvider("openai"), StubGenerationProvider("anthropic")]
        checker = make_checker(providers, clock)

        assert [p.provider_id for p in checker.provider_order()] == ["openai", "anthropic"]

    def test_last_resort_always_last(self, clock):
        providers = [
            StubGenerationProvider("rule_based", last_resort=True),
            StubGenerationProvider("openai"),
            StubGenerationProvider("anthropic"),
        ]
        checker = make_checker(providers, clock)
        checker.mark_unhealthy("openai", "down")
        checker.mark_unhealthy("anthropic", "down")

        assert [p.provider_id for p in checker.provider_order()] == ["openai", "anthropic", "rule_based"]

    def test_unavailable_sorted_behind_available(self, clock):
        providers = [StubGenerationProvider("openai"), StubGenerationProvider("anthropic")]
        checker = make_checker(providers, clock)
        checker.mark_unhealthy("openai", "timeout")

        assert [p.provider_id for p in checker.provider_order()] == ["anthropic", "openai"]

    def test_get_provider(self, clock):
        openai_stub = StubGenerationProvider("openai")
        checker = make_checker([openai_stub], clock)

        assert checker.get_provider("openai") is openai_stub
        assert checker.get_provider("missing") is None
        assert checker.provider_ids == ["openai"]
