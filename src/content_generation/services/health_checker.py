# src/content_generation/services/health_checker.py
"""
Provider Health Checker
Caches per-provider health and derives the order providers are tried in.
"""

import time
from typing import Callable, Dict, List, Optional, Sequence

from src.content_generation.providers.base_provider import GenerationProvider
from src.content_generation.schemas.generation import ProviderHealth, ProviderStatus
from src.utils.time_utils import utc_now
from src.utils.async_wrappers import gather_with_timeout
from src.utils.logger.custom_logging import LoggerMixin


class ProviderHealthChecker(LoggerMixin):
    """
    Health cache shared across requests.

    Writes are single-field replacements (last write wins), so concurrent
    requests need no locking.
    """

    def __init__(
        self,
        providers: Sequence[GenerationProvider],
        check_interval_seconds: float = 300,
        unhealthy_cooldown_seconds: float = 300,
        timeout_seconds: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__()
        self.providers: List[GenerationProvider] = list(providers)
        self.check_interval_seconds = check_interval_seconds
        self.unhealthy_cooldown_seconds = unhealthy_cooldown_seconds
        self.timeout_seconds = timeout_seconds
        self._clock = clock

        self._health: Dict[str, ProviderHealth] = {}
        self._last_check: Optional[float] = None
        # provider_id -> clock time until which it is treated as unhealthy
        self._cooldown_until: Dict[str, float] = {}

    @property
    def provider_ids(self) -> List[str]:
        return [p.provider_id for p in self.providers]

    def get_provider(self, provider_id: str) -> Optional[GenerationProvider]:
        return next((p for p in self.providers if p.provider_id == provider_id), None)

    # ========================================================================
    # HEALTH CACHE
    # ========================================================================

    def _needs_refresh(self) -> bool:
        if self._last_check is None:
            return True
        now = self._clock()
        if now - self._last_check >= self.check_interval_seconds:
            return True
        return any(now >= until for until in self._cooldown_until.values())

    async def get_health(self, force: bool = False) -> Dict[str, ProviderHealth]:
        """
        Cached health, refreshed when older than the check interval, when a
        cooldown has expired, or when forced.
        """
        if not force and not self._needs_refresh():
            return dict(self._health)

        operations = {p.provider_id: p.check_health for p in self.providers}
        outcome = await gather_with_timeout(operations, self.timeout_seconds)

        health: Dict[str, ProviderHealth] = dict(outcome.results)
        for provider_id, exc in outcome.errors.items():
            message = "Health check timed out" if outcome.timed_out(provider_id) else (str(exc) or type(exc).__name__)
            health[provider_id] = ProviderHealth(
                provider=provider_id,
                status=ProviderStatus.UNHEALTHY,
                response_time_ms=outcome.elapsed_ms.get(provider_id),
                error=message,
            )

        self._health = health
        self._last_check = self._clock()
        self._cooldown_until = {}

        summary = ", ".join(f"{pid}={h.status.value}" for pid, h in health.items())
        self.logger.info(f"[HealthCheck] Refreshed: {summary or 'no providers'}")
        return dict(self._health)

    def is_available(self, provider_id: str) -> bool:
        """Healthy per the last check and not inside an unhealthy cooldown."""
        until = self._cooldown_until.get(provider_id)
        if until is not None and self._clock() < until:
            return False
        health = self._health.get(provider_id)
        # No data yet: configured providers count as available
        return health is None or health.is_healthy

    def mark_unhealthy(self, provider_id: str, error: str) -> None:
        """Record a runtime failure; the provider sorts behind healthy ones for the cooldown."""
        previous = self._health.get(provider_id)
        self._health[provider_id] = ProviderHealth(
            provider=provider_id,
            status=ProviderStatus.UNHEALTHY,
            response_time_ms=previous.response_time_ms if previous else None,
            last_checked=utc_now(),
            error=error,
        )
        self._cooldown_until[provider_id] = self._clock() + self.unhealthy_cooldown_seconds
        self.logger.warning(f"[HealthCheck] Marked {provider_id} unhealthy: {error}")

    def reset(self) -> None:
        """Force the next get_health call to re-check."""
        self._last_check = None

    # ========================================================================
    # ORDERING
    # ========================================================================

    def provider_order(self) -> List[GenerationProvider]:
        """
        Order:
        1. last-resort providers after all others
        2. available before unavailable
        3. registration order (static preference)
        4. lower last response time
        """
        def sort_key(item):
            index, provider = item
            health = self._health.get(provider.provider_id)
            response_time = health.response_time_ms if health and health.response_time_ms is not None else float("inf")
            return (
                provider.is_last_resort,
                not self.is_available(provider.provider_id),
                index,
                response_time,
            )

        return [provider for _, provider in sorted(enumerate(self.providers), key=sort_key)]
