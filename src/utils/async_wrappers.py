"""
Async helpers for bounded, independently failing concurrent calls.

Every external call (news sources, provider health checks) goes through
``with_timeout`` or ``gather_with_timeout`` so a slow branch never holds up
or cancels its siblings.
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Mapping, Optional, TypeVar

from src.utils.logger.custom_logging import LoggerMixin

T = TypeVar('T')

logger_mixin = LoggerMixin()
logger = logger_mixin.logger


# =============================================================================
# TIMEOUT WRAPPER
# =============================================================================

async def with_timeout(
    coro,
    timeout_seconds: float,
    default: Any = None,
    on_timeout: Optional[Callable[[], None]] = None,
):
    """
    Run a coroutine with timeout, returning default or calling handler on timeout.

    Usage:
        result = await with_timeout(
            provider.check_health(),
            timeout_seconds=5,
            default=None,
            on_timeout=lambda: logger.warning("Timeout!")
        )
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(f"[TIMEOUT] Operation timed out after {timeout_seconds}s")
        if on_timeout:
            on_timeout()
        return default


# =============================================================================
# FAN-OUT
# =============================================================================

@dataclass
class FanOutResult(Generic[T]):
    """Outcome of a ``gather_with_timeout`` call, one entry per named branch."""

    results: Dict[str, T] = field(default_factory=dict)
    errors: Dict[str, BaseException] = field(default_factory=dict)
    elapsed_ms: Dict[str, int] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return not self.results and bool(self.errors)

    def timed_out(self, name: str) -> bool:
        return isinstance(self.errors.get(name), asyncio.TimeoutError)


async def _timed_branch(
    name: str,
    factory: Callable[[], Awaitable[T]],
    timeout_seconds: float,
    elapsed: Dict[str, int],
) -> T:
    start = time.perf_counter()
    try:
        return await asyncio.wait_for(factory(), timeout=timeout_seconds)
    finally:
        # Each branch writes only its own key
        elapsed[name] = int((time.perf_counter() - start) * 1000)


async def gather_with_timeout(
    operations: Mapping[str, Callable[[], Awaitable[T]]],
    timeout_seconds: float,
) -> FanOutResult[T]:
    """
    Run N independent fallible operations concurrently, each raced against
    its own timeout, and collect every result and every error.

    A branch that raises or times out is recorded in ``errors`` under its
    name. No branch failure cancels another, and this function never raises
    for branch failures.

    Usage:
        outcome = await gather_with_timeout(
            {"newsapi": lambda: newsapi.search("Apple", 5),
             "alpha_vantage": lambda: av.search("Apple", 5)},
            timeout_seconds=10,
        )
        outcome.results   # {"newsapi": [...]}
        outcome.errors    # {"alpha_vantage": TimeoutError()}

    Args:
        operations: Branch name -> zero-argument coroutine factory
        timeout_seconds: Per-branch timeout

    Returns:
        FanOutResult with results, errors and per-branch elapsed time
    """
    outcome: FanOutResult[T] = FanOutResult()
    if not operations:
        return outcome

    names = list(operations.keys())
    settled = await asyncio.gather(
        *(
            _timed_branch(name, operations[name], timeout_seconds, outcome.elapsed_ms)
            for name in names
        ),
        return_exceptions=True,
    )

    for name, value in zip(names, settled):
        if isinstance(value, BaseException):
            if isinstance(value, asyncio.CancelledError):
                raise value
            outcome.errors[name] = value
            logger.debug(f"[FanOut] Branch '{name}' failed: {type(value).__name__}: {value}")
        else:
            outcome.results[name] = value

    logger.debug(
        f"[FanOut] {len(outcome.results)}/{len(names)} branches succeeded "
        f"(timeout={timeout_seconds}s)"
    )
    return outcome
