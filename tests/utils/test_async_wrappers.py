"""
Tests for the bounded fan-out primitive
"""

import asyncio

import pytest

from src.utils.async_wrappers import gather_with_timeout, with_timeout


async def value_after(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


async def fail_after(exc, delay=0.0):
    await asyncio.sleep(delay)
    raise exc


class TestGatherWithTimeout:

    @pytest.mark.asyncio
    async def test_collects_results_and_errors_per_branch(self):
        outcome = await gather_with_timeout(
            {
                "ok": lambda: value_after(1),
                "broken": lambda: fail_after(ValueError("bad payload")),
                "slow": lambda: value_after(3, delay=1.0),
            },
            timeout_seconds=0.1,
        )

        assert outcome.results == {"ok": 1}
        assert set(outcome.errors) == {"broken", "slow"}
        assert isinstance(outcome.errors["broken"], ValueError)
        assert outcome.timed_out("slow")
        assert not outcome.timed_out("broken")
        assert set(outcome.elapsed_ms) == {"ok", "broken", "slow"}
        assert not outcome.all_failed

    @pytest.mark.asyncio
    async def test_slow_branch_does_not_delay_total_past_timeout(self):
        loop = asyncio.get_running_loop()
        start = loop.time()

        await gather_with_timeout(
            {"fast": lambda: value_after(1), "slow": lambda: value_after(2, delay=5)},
            timeout_seconds=0.2,
        )

        assert loop.time() - start < 2

    @pytest.mark.asyncio
    async def test_all_failed(self):
        outcome = await gather_with_timeout({"a": lambda: fail_after(RuntimeError("x"))}, timeout_seconds=1)
        assert outcome.all_failed

    @pytest.mark.asyncio
    async def test_empty(self):
        outcome = await gather_with_timeout({}, timeout_seconds=1)
        assert outcome.results == {}
        assert not outcome.all_failed


class TestWithTimeout:

    @pytest.mark.asyncio
    async def test_returns_value(self):
        assert await with_timeout(value_after("done"), timeout_seconds=1) == "done"

    @pytest.mark.asyncio
    async def test_default_and_callback_on_timeout(self):
        fired = []
        result = await with_timeout(
            value_after("late", delay=1),
            timeout_seconds=0.05,
            default="fallback",
            on_timeout=lambda: fired.append(True),
        )

        assert result == "fallback"
        assert fired == [True]
