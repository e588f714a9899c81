"""Tests for async_utils.py: deadlines and CircuitBreaker."""

import asyncio

import pytest

from token_search.core.async_utils import CircuitBreaker, deadline_after, loop_time, time_left
from token_search.core.exceptions import RateLimitError

# ============================================================
# Deadlines
# ============================================================


class TestDeadlines:
    @pytest.mark.asyncio
    async def test_deadline_after(self):
        before = loop_time()
        deadline = deadline_after(2.0)
        assert before + 2.0 <= deadline <= loop_time() + 2.0

    @pytest.mark.asyncio
    async def test_time_left_positive(self):
        assert 0.9 < time_left(deadline_after(1.0)) <= 1.0

    @pytest.mark.asyncio
    async def test_time_left_never_negative(self):
        assert time_left(loop_time() - 5.0) == 0.0

    @pytest.mark.asyncio
    async def test_usable_with_timeout_at(self):
        with pytest.raises(TimeoutError):
            async with asyncio.timeout_at(deadline_after(0.01)):
                await asyncio.sleep(1)


# ============================================================
# CircuitBreaker
# ============================================================


class TestCircuitBreaker:
    @pytest.mark.asyncio
    async def test_closed_passes(self):
        cb = CircuitBreaker(failure_threshold=3)
        async with cb:
            pass
        assert cb.state == "closed"

    @pytest.mark.asyncio
    async def test_opens_after_threshold(self):
        cb = CircuitBreaker(failure_threshold=2, recovery_timeout=60.0, name="DexScreener")
        for _ in range(2):
            with pytest.raises(ValueError):
                async with cb:
                    raise ValueError("fail")
        assert cb.state == "open"
        assert cb.is_open

        with pytest.raises(RateLimitError) as exc_info:
            async with cb:
                pass
        assert exc_info.value.context.source == "DexScreener"
        assert exc_info.value.context.status_code is None

    @pytest.mark.asyncio
    async def test_half_open_recovers(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=0.01)
        with pytest.raises(ValueError):
            async with cb:
                raise ValueError("fail")
        assert cb.state == "open"

        await asyncio.sleep(0.05)
        async with cb:
            pass
        assert cb.state == "closed"

    @pytest.mark.asyncio
    async def test_half_open_max_calls(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=0.01, half_open_max_calls=1)
        with pytest.raises(ValueError):
            async with cb:
                raise ValueError("fail")
        await asyncio.sleep(0.05)

        async with cb:
            # Second concurrent probe while half-open is rejected
            with pytest.raises(RateLimitError):
                async with cb:
                    pass

    @pytest.mark.asyncio
    async def test_cancellation_not_counted(self):
        cb = CircuitBreaker(failure_threshold=1)
        with pytest.raises(asyncio.CancelledError):
            async with cb:
                raise asyncio.CancelledError()
        assert cb.state == "closed"

    @pytest.mark.asyncio
    async def test_success_decrements_failures(self):
        cb = CircuitBreaker(failure_threshold=3)
        with pytest.raises(ValueError):
            async with cb:
                raise ValueError("fail")
        assert cb._failure_count == 1
        async with cb:
            pass
        assert cb._failure_count == 0
