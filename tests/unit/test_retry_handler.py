"""Unit tests for the table-driven retry handler."""

from unittest.mock import AsyncMock

import pytest

from agent_gateway.exceptions import RateLimitedError, UnauthorizedError
from agent_gateway.orchestrator import RetryHandler


class TestRetryHandler:
    """Test suite for retry behaviour."""

    @pytest.mark.asyncio
    async def test_success_without_retry(self, recording_sleep):
        func = AsyncMock(return_value="ok")
        handler = RetryHandler(sleep=recording_sleep)

        assert await handler.execute(func, "a", key="b") == "ok"
        func.assert_awaited_once_with("a", key="b")
        assert recording_sleep.calls == []

    @pytest.mark.asyncio
    async def test_waits_follow_the_table(self, recording_sleep):
        """Test each retry waits the table entry for its attempt."""
        func = AsyncMock(side_effect=[RateLimitedError(), RateLimitedError(), RateLimitedError(), "ok"])
        handler = RetryHandler(max_retries=4, delays=(3, 7, 15, 30), sleep=recording_sleep)

        assert await handler.execute(func) == "ok"
        assert recording_sleep.calls == [3, 7, 15]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, recording_sleep):
        func = AsyncMock(side_effect=RateLimitedError("still limited"))
        handler = RetryHandler(max_retries=4, delays=(3, 7, 15, 30), sleep=recording_sleep)

        with pytest.raises(RateLimitedError, match="still limited"):
            await handler.execute(func)

        assert func.await_count == 5
        assert recording_sleep.calls == [3, 7, 15, 30]

    @pytest.mark.asyncio
    async def test_short_table_reuses_last_delay(self, recording_sleep):
        func = AsyncMock(side_effect=RateLimitedError())
        handler = RetryHandler(max_retries=3, delays=(1, 2), sleep=recording_sleep)

        with pytest.raises(RateLimitedError):
            await handler.execute(func)
        assert recording_sleep.calls == [1, 2, 2]

    @pytest.mark.asyncio
    async def test_retry_after_hint_wins(self, recording_sleep):
        func = AsyncMock(side_effect=[RateLimitedError(retry_after=12), "ok"])
        handler = RetryHandler(sleep=recording_sleep)

        assert await handler.execute(func) == "ok"
        assert recording_sleep.calls == [12.0]

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self, recording_sleep):
        func = AsyncMock(side_effect=UnauthorizedError())
        handler = RetryHandler(sleep=recording_sleep)

        with pytest.raises(UnauthorizedError):
            await handler.execute(func)
        assert func.await_count == 1
        assert recording_sleep.calls == []

    @pytest.mark.asyncio
    async def test_zero_retries(self, recording_sleep):
        func = AsyncMock(side_effect=RateLimitedError())
        handler = RetryHandler(max_retries=0, sleep=recording_sleep)

        with pytest.raises(RateLimitedError):
            await handler.execute(func)
        assert func.await_count == 1
