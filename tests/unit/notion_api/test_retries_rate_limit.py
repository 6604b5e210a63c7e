"""Tests for the retry policy and the async token bucket."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from notionmark.notion_api.rate_limit import AsyncTokenBucket
from notionmark.notion_api.retries import compute_backoff, should_retry


class TestShouldRetry:

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert should_retry(status, None, attempt=0, max_attempts=3) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 501])
    def test_non_retryable_statuses(self, status):
        assert should_retry(status, None, attempt=0, max_attempts=3) is False

    def test_network_exceptions(self):
        assert should_retry(None, httpx.ConnectError("x"), 0, 3) is True
        assert should_retry(None, httpx.ReadTimeout("x"), 0, 3) is True

    def test_other_exception(self):
        assert should_retry(None, ValueError("x"), 0, 3) is False

    def test_last_attempt_never_retries(self):
        assert should_retry(503, None, attempt=2, max_attempts=3) is False
        assert should_retry(None, httpx.ConnectError("x"), 2, 3) is False

    def test_nothing_known(self):
        assert should_retry(None, None, 0, 3) is False


class TestComputeBackoff:

    def test_exponential(self):
        delays = [compute_backoff(a, base=1.0, maximum=60.0, jitter=False) for a in range(4)]
        assert delays == [1.0, 2.0, 4.0, 8.0]

    def test_capped(self):
        assert compute_backoff(10, base=1.0, maximum=5.0, jitter=False) == 5.0

    def test_retry_after_wins(self):
        assert compute_backoff(5, base=1.0, maximum=2.0, jitter=False, retry_after=7.0) == 7.0

    def test_jitter_range(self):
        for _ in range(50):
            delay = compute_backoff(2, base=1.0, maximum=60.0, jitter=True)
            assert 2.0 <= delay <= 4.0


class TestAsyncTokenBucket:

    def test_rejects_bad_arguments(self):
        with pytest.raises(ValueError, match="rate_rps"):
            AsyncTokenBucket(rate_rps=0)
        with pytest.raises(ValueError, match="burst"):
            AsyncTokenBucket(rate_rps=1, burst=0)

    async def test_burst_available_immediately(self):
        bucket = AsyncTokenBucket(rate_rps=1.0, burst=3)
        assert [await bucket.acquire() for _ in range(3)] == [0.0, 0.0, 0.0]

    async def test_waits_when_empty(self):
        bucket = AsyncTokenBucket(rate_rps=2.0, burst=1)
        await bucket.acquire()
        with patch(
            "notionmark.notion_api.rate_limit.asyncio.sleep", new_callable=AsyncMock,
        ) as sleep:
            wait = await bucket.acquire()
        assert 0.0 < wait <= 0.5
        sleep.assert_awaited_once_with(wait)

    async def test_concurrent_waiters_queue_up(self):
        bucket = AsyncTokenBucket(rate_rps=2.0, burst=1, clock=lambda: 100.0)
        with patch(
            "notionmark.notion_api.rate_limit.asyncio.sleep", new_callable=AsyncMock,
        ) as sleep:
            waits = [await bucket.acquire() for _ in range(3)]
        assert waits == [0.0, 0.5, 1.0]
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    async def test_pause_holds_callers_with_tokens(self):
        now = [10.0]
        bucket = AsyncTokenBucket(rate_rps=1.0, burst=5, clock=lambda: now[0])
        bucket.pause(3.0)
        with patch(
            "notionmark.notion_api.rate_limit.asyncio.sleep", new_callable=AsyncMock,
        ):
            assert await bucket.acquire() == 3.0
            now[0] = 13.5
            assert await bucket.acquire() == 0.0

    def test_shorter_pause_does_not_shorten_window(self):
        now = [0.0]
        bucket = AsyncTokenBucket(rate_rps=1.0, clock=lambda: now[0])
        bucket.pause(5.0)
        now[0] = 1.0
        bucket.pause(1.0)
        assert bucket._paused_until == 5.0
