"""Client-side request pacing.

Notion allows an integration an average of three requests per second and
answers bursts above that with ``429`` plus a ``Retry-After`` delay.
:class:`AsyncTokenBucket` keeps one transport under the average rate and,
once Notion has throttled it, holds every caller back until the
``Retry-After`` window has passed.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable


class AsyncTokenBucket:
    """Token bucket shared by every request of one transport.

    Callers that find the bucket empty borrow against future refills, so
    concurrent waiters queue up one refill interval apart instead of all
    waking at once.

    Parameters
    ----------
    rate_rps:
        Refill rate in tokens per second.
    burst:
        Bucket capacity.
    clock:
        Monotonic time source in seconds.
    """

    __slots__ = ("_clock", "_lock", "_paused_until", "burst", "last_refill", "rate", "tokens")

    def __init__(
        self,
        rate_rps: float,
        burst: int = 10,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate_rps <= 0:
            raise ValueError(f"rate_rps must be > 0, got {rate_rps}")
        if burst < 1:
            raise ValueError(f"burst must be >= 1, got {burst}")

        self.rate = rate_rps
        self.burst = burst
        self._clock = clock
        self.tokens = float(burst)
        self.last_refill = clock()
        self._paused_until = 0.0
        self._lock = asyncio.Lock()

    def pause(self, seconds: float) -> None:
        """Hold every caller back for *seconds* (Notion's ``Retry-After``)."""
        self._paused_until = max(self._paused_until, self._clock() + seconds)

    async def acquire(self, tokens: int = 1) -> float:
        """Take *tokens*, awaiting the refill or an active pause.

        Returns the wait in seconds (``0.0`` when no wait was needed).
        """
        async with self._lock:
            now = self._clock()
            self.tokens = min(float(self.burst), self.tokens + (now - self.last_refill) * self.rate)
            self.last_refill = now

            # tokens may go negative; the debt delays the next caller.
            self.tokens -= tokens
            refill_wait = -self.tokens / self.rate if self.tokens < 0 else 0.0
            wait = max(refill_wait, self._paused_until - now)

        if wait > 0:
            await asyncio.sleep(wait)
            return wait
        return 0.0
