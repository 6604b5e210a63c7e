"""Retry policy for Notion API requests.

Two pure functions keep the policy testable without a network:

* :func:`should_retry` -- is another attempt allowed for this outcome?
* :func:`compute_backoff` -- how long to wait before it.
"""

from __future__ import annotations

import random

import httpx

# Rate limiting and transient server failures.
RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


def should_retry(
    status_code: int | None,
    exception: Exception | None,
    attempt: int,
    max_attempts: int,
) -> bool:
    """Return ``True`` when the request may be attempted again.

    Parameters
    ----------
    status_code:
        Response status, or ``None`` when no response arrived.
    exception:
        Transport exception, or ``None`` when a response arrived.
    attempt:
        Zero-based index of the attempt that just failed.
    max_attempts:
        Total attempts allowed, the first one included.
    """
    if attempt + 1 >= max_attempts:
        return False
    if exception is not None:
        return isinstance(exception, RETRYABLE_EXCEPTIONS)
    return status_code in RETRYABLE_STATUSES


def compute_backoff(
    attempt: int,
    base: float = 1.0,
    maximum: float = 60.0,
    jitter: bool = True,
    retry_after: float | None = None,
) -> float:
    """Seconds to wait before attempt ``attempt + 1``.

    A server ``Retry-After`` value is honoured as-is; otherwise the delay
    doubles per attempt from *base*, capped at *maximum*.  Jitter scales the
    result into ``[50%, 100%]`` of its value.
    """
    delay = retry_after if retry_after is not None else min(base * 2 ** attempt, maximum)
    if jitter:
        delay *= random.uniform(0.5, 1.0)
    return delay
