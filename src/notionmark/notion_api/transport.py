"""Async HTTP transport for the Notion API.

Request lifecycle:

1. Wait for a token-bucket slot.
2. Send the request with auth and ``Notion-Version`` headers.
3. ``2xx`` -- return the decoded JSON body (``{}`` for empty bodies).
4. ``429`` -- pause the token bucket for ``Retry-After`` and retry.
5. ``5xx`` or a network failure -- exponential backoff and retry.
6. Any other ``4xx`` -- raise the matching typed error at once.
7. Out of attempts -- raise :class:`NotionmarkRetryExhaustedError`
   (or :class:`NotionmarkNetworkError` when the last failure was a
   transport exception).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from typing import Any

import httpx

from notionmark.config import NotionmarkConfig
from notionmark.errors import (
    NotionmarkAuthError,
    NotionmarkConflictError,
    NotionmarkError,
    NotionmarkNetworkError,
    NotionmarkNotFoundError,
    NotionmarkPermissionError,
    NotionmarkRetryExhaustedError,
    NotionmarkValidationError,
)
from notionmark.observability import get_logger, log_event, resolve_metrics

from .rate_limit import AsyncTokenBucket
from .retries import RETRYABLE_EXCEPTIONS, RETRYABLE_STATUSES, compute_backoff, should_retry

log = get_logger("notionmark.transport")

# Largest page the Notion list endpoints accept.
PAGE_SIZE = 100

# ---------------------------------------------------------------------------
# Status mapping
# ---------------------------------------------------------------------------

_STATUS_ERRORS: dict[int, tuple[type[NotionmarkError], str]] = {
    400: (NotionmarkValidationError, "Validation error"),
    401: (NotionmarkAuthError, "Authentication failed"),
    403: (NotionmarkPermissionError, "Permission denied"),
    404: (NotionmarkNotFoundError, "Resource not found"),
    409: (NotionmarkConflictError, "Conflict"),
}


def parse_retry_after(response: httpx.Response) -> float | None:
    """Return the ``Retry-After`` header in seconds, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(float(raw), 0.0)
    except ValueError:
        return None


def raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the typed error for a non-retryable ``4xx`` response."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    notion_message = body.get("message") or response.text[:500]
    context: dict[str, Any] = {
        "status_code": status,
        "notion_code": body.get("code", ""),
        "method": method,
        "path": path,
    }

    error_cls, label = _STATUS_ERRORS.get(
        status, (NotionmarkValidationError, f"Client error {status}"),
    )
    raise error_cls(
        message=f"{label} on {method} {path}: {notion_message}",
        context=context,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class AsyncNotionTransport:
    """HTTP transport with auth, pacing and retries.

    Parameters
    ----------
    config:
        Token, endpoint, retry and rate-limit settings.
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: NotionmarkConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._bucket = AsyncTokenBucket(rate_rps=config.rate_limit_rps)
        self._metrics = resolve_metrics(config.metrics)
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Notion-Version": config.notion_version,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=config.http_proxy,
            transport=transport,
        )

    async def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Send one API request, retrying transient failures.

        Parameters
        ----------
        method:
            HTTP verb.
        path:
            Path relative to ``base_url``, e.g. ``/blocks/{id}/children``.
        **kwargs:
            Forwarded to :meth:`httpx.AsyncClient.request` (``json=``,
            ``params=``...).

        Returns
        -------
        dict
            Decoded JSON response body.

        Raises
        ------
        NotionmarkError
            A typed subclass for ``4xx`` responses, retry exhaustion and
            network failures.
        """
        max_attempts = self._config.retry_max_attempts
        last_status: int | None = None
        tags = {"method": method, "path": path}

        for attempt in range(max_attempts):
            wait = await self._bucket.acquire()
            if wait > 0:
                self._metrics.timing("notionmark.rate_limit_wait_ms", wait * 1000, tags=tags)

            started = time.monotonic()
            try:
                response = await self._client.request(method, path, **kwargs)
            except RETRYABLE_EXCEPTIONS as exc:
                last_status = None
                await self._after_network_error(method, path, exc, attempt)
                continue

            elapsed_ms = (time.monotonic() - started) * 1000
            status = response.status_code
            last_status = status
            status_tags = {**tags, "status": str(status)}
            self._metrics.increment("notionmark.requests_total", tags=status_tags)
            self._metrics.timing("notionmark.request_duration_ms", elapsed_ms, tags=status_tags)

            if 200 <= status < 300:
                if status == 204 or not response.content:
                    return {}
                return response.json()

            if status not in RETRYABLE_STATUSES:
                raise_for_status(response, method, path)

            if not should_retry(status, None, attempt, max_attempts):
                break

            retry_after = None
            reason = "server_error"
            if status == 429:
                retry_after = parse_retry_after(response)
                reason = "rate_limited"
                if retry_after:
                    self._bucket.pause(retry_after)
                self._metrics.increment("notionmark.rate_limited_total", tags=tags)

            log_event(
                log, logging.WARNING, "Retrying Notion API request",
                op="request", method=method, path=path, status_code=status,
                reason=reason, retry_after=retry_after, attempt=attempt + 1,
            )
            self._metrics.increment("notionmark.retries_total", tags={**tags, "reason": reason})
            await asyncio.sleep(self._backoff(attempt, retry_after))

        raise NotionmarkRetryExhaustedError(
            message=(
                f"All {max_attempts} attempts exhausted for {method} {path} "
                f"(last status: {last_status})"
            ),
            context={"attempts": max_attempts, "last_status_code": last_status},
        )

    async def paginate(self, path: str) -> AsyncIterator[dict]:
        """Yield every ``results`` item of a cursor-paginated ``GET`` endpoint."""
        cursor: str | None = None

        while True:
            params: dict[str, Any] = {"page_size": PAGE_SIZE}
            if cursor is not None:
                params["start_cursor"] = cursor

            data = await self.request("GET", path, params=params)
            for item in data.get("results", []):
                yield item

            cursor = data.get("next_cursor")
            if not data.get("has_more") or cursor is None:
                return

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotionTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # -- internals ---------------------------------------------------------

    def _backoff(self, attempt: int, retry_after: float | None = None) -> float:
        return compute_backoff(
            attempt,
            base=self._config.retry_base_delay,
            maximum=self._config.retry_max_delay,
            jitter=self._config.retry_jitter,
            retry_after=retry_after,
        )

    async def _after_network_error(
        self, method: str, path: str, exc: Exception, attempt: int,
    ) -> None:
        """Sleep before the next attempt, or raise when none is left."""
        self._metrics.increment(
            "notionmark.requests_total",
            tags={"method": method, "path": path, "status": "error"},
        )
        log_event(
            log, logging.WARNING, "Request network error",
            op="request", method=method, path=path, attempt=attempt + 1, error=str(exc),
        )
        if not should_retry(None, exc, attempt, self._config.retry_max_attempts):
            raise NotionmarkNetworkError(
                message=f"Network error on {method} {path}: {exc}",
                context={"path": path, "attempt": attempt + 1},
                cause=exc,
            ) from exc

        self._metrics.increment(
            "notionmark.retries_total",
            tags={"method": method, "path": path, "reason": "network_error"},
        )
        await asyncio.sleep(self._backoff(attempt))
