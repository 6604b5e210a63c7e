"""Metrics hook protocol and no-op default implementation.

notionmark emits counters and timings at a few key points (API requests,
retries, rendered and parsed blocks).  By default a :class:`NoopMetricsHook`
is used so there is zero overhead.  Users can supply their own object that
satisfies the :class:`MetricsHook` protocol to route metrics to StatsD,
Prometheus, or any other backend.

Usage::

    from notionmark.observability.metrics import MetricsHook, NoopMetricsHook

    assert isinstance(my_backend, MetricsHook)

Emitted metric names:

* ``notionmark.requests_total``             -- counter
* ``notionmark.retries_total``              -- counter
* ``notionmark.rate_limited_total``         -- counter
* ``notionmark.request_duration_ms``        -- timing
* ``notionmark.rate_limit_wait_ms``         -- timing
* ``notionmark.blocks_rendered_total``      -- counter
* ``notionmark.unsupported_blocks_total``   -- counter
* ``notionmark.blocks_parsed_total``        -- counter
* ``notionmark.conversion_warnings_total``  -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    Both methods accept an optional *tags* dict whose keys and values are
    strings.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric by *value*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(metrics: MetricsHook | None) -> MetricsHook:
    """Return *metrics*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return metrics if metrics is not None else NoopMetricsHook()
