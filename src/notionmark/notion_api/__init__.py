"""notionmark.notion_api -- async Notion API transport and endpoint wrappers.

* :mod:`.rate_limit` -- token bucket pacing.
* :mod:`.retries` -- retry decision and backoff.
* :mod:`.transport` -- HTTP transport with auth, retries and rate limiting.
* :mod:`.blocks` -- block reads and appends.
* :mod:`.pages` -- page reads.
"""

from __future__ import annotations

from .blocks import MAX_CHILDREN_PER_APPEND, AsyncBlockAPI
from .pages import AsyncPageAPI
from .rate_limit import AsyncTokenBucket
from .retries import compute_backoff, should_retry
from .transport import AsyncNotionTransport

__all__ = [
    "MAX_CHILDREN_PER_APPEND",
    "AsyncBlockAPI",
    "AsyncNotionTransport",
    "AsyncPageAPI",
    "AsyncTokenBucket",
    "compute_backoff",
    "should_retry",
]
