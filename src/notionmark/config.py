"""Configuration for notionmark.

:class:`NotionmarkConfig` is a plain dataclass that captures every tuneable
knob exposed by the package.  Instances are passed to the converters
(:class:`MarkdownToNotionConverter`, :class:`NotionToMarkdownRenderer`) and
to :class:`AsyncNotionmarkClient`.

The conversion engine never needs a token; ``NotionmarkConfig()`` is a valid
configuration for offline conversion.

Three module-level constants define the default parser safety caps:

* :data:`DEFAULT_MAX_INPUT_LENGTH` — total Markdown characters accepted.
* :data:`DEFAULT_MAX_LINE_LENGTH` — characters per inline-parsed line.
* :data:`DEFAULT_MAX_CODE_BLOCK_LINES` — lines kept per fenced code block.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

# ---------------------------------------------------------------------------
# Parser safety caps
# ---------------------------------------------------------------------------

DEFAULT_MAX_INPUT_LENGTH: int = 100_000
"""Markdown input beyond this many characters is dropped before parsing."""

DEFAULT_MAX_LINE_LENGTH: int = 10_000
"""Inline parsing only looks at the first this-many characters of a line."""

DEFAULT_MAX_CODE_BLOCK_LINES: int = 1000
"""Fenced code blocks keep at most this many lines."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class NotionmarkConfig:
    """Complete configuration for notionmark.

    Every parameter has a default.  ``token`` is only needed when talking
    to the Notion API through :class:`AsyncNotionmarkClient`.

    Parameters
    ----------
    token:
        Notion integration token.  Never logged.
    notion_version:
        Value of the ``Notion-Version`` header sent with every request.
    base_url:
        API root URL.  Override for proxy or testing environments.
    indent:
        String emitted once per nesting level in front of rendered
        Markdown lines.
    max_input_length:
        Markdown longer than this is truncated before block parsing.
    max_line_length:
        Text longer than this is truncated before inline parsing.
    max_code_block_lines:
        Lines beyond this count inside a fenced code block are discarded.
    retry_max_attempts:
        Maximum number of attempts per request for retryable HTTP errors.
    retry_base_delay:
        Base delay (seconds) for exponential backoff.
    retry_max_delay:
        Upper cap (seconds) on computed backoff delay.
    retry_jitter:
        Add random jitter (50-100 %) to backoff intervals.
    rate_limit_rps:
        Target requests per second for client-side pacing (token bucket).
    timeout_seconds:
        HTTP request timeout in seconds.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~notionmark.observability.MetricsHook` backend.
    """

    # ── Core ────────────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = "2025-09-03"

    base_url: str = "https://api.notion.com/v1"

    # ── Conversion ──────────────────────────────────────────────────────
    indent: str = "  "

    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH

    max_line_length: int = DEFAULT_MAX_LINE_LENGTH

    max_code_block_lines: int = DEFAULT_MAX_CODE_BLOCK_LINES

    # ── Retry & rate ────────────────────────────────────────────────────
    retry_max_attempts: int = 5

    retry_base_delay: float = 1.0

    retry_max_delay: float = 60.0

    retry_jitter: bool = True

    rate_limit_rps: float = 3.0

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API token, or target localhost for testing."
            )

        if self.max_input_length < 1:
            raise ValueError(f"max_input_length must be >= 1, got {self.max_input_length}")
        if self.max_line_length < 1:
            raise ValueError(f"max_line_length must be >= 1, got {self.max_line_length}")
        if self.max_code_block_lines < 0:
            raise ValueError(
                f"max_code_block_lines must be >= 0, got {self.max_code_block_lines}"
            )
        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.rate_limit_rps <= 0:
            raise ValueError(f"rate_limit_rps must be > 0, got {self.rate_limit_rps}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    def __repr__(self) -> str:
        """Mask the token to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "token":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"token='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"NotionmarkConfig({', '.join(parts)})"
