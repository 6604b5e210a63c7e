"""notionmark — Notion blocks ↔ Markdown conversion.

Public re-exports
-----------------

* **Conversion:** :func:`render_sync`, :func:`render`, :func:`parse`
* **Properties:** :func:`flatten_properties`, :func:`flatten_properties_to_list`,
  :func:`page_to_simple`, :func:`pages_to_simple`
* **Client:** :class:`AsyncNotionmarkClient`
* **Configuration:** :class:`NotionmarkConfig`
* **Errors:** Every :class:`NotionmarkError` subclass and :class:`ErrorCode`
* **Models:** Result dataclasses and the :class:`FetchChildren` protocol

Usage::

    from notionmark import parse, render_sync

    blocks = parse("# Hello\\n\\n- [ ] Task")
    render_sync(blocks)   # "# Hello\\n- [ ] Task"
"""

from __future__ import annotations

# ── Client ─────────────────────────────────────────────────────────────
from notionmark.async_client import AsyncNotionmarkClient

# ── Configuration ───────────────────────────────────────────────────────
from notionmark.config import NotionmarkConfig

# ── Conversion ──────────────────────────────────────────────────────────
from notionmark.converter import (
    MarkdownToNotionConverter,
    NotionToMarkdownRenderer,
    flatten_properties,
    flatten_properties_to_list,
    page_to_simple,
    pages_to_simple,
    parse,
    parse_inline_markdown,
    render,
    render_rich_text,
    render_sync,
    rich_text_to_plain,
)

# ── Errors ──────────────────────────────────────────────────────────────
from notionmark.errors import (
    ErrorCode,
    NotionmarkAuthError,
    NotionmarkConflictError,
    NotionmarkError,
    NotionmarkNetworkError,
    NotionmarkNotFoundError,
    NotionmarkPermissionError,
    NotionmarkRetryExhaustedError,
    NotionmarkValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notionmark.models import (
    AppendResult,
    ConversionResult,
    ConversionWarning,
    ConvertOptions,
    FetchChildren,
    PropertyValue,
    SimplePage,
    SimpleProperty,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Conversion
    "render_sync",
    "render",
    "parse",
    "render_rich_text",
    "parse_inline_markdown",
    "rich_text_to_plain",
    "MarkdownToNotionConverter",
    "NotionToMarkdownRenderer",
    # Properties
    "flatten_properties",
    "flatten_properties_to_list",
    "page_to_simple",
    "pages_to_simple",
    # Client
    "AsyncNotionmarkClient",
    # Configuration
    "NotionmarkConfig",
    # Errors
    "NotionmarkError",
    "ErrorCode",
    "NotionmarkValidationError",
    "NotionmarkAuthError",
    "NotionmarkPermissionError",
    "NotionmarkNotFoundError",
    "NotionmarkConflictError",
    "NotionmarkRetryExhaustedError",
    "NotionmarkNetworkError",
    # Models
    "AppendResult",
    "ConversionResult",
    "ConversionWarning",
    "ConvertOptions",
    "FetchChildren",
    "PropertyValue",
    "SimplePage",
    "SimpleProperty",
]
