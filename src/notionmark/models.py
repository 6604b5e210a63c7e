"""Public data models for notionmark.

Blocks, rich_text segments and property records stay plain ``dict`` objects
exactly as the Notion API returns them; this module only holds the small
dataclasses that the converters produce or accept around them.
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

PropertyValue = Union[str, int, float, bool, list[str], None]
"""The flattened form of a single page property."""


# ---------------------------------------------------------------------------
# Child fetching
# ---------------------------------------------------------------------------

class FetchChildren(Protocol):
    """Coroutine function returning the child blocks of *block_id*.

    :meth:`AsyncBlockAPI.get_children` satisfies this protocol; tests
    usually pass a small ``async def`` backed by a dict.
    """

    def __call__(self, block_id: str) -> Awaitable[list[dict[str, Any]]]: ...


@dataclass(frozen=True)
class ConvertOptions:
    """Per-call rendering options.

    Attributes
    ----------
    indent_level:
        Nesting depth of the blocks being rendered.  Each nested render
        adds one level.
    list_index:
        Number to print for a ``numbered_list_item``.  Set by the
        sequence renderer, never by callers.
    fetch_children:
        Optional :class:`FetchChildren` capability.  Without it nested
        content is omitted.
    """

    indent_level: int = 0
    list_index: int | None = None
    fetch_children: FetchChildren | None = None


# ---------------------------------------------------------------------------
# Conversion results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue encountered during Markdown parsing.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"INPUT_TRUNCATED"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ConversionResult:
    """Output of the Markdown-to-Notion-blocks conversion.

    Attributes
    ----------
    blocks:
        Notion block payloads (dicts) ready to be sent to the API.
    warnings:
        Truncations applied to oversized input.
    """

    blocks: list[dict] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)


@dataclass
class AppendResult:
    """Outcome of appending Markdown to an existing page or block.

    Attributes
    ----------
    blocks_appended:
        Number of top-level blocks sent.
    requests:
        Number of append requests issued (one per batch of 100).
    warnings:
        Warnings from the Markdown conversion.
    """

    blocks_appended: int = 0
    requests: int = 0
    warnings: list[ConversionWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Simplified pages
# ---------------------------------------------------------------------------

@dataclass
class SimpleProperty:
    """One flattened page property."""

    name: str
    type: str
    value: PropertyValue

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "value": self.value}


@dataclass
class SimplePage:
    """A page reduced to its id, URL and flattened properties."""

    id: str
    url: str
    properties: dict[str, PropertyValue] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "url": self.url, "properties": dict(self.properties)}
