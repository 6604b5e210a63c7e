"""Markdown ↔ Notion conversion pipeline.

Public API:

- :class:`MarkdownToNotionConverter` — Markdown → Notion blocks.
- :class:`NotionToMarkdownRenderer` — Notion blocks → Markdown.
- :func:`render_rich_text` / :func:`parse_inline_markdown` — inline spans.
- :func:`flatten_properties` — page properties → primitive values.
"""

from notionmark.converter.inline_parser import parse_inline_markdown
from notionmark.converter.inline_renderer import render_rich_text, rich_text_to_plain
from notionmark.converter.md_to_notion import MarkdownToNotionConverter, parse
from notionmark.converter.notion_to_md import NotionToMarkdownRenderer, render, render_sync
from notionmark.converter.properties import (
    flatten_properties,
    flatten_properties_to_list,
    flatten_property,
    page_to_simple,
    pages_to_simple,
)

__all__ = [
    "MarkdownToNotionConverter",
    "NotionToMarkdownRenderer",
    "flatten_properties",
    "flatten_properties_to_list",
    "flatten_property",
    "page_to_simple",
    "pages_to_simple",
    "parse",
    "parse_inline_markdown",
    "render",
    "render_rich_text",
    "render_sync",
    "rich_text_to_plain",
]
