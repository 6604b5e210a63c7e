"""Notion block tree to Markdown renderer.

Converts a list of Notion API block objects (dicts) into a Markdown string.
Two modes share one set of per-type renderers:

* :meth:`NotionToMarkdownRenderer.render_blocks_sync` never fetches
  anything; nested content of blocks with ``has_children`` is omitted.
* :meth:`NotionToMarkdownRenderer.render_blocks` is a coroutine that
  awaits ``options.fetch_children(block_id)`` for nested content, one block
  at a time in document order.

For blocks without children both modes produce identical output.

Usage::

    from notionmark.converter.notion_to_md import NotionToMarkdownRenderer
    from notionmark.models import ConvertOptions

    renderer = NotionToMarkdownRenderer()
    md = renderer.render_blocks_sync(blocks)
    md = await renderer.render_blocks(
        blocks, ConvertOptions(fetch_children=block_api.get_children)
    )
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable as _Callable
from typing import Any

from notionmark.config import NotionmarkConfig
from notionmark.models import ConvertOptions, FetchChildren
from notionmark.observability import get_logger, log_event, resolve_metrics

from .inline_renderer import render_rich_text

log = get_logger("notionmark.renderer")

# Rendered only through their children; need a fetch capability.
_CONTAINER_TYPES: frozenset[str] = frozenset({
    "synced_block",
    "column_list",
    "table",
})

# Rendered as a line of their own followed by their nested children.
_NESTING_TYPES: frozenset[str] = frozenset({
    "bulleted_list_item",
    "numbered_list_item",
    "toggle",
})

# Types that need no payload object.
_PAYLOAD_OPTIONAL: frozenset[str] = frozenset({"divider"})

_MEDIA_LABELS: dict[str, str] = {
    "video": "Video",
    "audio": "Audio",
    "pdf": "PDF",
    "embed": "Embed",
}

COLUMN_SEPARATOR = "\n\n---\n\n"


class NotionToMarkdownRenderer:
    """Renderer that converts Notion blocks to Markdown.

    The renderer holds configuration only.  All per-render state (nesting
    depth, numbered-list counter, fetch capability) travels in
    :class:`ConvertOptions`, so one instance may serve concurrent renders.

    Parameters
    ----------
    config:
        Package configuration.  Only ``indent`` and ``metrics`` are used.
    """

    def __init__(self, config: NotionmarkConfig | None = None) -> None:
        self._config = config or NotionmarkConfig()
        self._metrics = resolve_metrics(self._config.metrics)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_blocks_sync(
        self,
        blocks: list[dict] | None,
        options: ConvertOptions | None = None,
    ) -> str:
        """Render *blocks* without fetching any children.

        Parameters
        ----------
        blocks:
            Notion block objects.  ``None`` is treated as empty.
        options:
            Rendering options; ``fetch_children`` is ignored.

        Returns
        -------
        str
            Non-empty block renderings joined with ``"\\n"``.
        """
        options = options or ConvertOptions()
        parts: list[str] = []
        list_index = 1

        for block in blocks or []:
            md = self.render_block_sync(block, _numbered(options, list_index))
            list_index = _next_list_index(block, list_index)
            if md:
                parts.append(md)

        return "\n".join(parts)

    async def render_blocks(
        self,
        blocks: list[dict] | None,
        options: ConvertOptions | None = None,
    ) -> str:
        """Render *blocks*, recursing into children via ``options.fetch_children``.

        Children are fetched sequentially in document order.  Exceptions
        raised by the fetch capability propagate unchanged.
        """
        options = options or ConvertOptions()
        parts: list[str] = []
        list_index = 1

        for block in blocks or []:
            md = await self.render_block(block, _numbered(options, list_index))
            list_index = _next_list_index(block, list_index)
            if md:
                parts.append(md)

        return "\n".join(parts)

    def render_block_sync(self, block: dict, options: ConvertOptions | None = None) -> str:
        """Render a single block without fetching children."""
        options = options or ConvertOptions()
        block_type, data = _split(block)
        if data is None:
            return self._render_unsupported(block, block_type, options)
        if block_type in _CONTAINER_TYPES:
            self._count(block_type)
            return ""
        return self._render_own(block, block_type, data, options, "")

    async def render_block(self, block: dict, options: ConvertOptions | None = None) -> str:
        """Render a single block, fetching children when possible."""
        options = options or ConvertOptions()
        block_type, data = _split(block)
        if data is None:
            return self._render_unsupported(block, block_type, options)

        if block_type in _CONTAINER_TYPES:
            self._count(block_type)
            fetch = _fetcher(block, options)
            if fetch is None:
                return ""
            container = _CONTAINER_RENDERERS[block_type]
            return await container(self, block, data, options, fetch)

        children_md = ""
        if block_type in _NESTING_TYPES:
            fetch = _fetcher(block, options)
            if fetch is not None:
                children = await fetch(block["id"])
                children_md = await self.render_blocks(children, _nested(options))
        return self._render_own(block, block_type, data, options, children_md)

    # ------------------------------------------------------------------
    # Internal: dispatch
    # ------------------------------------------------------------------

    def _render_own(
        self,
        block: dict,
        block_type: str,
        data: dict,
        options: ConvertOptions,
        children_md: str,
    ) -> str:
        renderer = _BLOCK_RENDERERS.get(block_type)
        if renderer is None:
            return self._render_unsupported(block, block_type, options)
        self._count(block_type)
        return renderer(self, data, self._indent(options), options, children_md)

    def _indent(self, options: ConvertOptions) -> str:
        return self._config.indent * options.indent_level

    def _count(self, block_type: str) -> None:
        self._metrics.increment(
            "notionmark.blocks_rendered_total", tags={"block_type": block_type}
        )

    def _render_unsupported(self, block: Any, block_type: str, options: ConvertOptions) -> str:
        block_id = block.get("id", "") if isinstance(block, dict) else ""
        self._metrics.increment(
            "notionmark.unsupported_blocks_total", tags={"block_type": block_type}
        )
        log_event(
            log, logging.DEBUG, "Unsupported block rendered as comment",
            op="render", block_type=block_type, block_id=block_id,
        )
        return f"{self._indent(options)}<!-- Unsupported block type: {block_type} -->"

    # ------------------------------------------------------------------
    # Text blocks
    # ------------------------------------------------------------------

    def _render_paragraph(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        text = render_rich_text(data.get("rich_text"))
        return f"{indent}{text}" if text else ""

    def _render_heading(self, data: dict, indent: str, level: int) -> str:
        text = render_rich_text(data.get("rich_text"))
        return f"{indent}{'#' * level} {text}"

    def _render_heading_1(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return self._render_heading(data, indent, 1)

    def _render_heading_2(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return self._render_heading(data, indent, 2)

    def _render_heading_3(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return self._render_heading(data, indent, 3)

    def _render_bulleted_list_item(
        self, data: dict, indent: str, options: ConvertOptions, children: str
    ) -> str:
        text = render_rich_text(data.get("rich_text"))
        return _with_children(f"{indent}- {text}", children)

    def _render_numbered_list_item(
        self, data: dict, indent: str, options: ConvertOptions, children: str
    ) -> str:
        text = render_rich_text(data.get("rich_text"))
        number = options.list_index or 1
        return _with_children(f"{indent}{number}. {text}", children)

    def _render_to_do(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        text = render_rich_text(data.get("rich_text"))
        checkbox = "[x]" if data.get("checked") else "[ ]"
        return f"{indent}- {checkbox} {text}"

    def _render_toggle(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        text = render_rich_text(data.get("rich_text"))
        result = f"{indent}<details>\n{indent}<summary>{text}</summary>\n"
        if children:
            result += f"\n{children}\n"
        return result + f"{indent}</details>"

    def _render_code(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        text = render_rich_text(data.get("rich_text"))
        language = data.get("language") or ""
        result = f"{indent}```{language}\n{text}\n{indent}```"
        caption = render_rich_text(data.get("caption"))
        if caption:
            result += f"\n{indent}*{caption}*"
        return result

    def _render_quote(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        text = render_rich_text(data.get("rich_text"))
        return "\n".join(f"{indent}> {line}" for line in text.split("\n"))

    def _render_callout(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        text = render_rich_text(data.get("rich_text"))
        icon = _icon_text(data.get("icon"))
        prefix = f"{icon} " if icon else ""
        return f"{indent}> {prefix}**Note:** {text}"

    def _render_equation(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        expression = data.get("expression") or ""
        return f"{indent}$$\n{expression}\n$$"

    # ------------------------------------------------------------------
    # Links and media
    # ------------------------------------------------------------------

    def _render_bookmark(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        url = data.get("url") or ""
        caption = render_rich_text(data.get("caption"))
        return f"{indent}[{caption or url}]({url})"

    def _render_image(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        caption = render_rich_text(data.get("caption"))
        return f"{indent}![{caption}]({extract_file_url(data)})"

    def _render_media(self, data: dict, indent: str, label: str, url: str) -> str:
        caption = render_rich_text(data.get("caption"))
        return f"{indent}[{caption or label}]({url})"

    def _render_video(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return self._render_media(data, indent, _MEDIA_LABELS["video"], extract_file_url(data))

    def _render_audio(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return self._render_media(data, indent, _MEDIA_LABELS["audio"], extract_file_url(data))

    def _render_pdf(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return self._render_media(data, indent, _MEDIA_LABELS["pdf"], extract_file_url(data))

    def _render_embed(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return self._render_media(data, indent, _MEDIA_LABELS["embed"], data.get("url") or "")

    def _render_file(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        name = data.get("name") or render_rich_text(data.get("caption")) or "File"
        return f"{indent}[{name}]({extract_file_url(data)})"

    def _render_link_preview(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        url = data.get("url") or ""
        return f"{indent}[{url}]({url})"

    def _render_link_to_page(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        link_type = data.get("type")
        if link_type == "page_id":
            return f"{indent}[Link to page]({data.get('page_id', '')})"
        if link_type == "database_id":
            return f"{indent}[Link to database]({data.get('database_id', '')})"
        return f"{indent}<!-- Link to page -->"

    def _render_child_page(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return f"{indent}📄 [{data.get('title') or 'Untitled'}]"

    def _render_child_database(
        self, data: dict, indent: str, options: ConvertOptions, children: str
    ) -> str:
        return f"{indent}📊 [{data.get('title') or 'Untitled Database'}]"

    # ------------------------------------------------------------------
    # Placeholders
    # ------------------------------------------------------------------

    def _render_divider(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return f"{indent}---"

    def _render_table_of_contents(
        self, data: dict, indent: str, options: ConvertOptions, children: str
    ) -> str:
        return f"{indent}[TOC]"

    def _render_breadcrumb(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return f"{indent}<!-- Breadcrumb -->"

    def _render_template(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        return f"{indent}<!-- Template block -->"

    def _render_nothing(self, data: dict, indent: str, options: ConvertOptions, children: str) -> str:
        # column and table_row are rendered by their column_list / table.
        return ""

    # ------------------------------------------------------------------
    # Containers (async only)
    # ------------------------------------------------------------------

    async def _render_synced_block(
        self, block: dict, data: dict, options: ConvertOptions, fetch: FetchChildren
    ) -> str:
        children = await fetch(block["id"])
        return await self.render_blocks(children, options)

    async def _render_column_list(
        self, block: dict, data: dict, options: ConvertOptions, fetch: FetchChildren
    ) -> str:
        columns = await fetch(block["id"])
        contents: list[str] = []
        for column in columns:
            if not isinstance(column, dict) or column.get("type") != "column":
                continue
            if _fetcher(column, options) is None:
                continue
            column_children = await fetch(column["id"])
            content = await self.render_blocks(column_children, options)
            if content:
                contents.append(content)
        return COLUMN_SEPARATOR.join(contents)

    async def _render_table(
        self, block: dict, data: dict, options: ConvertOptions, fetch: FetchChildren
    ) -> str:
        indent = self._indent(options)
        rows = [
            row for row in await fetch(block["id"])
            if isinstance(row, dict) and row.get("type") == "table_row"
        ]
        lines: list[str] = []

        for i, row in enumerate(rows):
            cells = (row.get("table_row") or {}).get("cells") or []
            rendered = [render_rich_text(cell) for cell in cells]
            lines.append(f"{indent}| {' | '.join(rendered)} |")
            if i == 0 and data.get("has_column_header"):
                separator = " | ".join("---" for _ in cells)
                lines.append(f"{indent}| {separator} |")

        return "\n".join(lines)


# ------------------------------------------------------------------
# Dispatch tables
# ------------------------------------------------------------------

_BlockRenderer = _Callable[
    ["NotionToMarkdownRenderer", dict, str, ConvertOptions, str], str
]

_BLOCK_RENDERERS: dict[str, _BlockRenderer] = {
    "paragraph": NotionToMarkdownRenderer._render_paragraph,
    "heading_1": NotionToMarkdownRenderer._render_heading_1,
    "heading_2": NotionToMarkdownRenderer._render_heading_2,
    "heading_3": NotionToMarkdownRenderer._render_heading_3,
    "bulleted_list_item": NotionToMarkdownRenderer._render_bulleted_list_item,
    "numbered_list_item": NotionToMarkdownRenderer._render_numbered_list_item,
    "to_do": NotionToMarkdownRenderer._render_to_do,
    "toggle": NotionToMarkdownRenderer._render_toggle,
    "code": NotionToMarkdownRenderer._render_code,
    "quote": NotionToMarkdownRenderer._render_quote,
    "callout": NotionToMarkdownRenderer._render_callout,
    "divider": NotionToMarkdownRenderer._render_divider,
    "bookmark": NotionToMarkdownRenderer._render_bookmark,
    "image": NotionToMarkdownRenderer._render_image,
    "video": NotionToMarkdownRenderer._render_video,
    "audio": NotionToMarkdownRenderer._render_audio,
    "file": NotionToMarkdownRenderer._render_file,
    "pdf": NotionToMarkdownRenderer._render_pdf,
    "embed": NotionToMarkdownRenderer._render_embed,
    "table_of_contents": NotionToMarkdownRenderer._render_table_of_contents,
    "equation": NotionToMarkdownRenderer._render_equation,
    "child_page": NotionToMarkdownRenderer._render_child_page,
    "child_database": NotionToMarkdownRenderer._render_child_database,
    "link_preview": NotionToMarkdownRenderer._render_link_preview,
    "link_to_page": NotionToMarkdownRenderer._render_link_to_page,
    "column": NotionToMarkdownRenderer._render_nothing,
    "table_row": NotionToMarkdownRenderer._render_nothing,
    "breadcrumb": NotionToMarkdownRenderer._render_breadcrumb,
    "template": NotionToMarkdownRenderer._render_template,
}

_CONTAINER_RENDERERS = {
    "synced_block": NotionToMarkdownRenderer._render_synced_block,
    "column_list": NotionToMarkdownRenderer._render_column_list,
    "table": NotionToMarkdownRenderer._render_table,
}


# ------------------------------------------------------------------
# Module-level entry points
# ------------------------------------------------------------------

def render_sync(blocks: list[dict] | None, config: NotionmarkConfig | None = None) -> str:
    """Render *blocks* to Markdown without fetching children."""
    return NotionToMarkdownRenderer(config).render_blocks_sync(blocks)


async def render(
    blocks: list[dict] | None,
    fetch_children: FetchChildren | None = None,
    config: NotionmarkConfig | None = None,
) -> str:
    """Render *blocks* to Markdown, fetching nested content with *fetch_children*."""
    options = ConvertOptions(fetch_children=fetch_children)
    return await NotionToMarkdownRenderer(config).render_blocks(blocks, options)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def extract_file_url(data: Any) -> str:
    """Return the URL of a Notion file object (image, video, file, ...).

    Dispatches on ``data["type"]`` first (``external`` / ``file`` /
    ``file_upload``), then falls back to whichever of ``external.url``,
    ``file.url`` or ``url`` is present.
    """
    if not isinstance(data, dict):
        return ""

    file_type = data.get("type")
    if file_type == "external":
        typed = _url_of(data.get("external"))
    elif file_type in ("file", "file_upload"):
        typed = _url_of(data.get("file"))
    else:
        typed = ""
    if typed:
        return typed

    return _url_of(data.get("external")) or _url_of(data.get("file")) or data.get("url") or ""


def _url_of(obj: Any) -> str:
    if isinstance(obj, dict):
        return obj.get("url") or ""
    return ""


def _icon_text(icon: Any) -> str:
    if isinstance(icon, dict) and icon.get("type") == "emoji":
        return icon.get("emoji") or ""
    return ""


def _split(block: Any) -> tuple[str, dict | None]:
    """Return ``(type, payload)``; payload is ``None`` when it is missing."""
    if not isinstance(block, dict):
        return "unknown", None
    block_type = block.get("type") or "unknown"
    data = block.get(block_type)
    if isinstance(data, dict):
        return block_type, data
    if data is None and block_type in _PAYLOAD_OPTIONAL:
        return block_type, {}
    return block_type, None


def _fetcher(block: dict, options: ConvertOptions) -> FetchChildren | None:
    """Return the fetch capability if *block* has children that can be fetched."""
    if block.get("has_children") and block.get("id") and options.fetch_children is not None:
        return options.fetch_children
    return None


def _with_children(line: str, children: str) -> str:
    return f"{line}\n{children}" if children else line


def _numbered(options: ConvertOptions, list_index: int) -> ConvertOptions:
    return dataclasses.replace(options, list_index=list_index)


def _nested(options: ConvertOptions) -> ConvertOptions:
    return dataclasses.replace(options, indent_level=options.indent_level + 1, list_index=None)


def _next_list_index(block: Any, list_index: int) -> int:
    """Counter for the next sibling: +1 after a numbered item, else back to 1."""
    if isinstance(block, dict) and block.get("type") == "numbered_list_item":
        return list_index + 1
    return 1
