"""Markdown to Notion block conversion.

:class:`MarkdownToNotionConverter` scans Markdown one line at a time.  Each
line is tested against the constructs below in order; the first match wins
and consumes one or more lines.  There is no backtracking.

=====================  ===========================================
Construct              Block
=====================  ===========================================
blank line             (skipped)
`````lang`` fence      ``code`` (until the closing fence)
``$$x$$`` / ``$$``     ``equation`` (one line or until ``$$``)
``---``                ``divider``
``# .. ######``        ``heading_1`` .. ``heading_3`` (4-6 clamp to 3)
``- [ ]`` / ``- [x]``  ``to_do``
``-`` / ``*``          ``bulleted_list_item``
``1.``                 ``numbered_list_item``
``>``                  ``quote`` (consecutive ``>`` lines merged)
``![alt](url)``        ``image`` (external)
``<details>``          ``toggle`` (body parsed into ``children``)
``| a | b |``          ``table`` with ``table_row`` children
anything else          ``paragraph``
=====================  ===========================================

Text-bearing blocks get their ``rich_text`` from
:func:`~notionmark.converter.inline_parser.parse_inline_markdown`.
Oversized input is truncated, never rejected; each truncation is reported
as a :class:`ConversionWarning`.
"""

from __future__ import annotations

import logging
import re
import textwrap

from notionmark.config import NotionmarkConfig
from notionmark.models import ConversionResult, ConversionWarning
from notionmark.observability import get_logger, log_event, resolve_metrics

from .inline_parser import parse_inline_markdown

log = get_logger("notionmark.parser")

_FENCE = "```"
_EQUATION_FENCE = "$$"
_DETAILS_OPEN = "<details>"
_DETAILS_CLOSE = "</details>"

_DIVIDER_RE = re.compile(r"^-{3,}$")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_TODO_RE = re.compile(r"^-\s*\[([ xX])\]\s*(.*)$")
_BULLET_RE = re.compile(r"^[-*]\s+(.+)$")
_NUMBERED_RE = re.compile(r"^\d+\.\s+(.+)$")
_QUOTE_RE = re.compile(r"^>\s*(.*)$")
_IMAGE_RE = re.compile(r"^!\[([^\]]*)\]\(([^)]+)\)$")
_INLINE_EQUATION_RE = re.compile(r"^\$\$(.+)\$\$$")
_TABLE_SEPARATOR_CELL_RE = re.compile(r"^[\s:]*-{3,}[\s:]*$")
_SUMMARY_RE = re.compile(r"<summary>(.*?)</summary>")


class MarkdownToNotionConverter:
    """Convert Markdown text to Notion API block payloads.

    Parameters
    ----------
    config:
        Package configuration; supplies the input, line and code-block
        size caps.

    Examples
    --------
    >>> converter = MarkdownToNotionConverter()
    >>> result = converter.convert("# Hello\\n\\nWorld")
    >>> [block["type"] for block in result.blocks]
    ['heading_1', 'paragraph']
    """

    def __init__(self, config: NotionmarkConfig | None = None) -> None:
        self._config = config or NotionmarkConfig()
        self._metrics = resolve_metrics(self._config.metrics)

    def convert(self, markdown: str) -> ConversionResult:
        """Parse *markdown* into Notion blocks.

        Returns
        -------
        ConversionResult
            ``blocks`` in document order plus any truncation ``warnings``.
        """
        warnings: list[ConversionWarning] = []

        limit = self._config.max_input_length
        if len(markdown) > limit:
            warnings.append(self._warn(
                "INPUT_TRUNCATED",
                f"Markdown input truncated from {len(markdown)} to {limit} characters",
                length=len(markdown), limit=limit,
            ))
            markdown = markdown[:limit]

        blocks = _LineScanner(markdown.split("\n"), self, warnings).scan()

        self._metrics.increment("notionmark.blocks_parsed_total", value=len(blocks))
        if warnings:
            self._metrics.increment("notionmark.conversion_warnings_total", value=len(warnings))
        return ConversionResult(blocks=blocks, warnings=warnings)

    def rich_text(self, text: str) -> list[dict]:
        """Inline-parse *text* with the configured line-length cap."""
        return parse_inline_markdown(text, self._config.max_line_length)

    @property
    def max_code_block_lines(self) -> int:
        return self._config.max_code_block_lines

    def _warn(self, code: str, message: str, **context: object) -> ConversionWarning:
        log_event(log, logging.WARNING, message, op="parse", code=code, **context)
        return ConversionWarning(code=code, message=message, context=dict(context))


class _LineScanner:
    """Cursor over the lines of one document."""

    def __init__(
        self,
        lines: list[str],
        converter: MarkdownToNotionConverter,
        warnings: list[ConversionWarning],
    ) -> None:
        self._lines = lines
        self._pos = 0
        self._converter = converter
        self._warnings = warnings

    def scan(self) -> list[dict]:
        blocks: list[dict] = []
        while self._pos < len(self._lines):
            block = self._next_block()
            if block is not None:
                blocks.append(block)
        return blocks

    def _next_block(self) -> dict | None:
        line = self._lines[self._pos]
        stripped = line.strip()

        if not stripped:
            self._pos += 1
            return None

        if line.startswith(_FENCE):
            return self._code_block(line)

        if stripped == _EQUATION_FENCE or _INLINE_EQUATION_RE.match(stripped):
            return self._equation_block(stripped)

        if _DIVIDER_RE.match(stripped):
            self._pos += 1
            return {"type": "divider", "divider": {}}

        if m := _HEADING_RE.match(line):
            self._pos += 1
            level = min(len(m.group(1)), 3)
            return self._text_block(f"heading_{level}", m.group(2))

        if m := _TODO_RE.match(line):
            self._pos += 1
            return self._text_block("to_do", m.group(2), checked=m.group(1).lower() == "x")

        if m := _BULLET_RE.match(line):
            self._pos += 1
            return self._text_block("bulleted_list_item", m.group(1))

        if m := _NUMBERED_RE.match(line):
            self._pos += 1
            return self._text_block("numbered_list_item", m.group(1))

        if m := _QUOTE_RE.match(line):
            return self._quote_block(m.group(1))

        if m := _IMAGE_RE.match(line):
            self._pos += 1
            return _image_block(m.group(1), m.group(2))

        if stripped.startswith(_DETAILS_OPEN):
            return self._toggle_block(stripped)

        if _is_table_line(stripped):
            return self._table_block()

        self._pos += 1
        return self._text_block("paragraph", line)

    # ------------------------------------------------------------------
    # Multi-line constructs
    # ------------------------------------------------------------------

    def _code_block(self, opening: str) -> dict:
        language = opening[len(_FENCE):].strip() or "plain text"
        cap = self._converter.max_code_block_lines
        code_lines: list[str] = []
        truncated = False
        self._pos += 1

        while self._pos < len(self._lines) and not self._lines[self._pos].startswith(_FENCE):
            if len(code_lines) < cap:
                code_lines.append(self._lines[self._pos])
            elif not truncated:
                truncated = True
                self._warnings.append(self._converter._warn(
                    "CODE_BLOCK_TRUNCATED",
                    f"Code block truncated to {cap} lines",
                    limit=cap, line=self._pos + 1,
                ))
            self._pos += 1

        # Closing fence (absent at end of input).
        self._pos += 1

        return {
            "type": "code",
            "code": {
                "rich_text": [{"type": "text", "text": {"content": "\n".join(code_lines)}}],
                "language": language,
            },
        }

    def _equation_block(self, stripped: str) -> dict:
        if m := _INLINE_EQUATION_RE.match(stripped):
            self._pos += 1
            return {"type": "equation", "equation": {"expression": m.group(1).strip()}}

        expression_lines: list[str] = []
        self._pos += 1
        while self._pos < len(self._lines) and self._lines[self._pos].strip() != _EQUATION_FENCE:
            expression_lines.append(self._lines[self._pos])
            self._pos += 1
        self._pos += 1
        return {
            "type": "equation",
            "equation": {"expression": "\n".join(expression_lines).strip()},
        }

    def _quote_block(self, first: str) -> dict:
        quote_lines = [first]
        self._pos += 1
        while self._pos < len(self._lines) and self._lines[self._pos].startswith(">"):
            quote_lines.append(_QUOTE_RE.match(self._lines[self._pos]).group(1))
            self._pos += 1
        return self._text_block("quote", "\n".join(quote_lines))

    def _toggle_block(self, opening: str) -> dict:
        self._pos += 1
        summary = _SUMMARY_RE.search(opening)
        if summary is None and self._pos < len(self._lines):
            summary = _SUMMARY_RE.search(self._lines[self._pos])
            if summary is not None:
                self._pos += 1
        title = summary.group(1) if summary else ""

        body: list[str] = []
        depth = 0 if _DETAILS_CLOSE in opening else 1
        while depth and self._pos < len(self._lines):
            line = self._lines[self._pos]
            self._pos += 1
            if _DETAILS_OPEN in line:
                depth += 1
            if _DETAILS_CLOSE in line:
                depth -= 1
                if not depth:
                    break
            body.append(line)

        # Nested content is rendered indented one level; parse it flush left.
        body_lines = textwrap.dedent("\n".join(body)).split("\n")
        children = _LineScanner(body_lines, self._converter, self._warnings).scan()
        return {
            "type": "toggle",
            "toggle": {"rich_text": self._converter.rich_text(title), "children": children},
        }

    def _table_block(self) -> dict | None:
        rows: list[list[str]] = []
        separator_at: int | None = None

        while self._pos < len(self._lines):
            stripped = self._lines[self._pos].strip()
            if not _is_table_line(stripped):
                break
            cells = [cell.strip() for cell in stripped[1:-1].split("|")]
            if separator_at is None and all(_TABLE_SEPARATOR_CELL_RE.match(c) for c in cells):
                separator_at = len(rows)
            else:
                rows.append(cells)
            self._pos += 1

        if not rows:
            return None

        # Every row must carry exactly table_width cells.
        width = len(rows[0])
        return {
            "type": "table",
            "table": {
                "table_width": width,
                "has_column_header": separator_at == 1,
                "has_row_header": False,
                "children": [
                    {
                        "type": "table_row",
                        "table_row": {
                            "cells": [
                                self._converter.rich_text(c)
                                for c in (row + [""] * width)[:width]
                            ],
                        },
                    }
                    for row in rows
                ],
            },
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _text_block(self, block_type: str, text: str, **extra: object) -> dict:
        return {
            "type": block_type,
            block_type: {"rich_text": self._converter.rich_text(text), **extra},
        }


def _image_block(alt: str, url: str) -> dict:
    caption = [{"type": "text", "text": {"content": alt}}] if alt else []
    return {
        "type": "image",
        "image": {
            "type": "external",
            "external": {"url": url},
            "caption": caption,
        },
    }


def _is_table_line(stripped: str) -> bool:
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def parse(markdown: str, config: NotionmarkConfig | None = None) -> list[dict]:
    """Parse *markdown* into a list of Notion block dicts."""
    return MarkdownToNotionConverter(config).convert(markdown).blocks
