"""Inline parsing: one line of Markdown to a Notion rich_text array.

Recognised markers::

    [text](url)   **bold**   *italic*   ~~strike~~   `code`

Each marker is found by its own regex scan over the whole line.  All
matches are then ordered by start offset and kept greedily: a match
survives only if it starts at or after the end of the previous survivor.
Overlapping candidates are discarded and their delimiters stay in the
surrounding plain text.  Markers do not nest; each kept match yields one
segment carrying exactly one annotation (or a link).
"""

from __future__ import annotations

import re
from typing import NamedTuple

from notionmark.config import DEFAULT_MAX_LINE_LENGTH

# Scan order matters: on equal start offsets the earlier pattern wins.
_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("link", re.compile(r"\[([^\]]+)\]\(([^)]+)\)")),
    ("bold", re.compile(r"\*\*([^*]+)\*\*")),
    ("italic", re.compile(r"(?<!\*)\*([^*]+)\*(?!\*)")),
    ("strikethrough", re.compile(r"~~([^~]+)~~")),
    ("code", re.compile(r"`([^`]+)`")),
)


class _Match(NamedTuple):
    start: int
    end: int
    kind: str
    content: str
    url: str | None


def parse_inline_markdown(
    text: str,
    max_length: int = DEFAULT_MAX_LINE_LENGTH,
) -> list[dict]:
    """Convert inline Markdown markers in *text* to rich_text segments.

    Parameters
    ----------
    text:
        A single line (or a newline-joined quote) of Markdown.
    max_length:
        Only the first *max_length* characters are parsed.

    Returns
    -------
    list[dict]
        Request-shaped rich_text segments.  Empty input gives ``[]``.
    """
    if len(text) > max_length:
        text = text[:max_length]
    if not text:
        return []

    segments: list[dict] = []
    cursor = 0
    for match in _select(_scan(text)):
        if match.start > cursor:
            segments.append(_plain(text[cursor:match.start]))
        segments.append(_styled(match))
        cursor = match.end

    if cursor < len(text):
        segments.append(_plain(text[cursor:]))

    return segments


def _scan(text: str) -> list[_Match]:
    found: list[_Match] = []
    for kind, pattern in _PATTERNS:
        for m in pattern.finditer(text):
            url = m.group(2) if kind == "link" else None
            found.append(_Match(m.start(), m.end(), kind, m.group(1), url))
    # sort() is stable, so ties keep pattern scan order.
    found.sort(key=lambda m: m.start)
    return found


def _select(matches: list[_Match]) -> list[_Match]:
    kept: list[_Match] = []
    last_end = 0
    for match in matches:
        if match.start >= last_end:
            kept.append(match)
            last_end = match.end
    return kept


def _plain(content: str) -> dict:
    return {"type": "text", "text": {"content": content}}


def _styled(match: _Match) -> dict:
    if match.kind == "link":
        return {
            "type": "text",
            "text": {"content": match.content, "link": {"url": match.url}},
            "annotations": {},
        }
    return {
        "type": "text",
        "text": {"content": match.content},
        "annotations": {match.kind: True},
    }
