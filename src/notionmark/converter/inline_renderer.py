"""Inline rendering: Notion rich_text arrays to Markdown strings.

Handles the three segment types the Notion API returns inside a block or
property:

* ``"text"`` -- text with optional annotations and link.
* ``"mention"`` -- user / page / database / date / link_preview mentions.
* ``"equation"`` -- inline LaTeX, rendered as ``$expression$``.

Annotation wrapping order (innermost first)::

    code -> strikethrough -> italic -> bold -> underline -> link

Italic is applied before bold, so a bold+italic segment comes out as
``***text***``.  Text content is emitted verbatim (no Markdown escaping).
"""

from __future__ import annotations

from typing import Any


def render_rich_text(segments: list[dict] | None) -> str:
    """Render a Notion rich_text array to a Markdown string.

    Parameters
    ----------
    segments:
        Notion rich_text objects.  ``None`` is treated as empty.

    Returns
    -------
    str
        The formatted segments concatenated in order, with no separator.
    """
    if not segments:
        return ""
    return "".join(render_segment(seg) for seg in segments)


def rich_text_to_plain(segments: list[dict] | None) -> str:
    """Concatenate the ``plain_text`` of every segment, ignoring styling.

    Locally built segments without ``plain_text`` fall back to
    ``text.content``.
    """
    if not segments:
        return ""
    return "".join(_plain_text(seg) for seg in segments if isinstance(seg, dict))


def render_segment(seg: dict) -> str:
    """Render a single rich_text segment."""
    seg_type = seg.get("type", "text")

    # Equations never carry annotations or links.
    if seg_type == "equation":
        expression = (seg.get("equation") or {}).get("expression", "")
        return f"${expression}$"

    if seg_type == "mention":
        text = _mention_text(seg)
    else:
        text = _plain_text(seg)

    if not text:
        return ""

    annotations = seg.get("annotations") or {}
    is_code = bool(annotations.get("code"))

    if is_code:
        text = f"`{text}`"
    if annotations.get("strikethrough"):
        text = f"~~{text}~~"
    if annotations.get("italic"):
        text = f"*{text}*"
    if annotations.get("bold"):
        text = f"**{text}**"
    if annotations.get("underline"):
        text = f"<u>{text}</u>"

    # Links inside code spans are dropped.
    href = _link_url(seg)
    if href and not is_code:
        text = f"[{text}]({href})"

    return text


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _plain_text(seg: dict) -> str:
    # API responses use "plain_text"; locally built segments use "text.content".
    return seg.get("plain_text") or (seg.get("text") or {}).get("content") or ""


def _mention_text(seg: dict) -> str:
    mention: dict[str, Any] = seg.get("mention") or {}
    mention_type = mention.get("type", "")
    plain = seg.get("plain_text") or ""

    if mention_type == "user":
        user = mention.get("user") or {}
        return f"@{user.get('name') or 'user'}"

    if mention_type in ("page", "database"):
        target_id = (mention.get(mention_type) or {}).get("id", "")
        return plain or f"[{mention_type}]({target_id})"

    if mention_type == "date":
        date = mention.get("date") or {}
        text = date.get("start") or ""
        if date.get("end"):
            text += f" → {date['end']}"
        return text

    if mention_type == "link_preview":
        return (mention.get("link_preview") or {}).get("url") or ""

    return plain


def _link_url(seg: dict) -> str | None:
    link = (seg.get("text") or {}).get("link") if seg.get("type", "text") == "text" else None
    if link and link.get("url"):
        return link["url"]
    return seg.get("href") or None
