"""Unit tests for inline_renderer.py.

Covers annotation wrapping order, links, equations, mentions and the
plain-text fallback.
"""

from notionmark.converter.inline_renderer import (
    render_rich_text,
    render_segment,
    rich_text_to_plain,
)


def _text(content, href=None, **annotations):
    seg = {
        "type": "text",
        "text": {"content": content, "link": {"url": href} if href else None},
        "plain_text": content,
        "annotations": {
            "bold": False,
            "italic": False,
            "strikethrough": False,
            "underline": False,
            "code": False,
            "color": "default",
            **annotations,
        },
        "href": href,
    }
    return seg


def _mention(mention, plain_text=""):
    return {"type": "mention", "mention": mention, "plain_text": plain_text}


# =========================================================================
# Plain text and annotations
# =========================================================================

class TestRenderPlainText:

    def test_none_and_empty(self):
        assert render_rich_text(None) == ""
        assert render_rich_text([]) == ""

    def test_segments_concatenate_without_separator(self):
        assert render_rich_text([_text("Hello "), _text("world")]) == "Hello world"

    def test_locally_built_segment_uses_text_content(self):
        assert render_rich_text([{"type": "text", "text": {"content": "hi"}}]) == "hi"

    def test_segment_without_type_is_text(self):
        assert render_segment({"plain_text": "x"}) == "x"

    def test_text_is_not_escaped(self):
        assert render_rich_text([_text("a *star* and [x]")]) == "a *star* and [x]"


class TestAnnotations:

    def test_bold(self):
        assert render_segment(_text("b", bold=True)) == "**b**"

    def test_italic(self):
        assert render_segment(_text("i", italic=True)) == "*i*"

    def test_bold_italic_is_triple_star(self):
        assert render_segment(_text("text", bold=True, italic=True)) == "***text***"

    def test_strikethrough(self):
        assert render_segment(_text("s", strikethrough=True)) == "~~s~~"

    def test_code(self):
        assert render_segment(_text("x = 1", code=True)) == "`x = 1`"

    def test_underline(self):
        assert render_segment(_text("u", underline=True)) == "<u>u</u>"

    def test_code_is_innermost(self):
        assert render_segment(_text("c", code=True, strikethrough=True)) == "~~`c`~~"

    def test_all_annotations(self):
        seg = _text(
            "t", bold=True, italic=True, strikethrough=True, underline=True, code=True,
        )
        assert render_segment(seg) == "<u>***~~`t`~~***</u>"

    def test_empty_text_ignores_annotations(self):
        seg = _text("", bold=True, italic=True, code=True, underline=True)
        assert render_segment(seg) == ""

    def test_missing_annotations(self):
        assert render_segment({"type": "text", "text": {"content": "x"}}) == "x"


# =========================================================================
# Links
# =========================================================================

class TestLinks:

    def test_text_link(self):
        assert render_segment(_text("docs", href="https://x.dev")) == "[docs](https://x.dev)"

    def test_link_wraps_formatting(self):
        seg = _text("docs", href="https://x.dev", bold=True)
        assert render_segment(seg) == "[**docs**](https://x.dev)"

    def test_code_drops_link(self):
        seg = _text("cmd", href="https://x.dev", code=True)
        assert render_segment(seg) == "`cmd`"

    def test_href_fallback(self):
        seg = {"type": "text", "text": {"content": "a"}, "plain_text": "a", "href": "https://h"}
        assert render_segment(seg) == "[a](https://h)"

    def test_text_link_wins_over_href(self):
        seg = {
            "type": "text",
            "text": {"content": "a", "link": {"url": "https://link"}},
            "href": "https://href",
        }
        assert render_segment(seg) == "[a](https://link)"


# =========================================================================
# Equations and mentions
# =========================================================================

class TestEquation:

    def test_inline_equation(self):
        seg = {"type": "equation", "equation": {"expression": "E=mc^2"}, "plain_text": "E=mc^2"}
        assert render_segment(seg) == "$E=mc^2$"

    def test_equation_ignores_annotations(self):
        seg = {
            "type": "equation",
            "equation": {"expression": "x"},
            "annotations": {"bold": True},
        }
        assert render_segment(seg) == "$x$"


class TestMentions:

    def test_user_with_name(self):
        seg = _mention({"type": "user", "user": {"id": "u1", "name": "Ada"}})
        assert render_segment(seg) == "@Ada"

    def test_user_without_name(self):
        seg = _mention({"type": "user", "user": {"id": "u1"}})
        assert render_segment(seg) == "@user"

    def test_page_uses_plain_text(self):
        seg = _mention({"type": "page", "page": {"id": "p1"}}, plain_text="Roadmap")
        assert render_segment(seg) == "Roadmap"

    def test_page_without_plain_text(self):
        seg = _mention({"type": "page", "page": {"id": "p1"}})
        assert render_segment(seg) == "[page](p1)"

    def test_database_without_plain_text(self):
        seg = _mention({"type": "database", "database": {"id": "d1"}})
        assert render_segment(seg) == "[database](d1)"

    def test_date_single(self):
        seg = _mention({"type": "date", "date": {"start": "2024-03-01"}})
        assert render_segment(seg) == "2024-03-01"

    def test_date_range(self):
        seg = _mention({"type": "date", "date": {"start": "2024-03-01", "end": "2024-03-05"}})
        assert render_segment(seg) == "2024-03-01 → 2024-03-05"

    def test_link_preview(self):
        seg = _mention({"type": "link_preview", "link_preview": {"url": "https://gh.dev/x"}})
        assert render_segment(seg) == "https://gh.dev/x"

    def test_other_mention_falls_back_to_plain_text(self):
        seg = _mention({"type": "template_mention", "template_mention": {}}, plain_text="@Today")
        assert render_segment(seg) == "@Today"

    def test_annotated_mention(self):
        seg = _mention({"type": "user", "user": {"name": "Ada"}})
        seg["annotations"] = {"bold": True}
        assert render_segment(seg) == "**@Ada**"


# =========================================================================
# Plain-text extraction
# =========================================================================

class TestRichTextToPlain:

    def test_ignores_styling(self):
        segs = [_text("Hello ", bold=True), _text("world", href="https://x")]
        assert rich_text_to_plain(segs) == "Hello world"

    def test_falls_back_to_content(self):
        assert rich_text_to_plain([{"type": "text", "text": {"content": "abc"}}]) == "abc"

    def test_skips_non_dicts(self):
        assert rich_text_to_plain([_text("a"), None, "junk", _text("b")]) == "ab"

    def test_empty(self):
        assert rich_text_to_plain(None) == ""
        assert rich_text_to_plain([]) == ""
