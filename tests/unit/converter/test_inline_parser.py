"""Unit tests for inline_parser.py."""

import pytest

from notionmark.converter.inline_parser import parse_inline_markdown


def _plain(content):
    return {"type": "text", "text": {"content": content}}


def _styled(content, kind):
    return {"type": "text", "text": {"content": content}, "annotations": {kind: True}}


def _link(content, url):
    return {
        "type": "text",
        "text": {"content": content, "link": {"url": url}},
        "annotations": {},
    }


class TestSingleMarkers:

    def test_empty(self):
        assert parse_inline_markdown("") == []

    def test_plain(self):
        assert parse_inline_markdown("just text") == [_plain("just text")]

    @pytest.mark.parametrize(
        ("markdown", "content", "kind"),
        [
            ("**bold**", "bold", "bold"),
            ("*italic*", "italic", "italic"),
            ("~~gone~~", "gone", "strikethrough"),
            ("`x = 1`", "x = 1", "code"),
        ],
    )
    def test_annotation(self, markdown, content, kind):
        assert parse_inline_markdown(markdown) == [_styled(content, kind)]

    def test_link(self):
        assert parse_inline_markdown("[docs](https://x.dev)") == [_link("docs", "https://x.dev")]

    def test_surrounding_text_kept(self):
        assert parse_inline_markdown("a **b** c") == [
            _plain("a "),
            _styled("b", "bold"),
            _plain(" c"),
        ]


class TestSequencing:

    def test_multiple_markers_in_order(self):
        assert parse_inline_markdown("**b** and *i* then `c`") == [
            _styled("b", "bold"),
            _plain(" and "),
            _styled("i", "italic"),
            _plain(" then "),
            _styled("c", "code"),
        ]

    def test_adjacent_markers(self):
        assert parse_inline_markdown("**a**~~b~~") == [
            _styled("a", "bold"),
            _styled("b", "strikethrough"),
        ]

    def test_unclosed_marker_is_plain(self):
        assert parse_inline_markdown("**open and `tick") == [_plain("**open and `tick")]


class TestOverlap:

    def test_earliest_match_wins(self):
        # The code span starts first; the bold inside it is discarded.
        assert parse_inline_markdown("`a **b** c`") == [_styled("a **b** c", "code")]

    def test_link_text_is_not_reparsed(self):
        assert parse_inline_markdown("[**x**](https://u)") == [_link("**x**", "https://u")]

    def test_markers_do_not_nest(self):
        # Bold cannot span the inner italic; its delimiters stay as text.
        assert parse_inline_markdown("**a *b* c**") == [
            _plain("**a "),
            _styled("b", "italic"),
            _plain(" c**"),
        ]

    def test_italic_not_matched_inside_bold_delimiters(self):
        assert parse_inline_markdown("**b**") == [_styled("b", "bold")]


class TestLimits:

    def test_input_truncated_to_max_length(self):
        assert parse_inline_markdown("abcdef", max_length=3) == [_plain("abc")]

    def test_truncation_can_cut_a_marker(self):
        assert parse_inline_markdown("**bold**", max_length=6) == [_plain("**bold")]
