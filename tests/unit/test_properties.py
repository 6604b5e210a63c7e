"""Tests for the page property flattener."""

from __future__ import annotations

import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from notionmark.converter.properties import (
    _EXTRACTORS,
    flatten_properties,
    flatten_properties_to_list,
    flatten_property,
    page_to_simple,
    pages_to_simple,
)
from notionmark.models import SimplePage, SimpleProperty


def _rt(*parts):
    return [{"type": "text", "text": {"content": p}, "plain_text": p} for p in parts]


def prop(prop_type, value):
    return {"id": "x", "type": prop_type, prop_type: value}


# =========================================================================
# Per-type extraction
# =========================================================================

class TestTextTypes:

    def test_title_concatenates_plain_text(self):
        assert flatten_property(prop("title", _rt("Launch ", "plan"))) == "Launch plan"

    def test_rich_text(self):
        assert flatten_property(prop("rich_text", _rt("notes"))) == "notes"

    def test_empty_title(self):
        assert flatten_property(prop("title", [])) == ""

    def test_title_ignores_annotations(self):
        value = [{
            "type": "text",
            "text": {"content": "bold"},
            "plain_text": "bold",
            "annotations": {"bold": True},
        }]
        assert flatten_property(prop("title", value)) == "bold"


class TestScalarTypes:

    @pytest.mark.parametrize(
        ("prop_type", "value"),
        [
            ("number", 42),
            ("number", 3.5),
            ("number", None),
            ("checkbox", True),
            ("checkbox", False),
            ("url", "https://x.dev"),
            ("email", "a@b.c"),
            ("phone_number", "+1 555"),
            ("created_time", "2024-01-01T00:00:00.000Z"),
            ("last_edited_time", "2024-02-01T00:00:00.000Z"),
        ],
    )
    def test_raw_value(self, prop_type, value):
        assert flatten_property(prop(prop_type, value)) == value


class TestSelectTypes:

    def test_select(self):
        assert flatten_property(prop("select", {"id": "1", "name": "High"})) == "High"

    def test_select_empty(self):
        assert flatten_property(prop("select", None)) is None

    def test_status(self):
        assert flatten_property(prop("status", {"name": "Done"})) == "Done"

    def test_multi_select(self):
        value = [{"name": "Bug"}, {"name": "Feature"}]
        assert flatten_property(prop("multi_select", value)) == ["Bug", "Feature"]

    def test_multi_select_empty(self):
        assert flatten_property(prop("multi_select", [])) == []

    def test_tags_scenario(self):
        properties = {"Tags": prop("multi_select", [{"name": "Bug"}, {"name": "Feature"}])}
        assert flatten_properties(properties) == {"Tags": ["Bug", "Feature"]}


class TestDateAndPeople:

    def test_date_start_only(self):
        assert flatten_property(prop("date", {"start": "2024-05-01", "end": None})) == "2024-05-01"

    def test_date_range(self):
        value = {"start": "2024-05-01", "end": "2024-05-03"}
        assert flatten_property(prop("date", value)) == "2024-05-01 → 2024-05-03"

    def test_date_empty(self):
        assert flatten_property(prop("date", None)) is None

    def test_people(self):
        value = [{"id": "u1", "name": "Ada"}, {"id": "u2"}]
        assert flatten_property(prop("people", value)) == ["Ada", "u2"]

    def test_created_by(self):
        assert flatten_property(prop("created_by", {"id": "u1", "name": "Ada"})) == "Ada"
        assert flatten_property(prop("last_edited_by", {"id": "u9"})) == "u9"

    def test_relation(self):
        assert flatten_property(prop("relation", [{"id": "p1"}, {"id": "p2"}])) == ["p1", "p2"]


class TestFiles:

    def test_name_preferred(self):
        value = [{"name": "spec.pdf", "type": "file", "file": {"url": "https://s3/spec.pdf"}}]
        assert flatten_property(prop("files", value)) == ["spec.pdf"]

    def test_url_fallbacks(self):
        value = [
            {"type": "external", "external": {"url": "https://e"}},
            {"type": "file", "file": {"url": "https://f"}},
            {"type": "file"},
        ]
        assert flatten_property(prop("files", value)) == ["https://e", "https://f", "file"]


class TestComputedTypes:

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ({"type": "string", "string": "abc"}, "abc"),
            ({"type": "number", "number": 7}, 7),
            ({"type": "boolean", "boolean": False}, False),
            ({"type": "date", "date": {"start": "2024-01-01", "end": "2024-01-02"}}, "2024-01-01"),
            ({"type": "date", "date": None}, None),
            ({"type": "mystery"}, None),
        ],
    )
    def test_formula(self, value, expected):
        assert flatten_property(prop("formula", value)) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ({"type": "number", "number": 12}, 12),
            ({"type": "date", "date": {"start": "2024-06-01"}}, "2024-06-01"),
            ({"type": "array", "array": [{}, {}, {}]}, "[3 items]"),
            ({"type": "array", "array": []}, "[0 items]"),
            ({"type": "incomplete"}, None),
        ],
    )
    def test_rollup(self, value, expected):
        assert flatten_property(prop("rollup", value)) == expected

    def test_unique_id(self):
        assert flatten_property(prop("unique_id", {"prefix": "TASK", "number": 12})) == "TASK-12"
        assert flatten_property(prop("unique_id", {"prefix": None, "number": 5})) == "5"
        assert flatten_property(prop("unique_id", {"prefix": "T", "number": None})) is None

    def test_verification(self):
        assert flatten_property(prop("verification", {"state": "verified"})) == "verified"

    def test_button(self):
        assert flatten_property(prop("button", {})) == "[Button]"


class TestFallbacks:

    def test_unknown_type_is_json(self):
        value = {"nested": ["é", 1]}
        result = flatten_property(prop("place", value))
        assert json.loads(result) == value
        assert "é" in result

    def test_unknown_type_without_value(self):
        assert flatten_property({"type": "place"}) is None

    def test_not_a_dict(self):
        assert flatten_property(None) is None
        assert flatten_property("title") is None

    def test_missing_type(self):
        assert flatten_property({"title": _rt("x")}) is None

    def test_malformed_multi_value(self):
        assert flatten_property(prop("multi_select", None)) == []
        assert flatten_property(prop("people", "nope")) == []


_MULTI_VALUED = {"multi_select", "relation", "people", "files"}
_TEXT_VALUED = {"title", "rich_text"}


def _empty_value(prop_type):
    if prop_type in _MULTI_VALUED:
        return []
    if prop_type in _TEXT_VALUED:
        return ""
    if prop_type == "button":
        return "[Button]"
    return None


class TestEmptyValues:

    @pytest.mark.parametrize("prop_type", sorted(_EXTRACTORS))
    def test_null_value(self, prop_type):
        assert flatten_property(prop(prop_type, None)) == _empty_value(prop_type)

    @pytest.mark.parametrize("prop_type", sorted(_EXTRACTORS))
    def test_absent_value(self, prop_type):
        assert flatten_property({"id": "x", "type": prop_type}) == _empty_value(prop_type)

    @pytest.mark.parametrize("prop_type", sorted(_EXTRACTORS))
    def test_wrong_shape_value(self, prop_type):
        # Never raises, whatever the payload shape.
        flatten_property(prop(prop_type, "garbage"))
        flatten_property(prop(prop_type, 12))


# =========================================================================
# Collections
# =========================================================================

class TestFlattenProperties:

    def test_empty(self):
        assert flatten_properties(None) == {}
        assert flatten_properties({}) == {}

    def test_keeps_names_and_order(self):
        properties = {
            "Name": prop("title", _rt("Doc")),
            "Done": prop("checkbox", True),
            "Score": prop("number", 9),
        }
        flat = flatten_properties(properties)
        assert flat == {"Name": "Doc", "Done": True, "Score": 9}
        assert list(flat) == ["Name", "Done", "Score"]

    def test_to_list(self):
        properties = {"Name": prop("title", _rt("Doc")), "Tags": prop("multi_select", [])}
        assert flatten_properties_to_list(properties) == [
            SimpleProperty(name="Name", type="title", value="Doc"),
            SimpleProperty(name="Tags", type="multi_select", value=[]),
        ]

    def test_to_list_empty(self):
        assert flatten_properties_to_list(None) == []

    @given(st.dictionaries(st.text(min_size=1), st.integers() | st.none()))
    def test_numbers_pass_through(self, values):
        properties = {name: prop("number", v) for name, v in values.items()}
        assert flatten_properties(properties) == values


class TestSimplePages:

    def test_page_to_simple(self):
        page = {
            "object": "page",
            "id": "p1",
            "url": "https://notion.so/p1",
            "properties": {"Name": prop("title", _rt("Doc"))},
        }
        simple = page_to_simple(page)
        assert simple == SimplePage(id="p1", url="https://notion.so/p1", properties={"Name": "Doc"})
        assert simple.to_dict() == {
            "id": "p1", "url": "https://notion.so/p1", "properties": {"Name": "Doc"},
        }

    def test_missing_fields(self):
        assert page_to_simple({}) == SimplePage(id="", url="", properties={})

    def test_pages_to_simple(self):
        pages = [{"id": "a", "properties": {}}, {"id": "b", "properties": {}}]
        assert [p.id for p in pages_to_simple(pages)] == ["a", "b"]
        assert pages_to_simple(None) == []
