"""Flatten Notion page properties into primitive values.

A property record is ``{"type": P, P: value}`` as found in
``page["properties"][name]``.  :func:`flatten_property` reduces one record
to a ``str``, number, ``bool``, ``None`` or ``list[str]``; unknown
property types fall back to their JSON-encoded payload.

Nothing in this module raises for malformed input: missing or ``None``
values flatten to ``None`` (or ``[]`` for multi-valued types).

Usage::

    from notionmark.converter.properties import flatten_properties

    flatten_properties(page["properties"])
    # {"Name": "Launch plan", "Tags": ["Bug", "Feature"], "Done": False}
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from notionmark.models import PropertyValue, SimplePage, SimpleProperty

from .inline_renderer import rich_text_to_plain

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def flatten_properties(properties: dict[str, Any] | None) -> dict[str, PropertyValue]:
    """Map every property name to its flattened value.

    ``None`` or an empty mapping gives ``{}``.
    """
    if not properties:
        return {}
    return {name: flatten_property(prop) for name, prop in properties.items()}


def flatten_properties_to_list(properties: dict[str, Any] | None) -> list[SimpleProperty]:
    """Like :func:`flatten_properties` but keeps each property's type.

    Returns one :class:`SimpleProperty` per property, in mapping order.
    """
    if not properties:
        return []
    return [
        SimpleProperty(name=name, type=_property_type(prop), value=flatten_property(prop))
        for name, prop in properties.items()
    ]


def flatten_property(prop: Any) -> PropertyValue:
    """Flatten a single property record."""
    if not isinstance(prop, dict):
        return None

    prop_type = _property_type(prop)
    extractor = _EXTRACTORS.get(prop_type)
    if extractor is not None:
        return extractor(prop.get(prop_type))

    raw = prop.get(prop_type)
    if raw is None:
        return None
    return json.dumps(raw, ensure_ascii=False, default=str)


def page_to_simple(page: dict[str, Any]) -> SimplePage:
    """Reduce a page object to its id, URL and flattened properties."""
    return SimplePage(
        id=page.get("id", ""),
        url=page.get("url") or "",
        properties=flatten_properties(page.get("properties")),
    )


def pages_to_simple(pages: list[dict[str, Any]] | None) -> list[SimplePage]:
    """Apply :func:`page_to_simple` to every page."""
    if not pages:
        return []
    return [page_to_simple(page) for page in pages]


# ---------------------------------------------------------------------------
# Per-type extractors
# ---------------------------------------------------------------------------

def _property_type(prop: Any) -> str:
    if isinstance(prop, dict):
        return str(prop.get("type") or "")
    return ""


def _items(value: Any) -> list:
    return value if isinstance(value, list) else []


def _raw(value: Any) -> PropertyValue:
    return value


def _plain(value: Any) -> str:
    return rich_text_to_plain(_items(value))


def _name(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("name")
    return None


def _names(value: Any) -> list[str]:
    return [item.get("name") for item in _items(value) if isinstance(item, dict)]


def _user(value: Any) -> str | None:
    if not isinstance(value, dict):
        return None
    return value.get("name") or value.get("id")


def _users(value: Any) -> list[str]:
    return [_user(person) for person in _items(value) if isinstance(person, dict)]


def _ids(value: Any) -> list[str]:
    return [item.get("id") for item in _items(value) if isinstance(item, dict)]


def _date(value: Any) -> str | None:
    if not isinstance(value, dict):
        return None
    start = value.get("start")
    if value.get("end"):
        return f"{start} → {value['end']}"
    return start


def _date_start(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("start")
    return None


def _file_name(item: dict) -> str:
    if item.get("name"):
        return item["name"]
    for key in ("external", "file"):
        sub = item.get(key)
        if isinstance(sub, dict) and sub.get("url"):
            return sub["url"]
    return "file"


def _files(value: Any) -> list[str]:
    return [_file_name(item) for item in _items(value) if isinstance(item, dict)]


def _formula(value: Any) -> PropertyValue:
    if not isinstance(value, dict):
        return None
    inner = value.get("type")
    if inner in ("string", "number", "boolean"):
        return value.get(inner)
    if inner == "date":
        return _date_start(value.get("date"))
    return None


def _rollup(value: Any) -> PropertyValue:
    if not isinstance(value, dict):
        return None
    inner = value.get("type")
    if inner == "number":
        return value.get("number")
    if inner == "date":
        return _date_start(value.get("date"))
    if inner == "array":
        return f"[{len(value.get('array') or [])} items]"
    return None


def _unique_id(value: Any) -> str | None:
    if not isinstance(value, dict):
        return None
    number = value.get("number")
    if number is None:
        return None
    if value.get("prefix"):
        return f"{value['prefix']}-{number}"
    return str(number)


def _verification(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("state")
    return None


def _button(value: Any) -> str:
    return "[Button]"


_EXTRACTORS: dict[str, Callable[[Any], PropertyValue]] = {
    "title": _plain,
    "rich_text": _plain,
    "number": _raw,
    "checkbox": _raw,
    "url": _raw,
    "email": _raw,
    "phone_number": _raw,
    "created_time": _raw,
    "last_edited_time": _raw,
    "select": _name,
    "status": _name,
    "multi_select": _names,
    "date": _date,
    "relation": _ids,
    "people": _users,
    "files": _files,
    "created_by": _user,
    "last_edited_by": _user,
    "formula": _formula,
    "rollup": _rollup,
    "unique_id": _unique_id,
    "verification": _verification,
    "button": _button,
}
