"""Description synthesis for schema nodes and function declarations."""

from __future__ import annotations

import json
import re
from typing import Any, Dict

from .types import ARRAY, type_includes, type_list

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[_-]+")
_WHITESPACE = re.compile(r"\s+")


def humanize_name(value: str) -> str:
    """Turn ``userName``/``user_name``/``user-name`` into ``User name``."""
    text = _CAMEL_BOUNDARY.sub(r"\1 \2", value)
    text = _SEPARATORS.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text[:1].upper() + text[1:]


def _render_json(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, default=repr)
    except (ValueError, TypeError, RecursionError):
        return repr(value)


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return _render_json(value)


def generate_description(name: str, schema: Dict[str, Any]) -> str:
    """Build a human-readable description from a normalized node.

    The declared ``title`` wins over ``name``. Enum, const, format and pattern
    are more informative than the bare type, so they take priority in that
    order.
    """
    title = schema.get("title")
    label = humanize_name(title if isinstance(title, str) and title else name) or "Value"

    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return f"{label}. Allowed values: {', '.join(_render_value(v) for v in enum)}."

    if "const" in schema:
        return f"{label}. Must equal {_render_json(schema['const'])}."

    fmt = schema.get("format")
    if isinstance(fmt, str) and fmt:
        return f"{label} in {fmt} format."

    pattern = schema.get("pattern")
    if isinstance(pattern, str) and pattern:
        return f"{label} matching pattern {pattern}."

    items = schema.get("items")
    if type_includes(schema.get("type"), ARRAY) and isinstance(items, dict):
        item_types = type_list(items.get("type"))
        item_label = " or ".join(item_types) if item_types else "items"
        return f"Array of {humanize_name(item_label)} for {label}."

    types = type_list(schema.get("type"))
    if types:
        return f"{label} ({' or '.join(types)})."

    return f"{label}."


def generate_function_description(name: str) -> str:
    return f"Execute {humanize_name(name)}."
