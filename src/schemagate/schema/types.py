"""Type vocabulary, JSON kind classification and type resolution."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Union

from .context import NormalizationContext

SchemaNode = Dict[str, Any]
ResolvedType = Union[str, List[str]]

NULL = "null"
BOOLEAN = "boolean"
OBJECT = "object"
ARRAY = "array"
NUMBER = "number"
STRING = "string"
INTEGER = "integer"

VALID_TYPES = frozenset({NULL, BOOLEAN, OBJECT, ARRAY, NUMBER, STRING, INTEGER})

STRING_HINT_KEYS = ("pattern", "format", "minLength", "maxLength")
NUMERIC_HINT_KEYS = ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum", "multipleOf")


def json_kind(value: Any) -> Optional[str]:
    """Classify a parsed JSON value, or return None for anything json can't produce."""
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, list):
        return ARRAY
    if isinstance(value, dict):
        return OBJECT
    return None


def is_number(value: Any) -> bool:
    return json_kind(value) == NUMBER


def encode_value(value: Any) -> Optional[str]:
    """Canonical JSON text for a value, or None when it cannot be serialized."""
    try:
        return json.dumps(value, sort_keys=True, ensure_ascii=False, default=repr)
    except (ValueError, TypeError, RecursionError):
        return None


def _identity(value: Any) -> str:
    # bool and int compare equal in Python but are distinct JSON values.
    text = encode_value(value)
    if text is None:
        text = f"id:{id(value)}"
    return f"{json_kind(value)}:{text}"


def dedupe(values: Iterable[Any]) -> List[Any]:
    """Deduplicate by JSON value equality, keeping first occurrences."""
    seen: set[str] = set()
    result: List[Any] = []
    for value in values:
        key = _identity(value)
        if key in seen:
            continue
        seen.add(key)
        result.append(value)
    return result


def collapse(types: List[str]) -> Optional[ResolvedType]:
    if not types:
        return None
    return types[0] if len(types) == 1 else types


def type_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [entry for entry in value if isinstance(entry, str)]
    return []


def type_includes(value: Any, *candidates: str) -> bool:
    types = type_list(value)
    return any(candidate in types for candidate in candidates)


def normalize_type(value: Any, ctx: NormalizationContext) -> Optional[ResolvedType]:
    """Validate an explicit ``type`` against the vocabulary."""
    if isinstance(value, str):
        if value in VALID_TYPES:
            return value
        ctx.sink.warn(f"Dropped unsupported type '{value}' at {ctx.location}")
        return None

    if isinstance(value, list):
        collected: List[str] = []
        for entry in value:
            if isinstance(entry, str) and entry in VALID_TYPES:
                if entry not in collected:
                    collected.append(entry)
                continue
            ctx.sink.warn(f"Dropped unsupported type '{entry}' at {ctx.location}")
        return collapse(collected)

    ctx.sink.warn(f"Discarded non-string type value at {ctx.location}")
    return None


def infer_type(node: SchemaNode) -> Optional[ResolvedType]:
    """Derive a type from the structure of an untyped node."""
    if (
        isinstance(node.get("properties"), dict)
        or isinstance(node.get("patternProperties"), dict)
        or "additionalProperties" in node
    ):
        return OBJECT

    if "items" in node:
        return ARRAY

    enum = node.get("enum")
    if isinstance(enum, list) and enum:
        kinds: List[str] = []
        for entry in enum:
            kind = json_kind(entry) if encode_value(entry) is not None else None
            if kind is not None and kind not in kinds:
                kinds.append(kind)
        resolved = collapse(kinds)
        if resolved is not None:
            return resolved

    if "const" in node and encode_value(node["const"]) is not None:
        kind = json_kind(node["const"])
        if kind is not None:
            return kind

    if any(key in node for key in STRING_HINT_KEYS):
        return STRING

    if any(key in node for key in NUMERIC_HINT_KEYS):
        return NUMBER

    if "default" in node and encode_value(node["default"]) is not None:
        return json_kind(node["default"])

    return None


def apply_nullable(resolved: Optional[ResolvedType]) -> Optional[ResolvedType]:
    """Union ``null`` into a resolved type."""
    if resolved is None:
        return None
    if isinstance(resolved, str):
        return NULL if resolved == NULL else [resolved, NULL]
    if NULL in resolved:
        return resolved
    return [*resolved, NULL]


def resolve_type(node: SchemaNode, ctx: NormalizationContext) -> Optional[ResolvedType]:
    resolved = normalize_type(node["type"], ctx) if "type" in node else None
    if resolved is None:
        resolved = infer_type(node)
    if node.get("nullable") is True:
        resolved = apply_nullable(resolved)
    return resolved
