"""Keyword filter for the supported schema subset."""

from __future__ import annotations

from typing import Any, Dict

from .context import NormalizationContext

# Emission order of normalized nodes. ``nullable`` is consumed, never emitted.
KEYWORD_ORDER = (
    "type",
    "title",
    "description",
    "enum",
    "const",
    "default",
    "optional",
    # string
    "pattern",
    "format",
    "minLength",
    "maxLength",
    # numeric
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    # array
    "items",
    "minItems",
    "maxItems",
    "uniqueItems",
    "contains",
    # object
    "properties",
    "patternProperties",
    "additionalProperties",
    "minProperties",
    "maxProperties",
    "required",
)

SUPPORTED_KEYWORDS = frozenset({*KEYWORD_ORDER, "nullable"})


def filter_keywords(node: Dict[str, Any], ctx: NormalizationContext) -> Dict[str, Any]:
    """Return a shallow copy of ``node`` without unsupported keywords."""
    cleaned: Dict[str, Any] = {}
    for key, value in node.items():
        if key not in SUPPORTED_KEYWORDS:
            ctx.sink.warn(f"Removed unsupported keyword '{key}' at {ctx.location}")
            continue
        cleaned[key] = value
    return cleaned


def canonical_order(node: Dict[str, Any]) -> Dict[str, Any]:
    return {key: node[key] for key in KEYWORD_ORDER if key in node}
