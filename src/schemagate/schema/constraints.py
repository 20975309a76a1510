"""Type-gated copying of format-specific keywords.

Each assigner copies the keywords of one type family from the cleaned input
node onto the output node. A family applies when the resolved type includes
it, or, for an untyped node, when one of its keywords is present. Nested
schemas are handed back to the orchestrator through ``recurse``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from .context import NormalizationContext
from .diagnostics import DiagnosticKind
from .types import (
    ARRAY,
    INTEGER,
    NUMBER,
    NUMERIC_HINT_KEYS,
    OBJECT,
    STRING,
    STRING_HINT_KEYS,
    SchemaNode,
    is_number,
    type_includes,
)

Recurse = Callable[[Any, NormalizationContext], SchemaNode]

ARRAY_KEYS = ("items", "minItems", "maxItems", "uniqueItems", "contains")


def _applies(resolved: Any, node: SchemaNode, families: tuple[str, ...], keys: tuple[str, ...]) -> bool:
    if resolved is not None:
        return type_includes(resolved, *families)
    return any(key in node for key in keys)


def _copy_number(node: SchemaNode, result: SchemaNode, key: str) -> None:
    value = node.get(key)
    if is_number(value):
        result[key] = value


def assign_string_constraints(node: SchemaNode, result: SchemaNode) -> None:
    if not _applies(result.get("type"), node, (STRING,), STRING_HINT_KEYS):
        return
    for key in ("pattern", "format"):
        if isinstance(node.get(key), str):
            result[key] = node[key]
    _copy_number(node, result, "minLength")
    _copy_number(node, result, "maxLength")


def assign_numeric_constraints(node: SchemaNode, result: SchemaNode) -> None:
    if not _applies(result.get("type"), node, (NUMBER, INTEGER), NUMERIC_HINT_KEYS):
        return
    for key in NUMERIC_HINT_KEYS:
        _copy_number(node, result, key)


def assign_array_constraints(
    node: SchemaNode,
    result: SchemaNode,
    ctx: NormalizationContext,
    recurse: Recurse,
) -> None:
    resolved = result.get("type")
    if not _applies(resolved, node, (ARRAY,), ARRAY_KEYS):
        return

    if "items" in node:
        items = node["items"]
        if isinstance(items, list):
            result["items"] = [
                recurse(item, ctx.child(f"items[{index}]")) for index, item in enumerate(items)
            ]
        else:
            result["items"] = recurse(items, ctx.child("items"))
    elif type_includes(resolved, ARRAY):
        # Synthesized items are left out at the depth edge rather than reported.
        child = ctx.child("items")
        if child.depth < ctx.options.max_depth:
            result["items"] = recurse({"type": OBJECT}, child)

    _copy_number(node, result, "minItems")
    _copy_number(node, result, "maxItems")
    if isinstance(node.get("uniqueItems"), bool):
        result["uniqueItems"] = node["uniqueItems"]

    if "contains" in node:
        result["contains"] = recurse(node["contains"], ctx.child("contains"))


def _schema_map(
    node: SchemaNode,
    key: str,
    ctx: NormalizationContext,
    recurse: Recurse,
    segment: Callable[[str], str],
) -> Optional[Dict[str, SchemaNode]]:
    value = node[key]
    if not isinstance(value, dict):
        ctx.sink.error(
            DiagnosticKind.INVALID_SCHEMA,
            f"{key} must be an object",
            path=ctx.at(key),
        )
        return None
    return {
        str(name): recurse(child, ctx.child(segment(str(name)), hint=str(name)))
        for name, child in value.items()
    }


def assign_object_constraints(
    node: SchemaNode,
    result: SchemaNode,
    ctx: NormalizationContext,
    recurse: Recurse,
) -> bool:
    """Copy object keywords; return whether the node was treated as an object."""
    resolved = result.get("type")
    is_object = resolved is None or type_includes(resolved, OBJECT)
    if not is_object and "properties" not in node:
        if "required" in node:
            ctx.sink.warn(f"Ignoring 'required' at {ctx.location} because schema is not an object")
        return False

    if "properties" in node:
        properties = _schema_map(node, "properties", ctx, recurse, lambda name: name)
        if properties is not None:
            result["properties"] = properties

    if "patternProperties" in node:
        patterns = _schema_map(
            node,
            "patternProperties",
            ctx,
            recurse,
            lambda pattern: f"patternProperties[{pattern}]",
        )
        if patterns is not None:
            result["patternProperties"] = patterns

    if "additionalProperties" in node:
        additional = node["additionalProperties"]
        if isinstance(additional, bool):
            result["additionalProperties"] = additional
        elif isinstance(additional, dict):
            result["additionalProperties"] = recurse(additional, ctx.child("additionalProperties"))
        else:
            ctx.sink.warn(f"Discarded invalid additionalProperties at {ctx.location}")

    _copy_number(node, result, "minProperties")
    _copy_number(node, result, "maxProperties")
    return True
