"""Recursive schema normalizer.

Rewrites a JSON-Schema-like document into the bounded subset accepted by
function-calling APIs in a single pass. Each node is guarded against bad
shapes, runaway depth and cycles; a tripped guard records a diagnostic and
substitutes ``{"type": "object"}`` so the rest of the tree is still
normalized.

Example:
    from schemagate.schema import normalize_schema

    result = normalize_schema({"type": "string", "nullable": True})
    result.schema   # {"type": ["string", "null"], "description": "Value (string or null)."}
    result.errors   # []
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .constraints import (
    assign_array_constraints,
    assign_numeric_constraints,
    assign_object_constraints,
    assign_string_constraints,
)
from .context import NormalizationContext
from .describe import generate_description
from .diagnostics import Diagnostic, DiagnosticKind
from .keywords import canonical_order, filter_keywords
from .options import NormalizationOptions
from .required import reconcile_required
from .types import ARRAY, OBJECT, SchemaNode, dedupe, encode_value, json_kind, resolve_type

ROOT_NAME = "value"

OptionsLike = Optional[Union[NormalizationOptions, Mapping[str, Any]]]


def fallback_schema() -> SchemaNode:
    return {"type": OBJECT}


@dataclass
class NormalizationResult:
    """Result of ``normalize_schema``."""

    schema: SchemaNode
    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
        }


def normalize_schema(
    schema: Any,
    options: OptionsLike = None,
    *,
    name: Optional[str] = None,
) -> NormalizationResult:
    """Normalize a single schema.

    Args:
        schema: Parsed JSON value to normalize. Never mutated.
        options: ``NormalizationOptions`` or a mapping merged over the defaults.
        name: Name used when synthesizing the root description.

    Returns:
        NormalizationResult with the new schema and every diagnostic.
    """
    ctx = NormalizationContext(options=NormalizationOptions.resolve(options), hint=name or ROOT_NAME)
    normalized = normalize_node(schema, ctx)
    return NormalizationResult(
        schema=normalized,
        errors=ctx.sink.errors,
        warnings=ctx.sink.warnings,
    )


def _copy_annotations(node: SchemaNode, result: SchemaNode, ctx: NormalizationContext) -> None:
    for key in ("title", "description"):
        value = node.get(key)
        if isinstance(value, str) and value.strip():
            result[key] = value.strip()

    if "enum" in node:
        enum = node["enum"]
        if isinstance(enum, list):
            recognized = []
            for entry in enum:
                if json_kind(entry) is None:
                    ctx.sink.warn(f"Dropped unrecognized enum value at {ctx.location}: {entry!r}")
                    continue
                if encode_value(entry) is None:
                    ctx.sink.warn(f"Dropped unserializable enum value at {ctx.location}")
                    continue
                recognized.append(entry)
            values = dedupe(recognized)
            if values:
                result["enum"] = values
        else:
            ctx.sink.warn(f"Discarded non-array enum at {ctx.location}")

    for key in ("const", "default"):
        if key not in node:
            continue
        if encode_value(node[key]) is None:
            ctx.sink.warn(f"Dropped unserializable {key} at {ctx.location}")
            continue
        result[key] = node[key]
    if node.get("optional") is True:
        result["optional"] = True


def _ensure_description(result: SchemaNode, ctx: NormalizationContext) -> None:
    if not ctx.options.generate_descriptions:
        return
    description = result.get("description")
    if isinstance(description, str) and description:
        return
    name = ctx.hint or (ctx.path[-1] if ctx.path else ROOT_NAME)
    result["description"] = generate_description(name, result)


def normalize_node(schema: Any, ctx: NormalizationContext) -> SchemaNode:
    """Normalize one node and, through the constraint assigners, its subtree."""
    if not isinstance(schema, dict):
        ctx.sink.error(
            DiagnosticKind.INVALID_SCHEMA,
            "Expected schema object",
            path=ctx.location,
            details={"received": json_kind(schema) or "unrecognized"},
        )
        return fallback_schema()

    if ctx.depth >= ctx.options.max_depth:
        ctx.sink.error(
            DiagnosticKind.MAX_DEPTH_EXCEEDED,
            f"Maximum depth of {ctx.options.max_depth} exceeded",
            path=ctx.location,
        )
        return fallback_schema()

    identity = id(schema)
    if identity in ctx.visited:
        ctx.sink.error(
            DiagnosticKind.CIRCULAR_REFERENCE,
            "Circular reference detected",
            path=ctx.location,
        )
        return fallback_schema()

    ctx.visited.add(identity)
    try:
        node = filter_keywords(schema, ctx)
        result: SchemaNode = {}

        resolved = resolve_type(node, ctx)
        if resolved is not None:
            result["type"] = resolved

        _copy_annotations(node, result, ctx)

        assign_string_constraints(node, result)
        assign_numeric_constraints(node, result)
        assign_array_constraints(node, result, ctx, normalize_node)
        if assign_object_constraints(node, result, ctx, normalize_node):
            reconcile_required(node, result, ctx)

        if "type" not in result:
            if "properties" in result or "additionalProperties" in result:
                result["type"] = OBJECT
            elif "items" in result:
                result["type"] = ARRAY

        _ensure_description(result, ctx)
        return canonical_order(result)
    finally:
        ctx.visited.discard(identity)
