"""Reconciliation and inference of ``required`` lists."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .context import NormalizationContext
from .types import NULL


def filter_required(
    declared: Any,
    properties: Optional[Dict[str, Any]],
    ctx: NormalizationContext,
) -> List[str]:
    """Keep declared entries that name an existing property, in order."""
    if not isinstance(declared, list):
        ctx.sink.warn(f"Discarded invalid required list at {ctx.location}")
        return []

    known = properties or {}
    valid: List[str] = []
    for entry in declared:
        if not isinstance(entry, str):
            ctx.sink.warn(f"Ignored non-string required entry at {ctx.location}: {entry!r}")
            continue
        if entry not in known:
            ctx.sink.warn(f"Removed unknown required key '{entry}' at {ctx.location}")
            continue
        if entry not in valid:
            valid.append(entry)
    return valid


def infer_required(properties: Dict[str, Any]) -> List[str]:
    """Infer required keys from normalized property schemas.

    Only a property with a single non-null type, no default and no
    ``optional: true`` qualifies. Nullable, union-typed and untyped properties
    never do.
    """
    required: List[str] = []
    for key, schema in properties.items():
        if not isinstance(schema, dict):
            continue
        if "default" in schema or schema.get("optional") is True:
            continue
        resolved = schema.get("type")
        if isinstance(resolved, str) and resolved != NULL:
            required.append(key)
    return required


def reconcile_required(
    node: Dict[str, Any],
    result: Dict[str, Any],
    ctx: NormalizationContext,
) -> None:
    """Set ``result["required"]`` from the declared list or by inference."""
    properties = result.get("properties")
    required: List[str] = []
    if "required" in node:
        required = filter_required(node["required"], properties, ctx)

    if not required and ctx.options.infer_required and properties:
        required = infer_required(properties)

    if required:
        result["required"] = required
