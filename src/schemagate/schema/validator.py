"""Non-mutating consistency check for normalized schemas."""

from __future__ import annotations

from typing import Any, List, Set, Tuple

from .context import path_to_string
from .diagnostics import Diagnostic, DiagnosticKind
from .types import VALID_TYPES


def validate_normalized_schema(schema: Any) -> List[Diagnostic]:
    """Report unsupported type names and dangling ``required`` keys.

    Walks nested ``properties``, ``patternProperties``, ``additionalProperties``,
    ``items`` and ``contains``. The schema is never modified.
    """
    if not isinstance(schema, dict):
        return [Diagnostic(kind=DiagnosticKind.INVALID_SCHEMA, message="Schema must be an object")]

    errors: List[Diagnostic] = []
    _validate(schema, (), set(), errors)
    return errors


def _validate(node: Any, path: Tuple[str, ...], open_nodes: Set[int], errors: List[Diagnostic]) -> None:
    if not isinstance(node, dict) or id(node) in open_nodes:
        return
    open_nodes.add(id(node))

    if "type" in node:
        declared = node["type"]
        for entry in declared if isinstance(declared, list) else [declared]:
            if not isinstance(entry, str) or entry not in VALID_TYPES:
                errors.append(
                    Diagnostic(
                        kind=DiagnosticKind.VALIDATION_ERROR,
                        message=f"Unsupported type '{entry}'",
                        path=path_to_string(path),
                    )
                )

    properties = node.get("properties")
    known = properties if isinstance(properties, dict) else {}
    required = node.get("required")
    if isinstance(required, list):
        for key in required:
            if not isinstance(key, str) or key not in known:
                errors.append(
                    Diagnostic(
                        kind=DiagnosticKind.VALIDATION_ERROR,
                        message=f"Required key '{key}' missing from properties",
                        path=path_to_string((*path, str(key))),
                    )
                )

    for name, child in known.items():
        _validate(child, (*path, str(name)), open_nodes, errors)

    patterns = node.get("patternProperties")
    if isinstance(patterns, dict):
        for pattern, child in patterns.items():
            _validate(child, (*path, f"patternProperties[{pattern}]"), open_nodes, errors)

    _validate(node.get("additionalProperties"), (*path, "additionalProperties"), open_nodes, errors)

    items = node.get("items")
    if isinstance(items, list):
        for index, child in enumerate(items):
            _validate(child, (*path, f"items[{index}]"), open_nodes, errors)
    else:
        _validate(items, (*path, "items"), open_nodes, errors)

    _validate(node.get("contains"), (*path, "contains"), open_nodes, errors)
    open_nodes.discard(id(node))
