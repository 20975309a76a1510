"""Offline schema commands: normalize and validate documents from disk."""

from __future__ import annotations

import json
import sys
from typing import Any, List

from rich.console import Console
from rich.markup import escape

from ...schema import Diagnostic, NormalizationOptions, normalize_schema, normalize_tools, validate_normalized_schema

console = Console(stderr=True, soft_wrap=True)


class InputError(Exception):
    """Raised when the input document cannot be read or parsed."""


def read_document(path: str) -> Any:
    """Read a JSON document from ``path``, or from stdin when ``path`` is ``-``."""
    try:
        if path == "-":
            text = sys.stdin.read()
        else:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e.strerror or e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno}, column {e.colno})") from e


def _report(errors: List[Diagnostic], warnings: List[str]) -> None:
    for warning in warnings:
        console.print(f"[yellow]warning:[/yellow] {escape(warning)}", highlight=False)
    for error in errors:
        location = f" at {error.path}" if error.path else ""
        label = escape(f"error[{error.kind.value}]:")
        console.print(f"[red]{label}[/red] {escape(error.message + location)}", highlight=False)


def normalize_command(path: str, *, tools: bool, options: NormalizationOptions, strict: bool) -> int:
    """Normalize a schema or tools document and print it to stdout.

    Returns the process exit code.
    """
    document = read_document(path)
    if tools:
        payload = document.get("tools") if isinstance(document, dict) else document
        result = normalize_tools(payload, options)
        output: Any = result.tools
    else:
        single = normalize_schema(document, options)
        result = single
        output = single.schema

    sys.stdout.write(json.dumps(output, indent=2, ensure_ascii=False) + "\n")
    _report(result.errors, result.warnings)
    if strict and result.errors:
        return 1
    return 0


def validate_command(path: str) -> int:
    document = read_document(path)
    errors = validate_normalized_schema(document)
    if not errors:
        console.print("[green]OK[/green] schema is valid")
        return 0
    _report(errors, [])
    return 1
