"""Normalization of Gemini-style tool declaration batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .context import prepend_path
from .describe import generate_function_description
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink
from .normalizer import OptionsLike, normalize_schema
from .options import NormalizationOptions

# REST clients send camelCase, the Python SDKs send snake_case.
DECLARATION_KEYS = ("function_declarations", "functionDeclarations")


@dataclass
class ToolsNormalizationResult:
    """Result of ``normalize_tools``."""

    tools: List[Any]
    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tools": self.tools,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
        }


def _normalize_declaration(
    declaration: Any,
    location: str,
    index: int,
    options: NormalizationOptions,
    sink: DiagnosticSink,
) -> Any:
    if not isinstance(declaration, dict):
        sink.error(
            DiagnosticKind.INVALID_SCHEMA,
            "Function declaration must be an object",
            path=location,
        )
        return declaration

    normalized: Dict[str, Any] = dict(declaration)
    name = normalized.get("name")
    if not isinstance(name, str):
        name = f"function_{index}"
    normalized["name"] = name

    if options.generate_descriptions:
        raw = normalized.get("description")
        text = raw.strip() if isinstance(raw, str) else ""
        normalized["description"] = text or generate_function_description(name)

    if "parameters" in normalized:
        result = normalize_schema(normalized["parameters"], options, name="parameters")
        normalized["parameters"] = result.schema
        prefix = f"{location}.parameters"
        sink.errors.extend(error.with_path(prepend_path(prefix, error.path)) for error in result.errors)
        sink.warnings.extend(f"{location}: {warning}" for warning in result.warnings)

    return normalized


def normalize_tools(tools: Any, options: OptionsLike = None) -> ToolsNormalizationResult:
    """Normalize every function declaration of a ``tools`` payload.

    Malformed entries are passed through unchanged and reported; they never
    stop the rest of the batch from being normalized. The input is not
    mutated.
    """
    resolved = NormalizationOptions.resolve(options)

    if not isinstance(tools, list):
        return ToolsNormalizationResult(
            tools=[],
            errors=[
                Diagnostic(
                    kind=DiagnosticKind.INVALID_SCHEMA,
                    message="Tools payload must be an array",
                    path="tools",
                )
            ],
        )

    sink = DiagnosticSink()
    normalized_tools: List[Any] = []
    for tool_index, tool in enumerate(tools):
        if not isinstance(tool, dict):
            sink.error(
                DiagnosticKind.INVALID_SCHEMA,
                "Tool entry must be an object",
                path=f"tools[{tool_index}]",
            )
            normalized_tools.append(tool)
            continue

        normalized_tool: Dict[str, Any] = dict(tool)
        for key in DECLARATION_KEYS:
            declarations = tool.get(key)
            if not isinstance(declarations, list):
                continue
            normalized_tool[key] = [
                _normalize_declaration(
                    declaration,
                    f"tools[{tool_index}].{key}[{index}]",
                    index,
                    resolved,
                    sink,
                )
                for index, declaration in enumerate(declarations)
            ]
        normalized_tools.append(normalized_tool)

    return ToolsNormalizationResult(
        tools=normalized_tools,
        errors=sink.errors,
        warnings=sink.warnings,
    )
