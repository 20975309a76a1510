"""Schema normalization for function-calling tool declarations.

Public entry points:
- normalize_schema: normalize one JSON-Schema-like document
- normalize_tools: normalize every function declaration of a ``tools`` payload
- validate_normalized_schema: non-mutating consistency check
"""

from .diagnostics import Diagnostic, DiagnosticKind
from .normalizer import NormalizationResult, normalize_schema
from .options import NormalizationOptions
from .tools import ToolsNormalizationResult, normalize_tools
from .validator import validate_normalized_schema

__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "NormalizationOptions",
    "NormalizationResult",
    "ToolsNormalizationResult",
    "normalize_schema",
    "normalize_tools",
    "validate_normalized_schema",
]
