"""schemagate - tool schema normalization for function-calling APIs.

Rewrites the JSON-Schema-like parameter schemas of tool declarations into
the restricted subset a function-calling endpoint accepts, either as a
library or through a reverse proxy.
"""

__version__ = "0.1.0"

# Lazy imports keep ``import schemagate`` free of the server stack
def __getattr__(name: str):
    """Lazy import module components."""
    if name in (
        "NormalizationOptions",
        "NormalizationResult",
        "ToolsNormalizationResult",
        "Diagnostic",
        "DiagnosticKind",
        "normalize_schema",
        "normalize_tools",
        "validate_normalized_schema",
    ):
        from . import schema
        return getattr(schema, name)
    if name in ("create_app", "PendingToolCalls"):
        from . import server
        return getattr(server, name)
    if name in ("Config", "load_config"):
        from .core import config
        return getattr(config, name)
    if name == "Log":
        from .util.log import Log
        return Log
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Schema
    "NormalizationOptions",
    "NormalizationResult",
    "ToolsNormalizationResult",
    "Diagnostic",
    "DiagnosticKind",
    "normalize_schema",
    "normalize_tools",
    "validate_normalized_schema",
    # Server
    "create_app",
    "PendingToolCalls",
    # Config
    "Config",
    "load_config",
    "Log",
]
