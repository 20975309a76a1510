"""Error formatting utilities.

Turns the errors the CLI surfaces into short user-facing messages.
"""

import json
import traceback
from typing import Any

from pydantic import ValidationError

from ..core.config_loader import ConfigError


def format_error(error: Any) -> str | None:
    """Format known application errors into user-friendly messages.

    Returns None if the error type is not recognized, allowing
    fallback to format_unknown_error.
    """
    if isinstance(error, ConfigError):
        return str(error)
    if isinstance(error, ValidationError):
        lines = [f"Invalid {error.title}:"]
        for item in error.errors():
            location = ".".join(str(part) for part in item.get("loc", ())) or "root"
            lines.append(f"  {location}: {item.get('msg')}")
        return "\n".join(lines)
    if isinstance(error, json.JSONDecodeError):
        return f"Invalid JSON at line {error.lineno}, column {error.colno}: {error.msg}"
    return None


def format_unknown_error(error: Any) -> str:
    """Format any error into a string representation."""
    if isinstance(error, Exception):
        if error.__traceback__:
            return "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return f"{error.__class__.__name__}: {error}"
    try:
        return json.dumps(error, indent=2, default=str)
    except (TypeError, ValueError):
        return str(error)
