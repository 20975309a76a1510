"""Configuration file loading: JSONC parsing, env substitution and deep merge."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import commentjson

from ..util.log import Log

log = Log.create({"service": "config.loader"})

ENV_PATTERN = re.compile(r"\{env:([A-Za-z_][A-Za-z0-9_]*)\}")


class ConfigError(Exception):
    """A configuration source could not be read or validated."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Config error in {path}: {message}")


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested objects merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def substitute_env_vars(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Expand ``{env:NAME}`` references; unset names expand to ``""``."""
    env = os.environ if environ is None else environ
    return ENV_PATTERN.sub(lambda match: env.get(match.group(1), ""), text)


def load_json_file(
    filepath: str,
    *,
    strict: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Load a JSON or JSONC config file.

    Without ``strict`` a missing file is skipped silently and a broken one is
    logged and skipped. With ``strict`` both raise ``ConfigError``.
    """
    path = Path(filepath)
    if not path.is_file():
        if strict:
            raise ConfigError(filepath, "file not found")
        return {}

    try:
        data = commentjson.loads(substitute_env_vars(path.read_text(encoding="utf-8"), environ))
    except (OSError, ValueError) as e:
        if strict:
            raise ConfigError(filepath, str(e)) from e
        log.error("skipping unreadable config file", {"path": filepath, "error": str(e)})
        return {}

    if isinstance(data, dict):
        return data
    if strict:
        raise ConfigError(filepath, "top-level value must be an object")
    log.error("skipping non-object config file", {"path": filepath})
    return {}
