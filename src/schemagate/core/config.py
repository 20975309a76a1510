"""Configuration management.

Loads and merges configuration from multiple sources with proper precedence:
1. Built-in defaults
2. Global config (<config dir>/schemagate.json, schemagate.jsonc)
3. Explicit config file (``--config``)
4. ``SCHEMAGATE_CONFIG_CONTENT`` (inline JSON)
5. Individual environment variables (``SCHEMAGATE_PORT`` etc.)
6. Caller overrides (CLI flags)
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import ValidationError

from .config_loader import ConfigError, deep_merge, load_json_file
from .config_schema import (
    Config,
    LoggingConfig,
    PendingCallsConfig,
    ServerConfig,
)
from .global_paths import GlobalPath
from ..util.log import Log

log = Log.create({"service": "config"})

__all__ = [
    "Config",
    "ConfigError",
    "LoggingConfig",
    "PendingCallsConfig",
    "ServerConfig",
    "load_config",
]

GLOBAL_CONFIG_FILES = ("schemagate.json", "schemagate.jsonc")

# env var -> path inside the config document
ENV_OVERRIDES: Dict[str, Tuple[str, ...]] = {
    "SCHEMAGATE_UPSTREAM_URL": ("upstreamUrl",),
    "SCHEMAGATE_API_KEY": ("apiKey",),
    "SCHEMAGATE_HOST": ("server", "host"),
    "SCHEMAGATE_PORT": ("server", "port"),
    "SCHEMAGATE_LOG_LEVEL": ("logging", "level"),
    "SCHEMAGATE_LOG_FORMAT": ("logging", "format"),
    "SCHEMAGATE_MAX_DEPTH": ("normalization", "maxDepth"),
}


def _nested(path: Tuple[str, ...], value: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {path[-1]: value}
    for key in reversed(path[:-1]):
        result = {key: result}
    return result


def _env_config(environ: Mapping[str, str]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}

    content = environ.get("SCHEMAGATE_CONFIG_CONTENT")
    if content:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError("SCHEMAGATE_CONFIG_CONTENT", str(e)) from e
        if not isinstance(data, dict):
            raise ConfigError("SCHEMAGATE_CONFIG_CONTENT", "value must be a JSON object")
        result = deep_merge(result, data)
        log.info("loaded config from SCHEMAGATE_CONFIG_CONTENT")

    for name, path in ENV_OVERRIDES.items():
        value = environ.get(name)
        if value:
            result = deep_merge(result, _nested(path, value))
    return result


def load_config(
    path: Optional[str] = None,
    *,
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load the effective configuration.

    Args:
        path: Explicit config file; it must exist and parse
        overrides: Highest-priority values, in config-document shape
        environ: Environment mapping, ``os.environ`` by default

    Raises:
        ConfigError: If a source cannot be parsed or the result is invalid
    """
    env = os.environ if environ is None else environ
    result: Dict[str, Any] = {}
    source = "defaults"

    global_dir = GlobalPath.config()
    for filename in GLOBAL_CONFIG_FILES:
        filepath = os.path.join(global_dir, filename)
        data = load_json_file(filepath, environ=env)
        if data:
            result = deep_merge(result, data)
            source = filepath
            log.info("loaded global config", {"path": filepath})

    if path:
        filepath = str(Path(path).expanduser())
        result = deep_merge(result, load_json_file(filepath, strict=True, environ=env))
        source = filepath
        log.info("loaded config file", {"path": filepath})

    env_data = _env_config(env)
    if env_data:
        result = deep_merge(result, env_data)
        source = "environment"

    if overrides:
        result = deep_merge(result, overrides)

    try:
        return Config.model_validate(result)
    except ValidationError as e:
        raise ConfigError(source, str(e)) from e
