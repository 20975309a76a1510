"""Core infrastructure modules."""

from .global_paths import GlobalPath

__all__ = ["GlobalPath"]

# Config is exported from .config to avoid circular imports with util.log
# To use: from schemagate.core.config import load_config
