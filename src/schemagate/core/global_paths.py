"""Per-user directories for schemagate.

Follows platform conventions through platformdirs. Directories are created on
demand by the code that writes into them.
"""

import os
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

APP_NAME = "schemagate"


class GlobalPath:
    """Global path management for schemagate directories."""

    @classmethod
    def data(cls) -> str:
        """Application data directory."""
        return os.environ.get("SCHEMAGATE_DATA_DIR") or user_data_dir(APP_NAME)

    @classmethod
    def log(cls) -> str:
        """Log file directory."""
        return str(Path(cls.data()) / "log")

    @classmethod
    def config(cls) -> str:
        """Configuration directory."""
        return os.environ.get("SCHEMAGATE_CONFIG_DIR") or user_config_dir(APP_NAME)
