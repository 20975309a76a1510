from collections.abc import Iterator
from pathlib import Path

import pytest

from schemagate.util.log import Log, LogFormat, LogLevel


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    import os

    for name in list(os.environ):
        if name.startswith("SCHEMAGATE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("SCHEMAGATE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("SCHEMAGATE_DATA_DIR", str(tmp_path / "data"))
    yield


@pytest.fixture(autouse=True)
def _log_teardown() -> Iterator[None]:
    yield
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=True, file=False)
