from __future__ import annotations

import json
from pathlib import Path

import pytest

from schemagate.core.global_paths import GlobalPath
from schemagate.util.log import Log, LogFormat, LogLevel


def test_log_writes_console_and_file(monkeypatch, tmp_path: Path, capsys) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(GlobalPath, "log", classmethod(lambda cls: str(tmp_path)))
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=True, file=True, dev=True)

    log = Log.create({"service": "test.log"})
    log.info("hello", {"value": 7})
    Log.close()

    stderr = capsys.readouterr().err
    text = (tmp_path / "dev.log").read_text(encoding="utf-8")

    assert "msg=hello" in stderr
    assert "service=test.log" in stderr
    assert "value=7" in text


def test_log_supports_json_format(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(GlobalPath, "log", classmethod(lambda cls: str(tmp_path)))
    Log.configure(level=LogLevel.INFO, format=LogFormat.JSON, console=False, file=True, dev=True)

    log = Log.create({"service": "test.json"})
    log.info("normalized tools", {"warnings": ["Removed unsupported keyword '$ref' at root"]})
    Log.close()

    line = (tmp_path / "dev.log").read_text(encoding="utf-8").strip()
    payload = json.loads(line)

    assert payload["level"] == "info"
    assert payload["msg"] == "normalized tools"
    assert payload["service"] == "test.json"
    assert payload["warnings"] == ["Removed unsupported keyword '$ref' at root"]


def test_level_filters_lower_priority(capsys) -> None:  # type: ignore[no-untyped-def]
    Log.configure(level=LogLevel.WARN, format=LogFormat.KV, console=True, file=False)

    log = Log.create({"service": "test.level"})
    log.info("hidden")
    log.warn("shown")

    stderr = capsys.readouterr().err
    assert "hidden" not in stderr
    assert "msg=shown" in stderr
    assert Log.level() == LogLevel.WARN


def test_pretty_format_and_quoting(capsys) -> None:  # type: ignore[no-untyped-def]
    Log.configure(level=LogLevel.DEBUG, format=LogFormat.PRETTY, console=True, file=False)

    Log.create({"service": "test.pretty"}).debug("spaced message", {"path": "a b"})

    line = capsys.readouterr().err
    assert "DEBUG spaced message" in line
    assert 'path="a b"' in line


def test_old_log_files_are_cleaned_up(tmp_path: Path) -> None:
    for day in range(15):
        (tmp_path / f"2024-01-{day + 1:02d}T000000.log").write_text("", encoding="utf-8")

    Log._cleanup_logs(tmp_path)

    assert len(list(tmp_path.glob("*.log"))) == 10


def test_parse_levels_and_formats() -> None:
    assert LogLevel.parse("warning") == LogLevel.WARN
    assert LogLevel.parse(None) == LogLevel.INFO
    assert LogFormat.parse("JSON") == LogFormat.JSON
    with pytest.raises(ValueError):
        LogLevel.parse("verbose")
    with pytest.raises(ValueError):
        LogFormat.parse("xml")
