from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from schemagate import __version__
from schemagate.cli.main import app
from schemagate.core.config_schema import Config

runner = CliRunner()


def _write(tmp_path: Path, data: object, name: str = "schema.json") -> str:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"schemagate {__version__}" in result.output


def test_normalize_prints_normalized_schema(tmp_path: Path) -> None:
    path = _write(tmp_path, {"type": "string", "nullable": True})

    result = runner.invoke(app, ["normalize", path])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"type": ["string", "null"], "description": "Value (string or null)."}


def test_normalize_reads_stdin() -> None:
    result = runner.invoke(app, ["normalize", "-", "--no-descriptions"], input='{"type": "integer"}')

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"type": "integer"}


def test_normalize_tools_accepts_request_body(tmp_path: Path) -> None:
    body = {
        "tools": [
            {
                "functionDeclarations": [
                    {"name": "f", "parameters": {"type": "object", "properties": {"a": {"type": "number"}}}}
                ]
            }
        ]
    }
    path = _write(tmp_path, body)

    result = runner.invoke(app, ["normalize", path, "--tools"])

    assert result.exit_code == 0
    tools = json.loads(result.stdout)
    assert tools[0]["functionDeclarations"][0]["parameters"]["required"] == ["a"]


def test_normalize_reports_warnings(tmp_path: Path) -> None:
    path = _write(tmp_path, {"type": "string", "$ref": "#/x"})

    result = runner.invoke(app, ["normalize", path])

    assert result.exit_code == 0
    assert "Removed unsupported keyword '$ref' at root" in result.output


def test_normalize_strict_fails_on_errors(tmp_path: Path) -> None:
    path = _write(tmp_path, {"type": "object", "properties": {"a": {"type": "object", "properties": {}}}})

    lenient = runner.invoke(app, ["normalize", path, "--max-depth", "1"])
    strict = runner.invoke(app, ["normalize", path, "--max-depth", "1", "--strict"])

    assert lenient.exit_code == 0
    assert strict.exit_code == 1
    assert "max_depth_exceeded" in strict.output


def test_normalize_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{nope", encoding="utf-8")

    result = runner.invoke(app, ["normalize", str(path)])

    assert result.exit_code == 2
    assert "Invalid JSON" in result.output


def test_normalize_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["normalize", str(tmp_path / "missing.json")])

    assert result.exit_code == 2
    assert "Cannot read" in result.output


def test_validate_exit_codes(tmp_path: Path) -> None:
    good = _write(tmp_path, {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]}, "good.json")
    bad = _write(tmp_path, {"type": "object", "properties": {}, "required": ["ghost"]}, "bad.json")

    ok = runner.invoke(app, ["validate", good])
    failed = runner.invoke(app, ["validate", bad])

    assert ok.exit_code == 0
    assert failed.exit_code == 1
    assert "Required key 'ghost' missing from properties" in failed.output


def test_serve_builds_config_from_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Config] = {}

    def fake_serve_command(config: Config) -> None:
        captured["config"] = config

    monkeypatch.setattr("schemagate.cli.cmd.serve.serve_command", fake_serve_command)

    result = runner.invoke(
        app,
        [
            "serve",
            "--host",
            "0.0.0.0",
            "--port",
            "9100",
            "--upstream",
            "http://localhost:9999/v1beta",
            "--log-level",
            "debug",
            "--no-access-log",
        ],
    )

    assert result.exit_code == 0
    config = captured["config"]
    assert config.server.host == "0.0.0.0"
    assert config.server.port == 9100
    assert config.server.access_log is False
    assert config.upstream_url == "http://localhost:9999/v1beta/"
    assert config.logging.level == "DEBUG"


def test_serve_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Config] = {}
    monkeypatch.setattr("schemagate.cli.cmd.serve.serve_command", lambda config: captured.setdefault("config", config))
    monkeypatch.setenv("SCHEMAGATE_API_KEY", "from-env")

    result = runner.invoke(app, ["serve"])

    assert result.exit_code == 0
    assert captured["config"].api_key == "from-env"
    assert captured["config"].server.access_log is True


def test_serve_reports_config_errors(tmp_path: Path) -> None:
    result = runner.invoke(app, ["serve", "--config", str(tmp_path / "missing.json")])

    assert result.exit_code == 2
    assert "Config error" in result.output
