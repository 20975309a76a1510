"""CLI entry point for schemagate.

``schemagate serve`` runs the normalizing proxy; ``normalize`` and
``validate`` work on schema documents offline.
"""

from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..core.config import ConfigError, load_config
from ..schema import NormalizationOptions
from ..util.error import format_error, format_unknown_error
from ..util.log import Log, LogFormat, LogLevel

app = typer.Typer(
    name="schemagate",
    help="schemagate - tool schema normalizing proxy for function-calling APIs",
    no_args_is_help=True,
    add_completion=False,
)

console = Console(stderr=True, soft_wrap=True)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        Console().print(f"schemagate {__version__}")
        raise typer.Exit()


def _fail(error: Exception, code: int = 2) -> typer.Exit:
    message = format_error(error) or format_unknown_error(error)
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    return typer.Exit(code)


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """schemagate - tool schema normalizing proxy."""


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
    upstream: Optional[str] = typer.Option(None, "--upstream", "-u", help="Upstream API base URL"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a config file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARN or ERROR"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="kv, json or pretty"),
    print_logs: bool = typer.Option(False, "--print-logs", help="Also write logs to a file under the data directory"),
    access_log: Optional[bool] = typer.Option(None, "--access-log/--no-access-log", help="Log one line per request"),
):
    """Run the proxy server."""
    from .cmd import serve as serve_cmd

    overrides: Dict[str, Any] = {}
    if upstream:
        overrides["upstreamUrl"] = upstream
    server: Dict[str, Any] = {}
    if access_log is not None:
        server["accessLog"] = access_log
    if host:
        server["host"] = host
    if port is not None:
        server["port"] = port
    if server:
        overrides["server"] = server
    logging: Dict[str, Any] = {}
    if log_level:
        logging["level"] = log_level
    if log_format:
        logging["format"] = log_format
    if print_logs:
        logging["file"] = True
    if logging:
        overrides["logging"] = logging

    try:
        config = load_config(config_path, overrides=overrides)
    except ConfigError as e:
        raise _fail(e)

    Log.configure(
        level=LogLevel.parse(config.logging.level),
        format=LogFormat.parse(config.logging.format),
        console=config.logging.console,
        file=config.logging.file,
    )
    serve_cmd.serve_command(config)


@app.command()
def normalize(
    path: str = typer.Argument(..., help="JSON file to normalize, or - for stdin"),
    tools: bool = typer.Option(False, "--tools", "-t", help="Treat the input as a tools array or request body"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=1, help="Maximum nesting depth"),
    no_descriptions: bool = typer.Option(False, "--no-descriptions", help="Do not synthesize descriptions"),
    no_infer_required: bool = typer.Option(False, "--no-infer-required", help="Do not infer required properties"),
    strict: bool = typer.Option(False, "--strict", help="Exit with status 1 if any errors were reported"),
):
    """Normalize a schema document and print the result."""
    from .cmd.schema import InputError, normalize_command

    options = NormalizationOptions.resolve(
        {
            "max_depth": max_depth,
            "generate_descriptions": False if no_descriptions else None,
            "infer_required": False if no_infer_required else None,
        }
    )
    try:
        code = normalize_command(path, tools=tools, options=options, strict=strict)
    except InputError as e:
        raise _fail(e)
    raise typer.Exit(code)


@app.command()
def validate(
    path: str = typer.Argument(..., help="Normalized schema JSON file, or - for stdin"),
):
    """Check a normalized schema for unsupported types and dangling required keys."""
    from .cmd.schema import InputError, validate_command

    try:
        code = validate_command(path)
    except InputError as e:
        raise _fail(e)
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
