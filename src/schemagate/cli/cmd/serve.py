"""Serve command - run the normalizing proxy under uvicorn."""

from __future__ import annotations

import asyncio

import uvicorn
from rich.console import Console

from ...core.config_schema import Config
from ...server.app import create_app
from ...util.log import Log

log = Log.create({"service": "cli.serve"})
console = Console(stderr=True)


async def serve_proxy(config: Config) -> None:
    app = create_app(config)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.server.host,
            port=config.server.port,
            log_level="warning",
            access_log=False,
        )
    )
    url = f"http://{config.server.host}:{config.server.port}"
    console.print(f"[green]schemagate[/green] proxying {url} -> {config.upstream_url}")
    log.info("proxy server started", {"host": config.server.host, "port": config.server.port})
    try:
        await server.serve()
    finally:
        log.info("proxy server stopped", {"host": config.server.host, "port": config.server.port})


def serve_command(config: Config) -> None:
    try:
        asyncio.run(serve_proxy(config))
    except KeyboardInterrupt:
        console.print("\nStopping schemagate...")
