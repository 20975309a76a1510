"""Starlette application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from ..core.config_schema import Config
from ..util.log import Log
from .errors import internal_error_handler
from .middleware import AccessLogMiddleware
from .pending import PendingToolCalls
from .proxy import PROXY_METHODS, GeminiProxy

log = Log.create({"service": "server"})

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_MAX_AGE = 86400


def create_app(
    config: Optional[Config] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    pending: Optional[PendingToolCalls] = None,
) -> Starlette:
    """Create the proxy application.

    An injected ``client`` stays owned by the caller; otherwise the app
    creates one and closes it on shutdown.
    """
    config = config or Config()
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=httpx.Timeout(config.timeout, connect=10.0))
    registry = pending or PendingToolCalls(
        ttl_seconds=config.pending_calls.ttl_seconds,
        max_size=config.pending_calls.max_size,
    )
    proxy = GeminiProxy(config, http, registry)

    @asynccontextmanager
    async def _lifespan(app: Starlette) -> AsyncIterator[None]:
        log.info("proxy starting", {"upstream": config.upstream_url})
        try:
            yield
        finally:
            if owns_client:
                await http.aclose()
            log.info("proxy stopped")

    routes = [
        Route("/", proxy.status, methods=["GET", "HEAD"]),
        Route("/health", proxy.health, methods=["GET"]),
        Route("/{path:path}", proxy.forward, methods=PROXY_METHODS),
    ]

    middleware = [
        Middleware(AccessLogMiddleware, enabled=config.server.access_log),
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=CORS_METHODS,
            allow_headers=["*"],
            max_age=CORS_MAX_AGE,
        ),
    ]

    app = Starlette(
        routes=routes,
        middleware=middleware,
        lifespan=_lifespan,
        exception_handlers={Exception: internal_error_handler},
    )
    app.state.config = config
    app.state.proxy = proxy
    app.state.pending = registry
    return app
