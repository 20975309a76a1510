"""Access logging for proxied requests.

Written as raw ASGI so streamed upstream bodies are never buffered: the
middleware only watches the ``http.response.*`` messages as they pass.
"""

from __future__ import annotations

import secrets
import time
from typing import Any, Awaitable, Callable, Dict, MutableMapping
from urllib.parse import parse_qsl, urlencode

from ..util.log import Log

Message = MutableMapping[str, Any]
Scope = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

REQUEST_ID_HEADER = b"x-request-id"
SECRET_PARAMS = frozenset({"key"})

access = Log.create({"service": "server.access"})


def redact_query(raw: bytes) -> str | None:
    """Render a query string with credential parameters masked."""
    if not raw:
        return None
    pairs = parse_qsl(raw.decode("latin-1"), keep_blank_values=True)
    return urlencode([(name, "***" if name in SECRET_PARAMS else value) for name, value in pairs])


def _request_id(scope: Scope) -> str:
    for name, value in scope.get("headers", []):
        if name == REQUEST_ID_HEADER and value:
            return value.decode("latin-1")
    return secrets.token_hex(8)


class AccessLogMiddleware:
    """Tags each request with an ``X-Request-ID`` and logs one line per exchange.

    An inbound ``X-Request-ID`` is reused; otherwise a random one is made.
    The id is stored on ``request.state.request_id`` and always replaces
    any id header the upstream sent back.
    """

    def __init__(self, app: ASGIApp, enabled: bool = True) -> None:
        self.app = app
        self.enabled = enabled

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        rid = _request_id(scope)
        scope.setdefault("state", {})["request_id"] = rid
        started = time.perf_counter()
        seen: Dict[str, int] = {"status": 500, "bytes": 0}

        async def relay(message: Message) -> None:
            if message["type"] == "http.response.start":
                seen["status"] = message["status"]
                headers = [
                    (name, value)
                    for name, value in message.get("headers", [])
                    if name.lower() != REQUEST_ID_HEADER
                ]
                headers.append((REQUEST_ID_HEADER, rid.encode("latin-1")))
                message = {**message, "headers": headers}
            elif message["type"] == "http.response.body":
                seen["bytes"] += len(message.get("body", b""))
            await send(message)

        failure: BaseException | None = None
        try:
            await self.app(scope, receive, relay)
        except Exception as exc:
            failure = exc
            raise
        finally:
            if self.enabled:
                fields = {
                    "request_id": rid,
                    "method": scope.get("method"),
                    "path": scope.get("path"),
                    "query": redact_query(scope.get("query_string", b"")),
                    "status": seen["status"],
                    "bytes": seen["bytes"],
                    "client_ip": (scope.get("client") or (None,))[0],
                    "duration_ms": int((time.perf_counter() - started) * 1000),
                }
                if failure is None:
                    access.info("request", fields)
                else:
                    access.error("request failed", {**fields, "error": str(failure)})
