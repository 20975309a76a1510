"""Reverse proxy that normalizes tool schemas on the way upstream.

Requests are forwarded verbatim except for JSON bodies carrying a ``tools``
array, whose function declarations are rewritten by
``schemagate.schema.normalize_tools``. Normalization diagnostics are logged
and never block the request. Upstream responses, including server-sent
event streams and binary bodies, are relayed as raw byte streams.
"""

from __future__ import annotations

import json
from typing import List, Optional, Tuple
from urllib.parse import quote, unquote

import httpx
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from ..core.config_schema import Config
from ..schema import normalize_tools
from ..util.log import Log
from .errors import error_response, internal_error
from .pending import PendingToolCalls, correlate_tool_calls

log = Log.create({"service": "server.proxy"})

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)
REQUEST_DROP = HOP_BY_HOP | {"host", "content-length"}
RESPONSE_DROP = HOP_BY_HOP | {"content-length"}

API_KEY_HEADER = "x-goog-api-key"

RawHeaders = List[Tuple[bytes, bytes]]


class BodyTooLarge(Exception):
    """Raised when a request body exceeds the configured ceiling."""


def _raw_path(request: Request) -> str:
    # Starlette decodes scope["path"]; %2F and %3F must reach upstream escaped.
    raw = request.scope.get("raw_path")
    if raw:
        return raw.decode("latin-1")
    return quote(request.url.path)


class GeminiProxy:
    """Request handlers bound to one configuration, client and registry."""

    def __init__(self, config: Config, client: httpx.AsyncClient, pending: PendingToolCalls) -> None:
        self.config = config
        self.client = client
        self.pending = pending
        self._base = httpx.URL(config.upstream_url)

    async def status(self, request: Request) -> Response:
        return PlainTextResponse("schemagate proxy is running.\n")

    async def health(self, request: Request) -> Response:
        return JSONResponse({"status": "ok", "upstream": str(self._base)})

    def target_url(self, path: str, query: str) -> Optional[httpx.URL]:
        """Join a still-encoded request path onto the upstream URL, refusing to leave it."""
        if ".." in unquote(path).split("/"):
            return None
        text = f"{self.config.upstream_url}{path.lstrip('/')}"
        if query:
            text = f"{text}?{query}"
        try:
            target = httpx.URL(text)
        except httpx.InvalidURL:
            return None
        if (target.scheme, target.host, target.port) != (self._base.scheme, self._base.host, self._base.port):
            return None
        if not target.path.startswith(self._base.path):
            return None
        return target

    async def _read_body(self, request: Request) -> bytes:
        limit = self.config.max_request_bytes
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise BodyTooLarge()

        chunks: List[bytes] = []
        size = 0
        async for chunk in request.stream():
            size += len(chunk)
            if size > limit:
                raise BodyTooLarge()
            chunks.append(chunk)
        return b"".join(chunks)

    def rewrite_body(self, body: bytes) -> bytes:
        """Normalize ``tools`` and correlate tool calls in a JSON request body."""
        try:
            payload = json.loads(body)
        except ValueError as e:
            log.warn("could not parse JSON body, proxying as is", {"error": str(e)})
            return body
        if not isinstance(payload, dict):
            return body

        changed = False
        tools = payload.get("tools")
        if isinstance(tools, list):
            result = normalize_tools(tools, self.config.normalization)
            if result.errors:
                log.error(
                    "schema normalization errors",
                    {"count": len(result.errors), "errors": [error.to_dict() for error in result.errors]},
                )
            if result.warnings:
                log.warn(
                    "schema normalization warnings",
                    {"count": len(result.warnings), "warnings": result.warnings},
                )
            payload["tools"] = result.tools
            changed = True

        filled = correlate_tool_calls(payload, self.pending)
        if filled:
            log.debug("filled function response names", {"count": filled})
            changed = True

        if not changed:
            return body
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    def _forward_headers(self, request: Request) -> RawHeaders:
        headers: RawHeaders = [
            (key, value)
            for key, value in request.headers.raw
            if key.decode("latin-1").lower() not in REQUEST_DROP
        ]
        has_credentials = (
            API_KEY_HEADER in request.headers
            or "authorization" in request.headers
            or "key" in request.query_params
        )
        if self.config.api_key and not has_credentials:
            headers.append((API_KEY_HEADER.encode("latin-1"), self.config.api_key.encode("latin-1")))
        return headers

    async def forward(self, request: Request) -> Response:
        # Failures are answered here, inside the CORS and access-log middleware.
        try:
            return await self._forward(request)
        except Exception as e:
            return internal_error(request, e)

    async def _forward(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            # CORS preflights are answered by CORSMiddleware before reaching here.
            return Response(status_code=204)

        target = self.target_url(_raw_path(request), request.url.query)
        if target is None:
            return error_response("Invalid target URL.", "INVALID_TARGET", 400)

        try:
            body = await self._read_body(request)
        except BodyTooLarge:
            log.warn("request body too large", {"path": request.url.path, "limit": self.config.max_request_bytes})
            return error_response("Request body too large.", "PAYLOAD_TOO_LARGE", 413)

        content_type = request.headers.get("content-type", "")
        if request.method in {"POST", "PUT"} and "application/json" in content_type and body:
            body = self.rewrite_body(body)

        upstream_request = self.client.build_request(
            request.method,
            target,
            headers=self._forward_headers(request),
            content=body,
        )
        try:
            upstream = await self.client.send(upstream_request, stream=True, follow_redirects=False)
        except httpx.HTTPError as e:
            log.error("upstream request failed", {"path": target.path, "error": str(e)})
            return error_response(f"Failed to proxy request: {e}", "PROXY_ERROR", 502)

        response = StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        response.raw_headers.extend(
            (key.lower(), value)
            for key, value in upstream.headers.raw
            if key.decode("latin-1").lower() not in RESPONSE_DROP
        )
        return response
