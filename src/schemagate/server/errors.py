"""Error responses for the proxy transport layer."""

from __future__ import annotations

import traceback

from starlette.requests import Request
from starlette.responses import JSONResponse

from ..util.log import Log

log = Log.create({"service": "server.errors"})


def error_response(message: str, code: str, status: int) -> JSONResponse:
    """Build an error body in the upstream API's own error shape."""
    return JSONResponse(
        {"error": {"message": message, "code": code, "status": status}},
        status_code=status,
    )


def internal_error(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected failure and answer with a 500 error body."""
    log.error(
        "proxy request failed",
        {
            "request_id": getattr(request.state, "request_id", None),
            "method": request.method,
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error": str(exc),
            "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        },
    )
    return error_response("Internal server error", "INTERNAL_ERROR", 500)


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return internal_error(request, exc)
