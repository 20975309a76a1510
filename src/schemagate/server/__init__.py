"""HTTP reverse proxy for function-calling APIs.

Forwards every request to the configured upstream, normalizing the
``tools`` array of JSON request bodies on the way.

Example:
    from schemagate.server import create_app

    app = create_app()  # serve with uvicorn

Endpoints:
    GET /        - Status line
    GET /health  - Health check
    *   /{path}  - Proxied to the upstream API
"""

from .app import create_app
from .pending import PendingToolCalls, correlate_tool_calls
from .proxy import GeminiProxy

__all__ = [
    "GeminiProxy",
    "PendingToolCalls",
    "correlate_tool_calls",
    "create_app",
]
