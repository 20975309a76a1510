"""Pending tool-call registry.

Correlates ``functionCall`` parts the model emitted with the
``functionResponse`` parts a client sends back in a later turn. The store is
owned by whoever creates it (one per app instance) and bounds itself by age
and size.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple

from ..util.log import Log

log = Log.create({"service": "server.pending"})


class PendingToolCalls:
    """Call-id -> function-name map with TTL and max-size eviction."""

    def __init__(
        self,
        *,
        ttl_seconds: float = 600.0,
        max_size: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[str, float]]" = OrderedDict()

    def __len__(self) -> int:
        self.prune()
        return len(self._entries)

    def record(self, call_id: str, name: str) -> None:
        self.prune()
        self._entries.pop(call_id, None)
        self._entries[call_id] = (name, self._clock())
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            log.debug("evicted pending tool call", {"call_id": evicted})

    def resolve(self, call_id: str) -> Optional[str]:
        """Return and forget the function name recorded for ``call_id``."""
        self.prune()
        entry = self._entries.pop(call_id, None)
        return entry[0] if entry else None

    def prune(self) -> None:
        """Drop entries older than the TTL."""
        cutoff = self._clock() - self.ttl_seconds
        # Insertion order is recording order, so expired entries lead.
        while self._entries:
            call_id, (_, recorded_at) = next(iter(self._entries.items()))
            if recorded_at > cutoff:
                break
            del self._entries[call_id]


def _parts(payload: Any):
    if not isinstance(payload, dict):
        return
    contents = payload.get("contents")
    if not isinstance(contents, list):
        return
    for content in contents:
        if not isinstance(content, dict):
            continue
        parts = content.get("parts")
        if not isinstance(parts, list):
            continue
        for part in parts:
            if isinstance(part, dict):
                yield part


def correlate_tool_calls(payload: Any, registry: PendingToolCalls) -> int:
    """Record calls and fill unnamed responses in a request payload.

    Mutates ``payload`` in place. Returns the number of ``functionResponse``
    parts whose name was filled in.
    """
    filled = 0
    for part in _parts(payload):
        call = part.get("functionCall")
        if isinstance(call, dict):
            call_id, name = call.get("id"), call.get("name")
            if isinstance(call_id, str) and isinstance(name, str) and name:
                registry.record(call_id, name)
            continue

        response = part.get("functionResponse")
        if not isinstance(response, dict):
            continue
        call_id = response.get("id")
        if not isinstance(call_id, str) or isinstance(response.get("name"), str):
            continue
        name = registry.resolve(call_id)
        if name is not None:
            response["name"] = name
            filled += 1
    return filled
