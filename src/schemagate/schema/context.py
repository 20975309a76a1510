"""Per-call traversal state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Set, Tuple

from .diagnostics import DiagnosticSink
from .options import NormalizationOptions

ROOT_PATH = "root"


def path_to_string(path: Iterable[str]) -> str:
    """Render a path tuple, using ``root`` for the empty path."""
    segments = list(path)
    return ".".join(segments) if segments else ROOT_PATH


def prepend_path(prefix: str, suffix: Optional[str]) -> str:
    if not suffix or suffix == ROOT_PATH:
        return prefix
    return f"{prefix}.{suffix}"


@dataclass
class NormalizationContext:
    """Traversal state for one node.

    ``path`` and ``depth`` are per node. ``options``, ``visited`` and ``sink``
    are shared by reference across every child of one top-level call.
    """

    options: NormalizationOptions
    sink: DiagnosticSink = field(default_factory=DiagnosticSink)
    visited: Set[int] = field(default_factory=set)
    path: Tuple[str, ...] = ()
    depth: int = 0
    hint: Optional[str] = None

    @property
    def location(self) -> str:
        return path_to_string(self.path)

    def child(self, segment: str, hint: Optional[str] = None) -> "NormalizationContext":
        return replace(self, path=(*self.path, segment), depth=self.depth + 1, hint=hint)

    def at(self, segment: str) -> str:
        """Location string of a keyword under this node."""
        return path_to_string((*self.path, segment))
