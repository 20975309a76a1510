"""Diagnostics collected while normalizing schemas.

Normalization never raises for bad schema input. Every anomaly is recorded
here instead, either as a structured ``Diagnostic`` (errors) or as a plain
message (warnings), and handed back to the caller with the best-effort result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class DiagnosticKind(str, Enum):
    """Diagnostic categories."""

    CIRCULAR_REFERENCE = "circular_reference"
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"
    INVALID_SCHEMA = "invalid_schema"
    VALIDATION_ERROR = "validation_error"


class Diagnostic(BaseModel):
    """A non-fatal structured record of an anomaly."""

    kind: DiagnosticKind
    message: str
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)

    def with_path(self, path: Optional[str]) -> "Diagnostic":
        return self.model_copy(update={"path": path})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


@dataclass
class DiagnosticSink:
    """Mutable collector shared by every context of one top-level call."""

    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def error(
        self,
        kind: DiagnosticKind,
        message: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.errors.append(Diagnostic(kind=kind, message=message, path=path, details=details))

    def warn(self, message: str) -> None:
        self.warnings.append(message)
