"""Normalization options."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_DEPTH = 12


class NormalizationOptions(BaseModel):
    """Options for one normalization call.

    Accepts both the wire spelling (``maxDepth``) and the Python one
    (``max_depth``). Unknown keys are ignored so callers can pass a larger
    settings mapping straight through.
    """

    max_depth: int = Field(DEFAULT_MAX_DEPTH, alias="maxDepth", gt=0)
    generate_descriptions: bool = Field(True, alias="generateDescriptions")
    infer_required: bool = Field(True, alias="inferRequired")

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @classmethod
    def resolve(
        cls,
        value: Optional[Union["NormalizationOptions", Mapping[str, Any]]] = None,
    ) -> "NormalizationOptions":
        """Merge caller-supplied options over the defaults."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls.model_validate({k: v for k, v in value.items() if v is not None})
