"""Configuration schema: Pydantic models for schemagate config files."""

from __future__ import annotations

from typing import Literal, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..schema.options import NormalizationOptions
from ..util.log import LogLevel

DEFAULT_UPSTREAM_URL = "https://generativelanguage.googleapis.com/"
DEFAULT_PORT = 8000
# Large enough for inline image uploads.
DEFAULT_MAX_REQUEST_BYTES = 15 * 1024 * 1024


class ServerConfig(BaseModel):
    """Listening address of the proxy."""
    host: str = "127.0.0.1"
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    access_log: bool = Field(True, alias="accessLog")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Optional[str] = None
    format: Optional[Literal["kv", "json", "pretty"]] = None
    console: Optional[bool] = None
    file: Optional[bool] = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return LogLevel.parse(value).value


class PendingCallsConfig(BaseModel):
    """Bounds of the pending tool-call registry."""
    ttl_seconds: float = Field(600.0, alias="ttlSeconds", gt=0)
    max_size: int = Field(1024, alias="maxSize", gt=0)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Config(BaseModel):
    """Main configuration schema."""
    schema_: Optional[str] = Field(None, alias="$schema")
    upstream_url: str = Field(DEFAULT_UPSTREAM_URL, alias="upstreamUrl")
    api_key: Optional[str] = Field(None, alias="apiKey")
    max_request_bytes: int = Field(DEFAULT_MAX_REQUEST_BYTES, alias="maxRequestBytes", gt=0)
    timeout: float = Field(300.0, gt=0)

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    normalization: NormalizationOptions = Field(default_factory=NormalizationOptions)
    pending_calls: PendingCallsConfig = Field(default_factory=PendingCallsConfig, alias="pendingCalls")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("upstream_url")
    @classmethod
    def _check_upstream_url(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid upstream URL: {value}") from e
        if url.scheme not in {"http", "https"} or not url.host:
            raise ValueError(f"upstream URL must be an absolute http(s) URL: {value}")
        return value if value.endswith("/") else f"{value}/"
