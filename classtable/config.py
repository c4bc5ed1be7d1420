"""
Client configuration.

Values come from CLASSTABLE_* environment variables and can be overridden
by CLI options:

    CLASSTABLE_API_URL      Base URL of the REST API (default http://localhost:5000/api/v1)
    CLASSTABLE_TOKEN        Bearer token
    CLASSTABLE_INSTITUTION  Institution id attached to requests
    CLASSTABLE_TIMEOUT      Request timeout in seconds (default 30)
    CLASSTABLE_RETRIES      Retries for 5xx responses (default 3)
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "CLASSTABLE_"
DEFAULT_API_URL = "http://localhost:5000/api/v1"


class ClientConfig(BaseModel):
    """Connection settings for the timetable REST API."""
    model_config = ConfigDict(extra="forbid")

    api_url: str = Field(default=DEFAULT_API_URL, description="Base URL, without trailing slash")
    token: Optional[str] = Field(default=None, description="Bearer token")
    institution: Optional[str] = Field(default=None, description="Institution id")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    retries: int = Field(default=3, ge=0, le=10, description="Retries on 5xx responses")

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "ClientConfig":
        """Build from environment variables, then apply non-None overrides."""
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
