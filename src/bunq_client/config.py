"""
Client configuration.
"""

import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Environment(str, Enum):
    PRODUCTION = "https://api.bunq.com/v1"
    SANDBOX = "https://public-api.sandbox.bunq.com/v1"

    @classmethod
    def from_name(cls, name: str) -> "Environment":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown environment {name!r}, expected 'production' or 'sandbox'") from None


class BunqConfig(BaseModel):
    api_key: str = Field(min_length=1)
    environment: Environment = Environment.PRODUCTION
    description: str = "bunq-client-python"
    permitted_ips: list[str] = Field(default_factory=lambda: ["*"])
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=5, ge=0)
    initial_backoff: float = Field(default=1.0, ge=0)
    session_refresh_margin: float = Field(default=30.0, ge=0)
    page_size: int = Field(default=200, ge=1, le=200)

    @field_validator("permitted_ips")
    @classmethod
    def _wildcard_when_empty(cls, ips: list[str]) -> list[str]:
        return ips or ["*"]

    @property
    def base_url(self) -> str:
        return self.environment.value

    @classmethod
    def from_env(cls, api_key: Optional[str] = None, **overrides: object) -> "BunqConfig":
        """Build a config from BUNQ_API_KEY / BUNQ_ENVIRONMENT / BUNQ_DESCRIPTION."""
        values: dict[str, object] = {"api_key": api_key or os.environ.get("BUNQ_API_KEY", "")}
        if os.environ.get("BUNQ_ENVIRONMENT"):
            values["environment"] = Environment.from_name(os.environ["BUNQ_ENVIRONMENT"])
        if os.environ.get("BUNQ_DESCRIPTION"):
            values["description"] = os.environ["BUNQ_DESCRIPTION"]
        values.update(overrides)
        return cls(**values)
