"""Finnhub provider configuration contract.

Loaded only when a live-mode adapter asks for the `Finnhub` provider, so a
mock run never requires FINNHUB_API_KEY.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import _get_env_number, _get_required_env

DEFAULT_BASE_URL = "https://finnhub.io/api/v1"


class FinnhubConfig(BaseModel):
    """Configuration for the Finnhub quote API."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., description="Finnhub API token")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="REST base URL")

    timeout_s: float = Field(default=10.0, description="Per-request timeout (seconds)")
    max_attempt: int = Field(default=3, description="Max attempts per request")
    base_delay: float = Field(default=0.5, description="Initial retry delay (seconds)")
    backoff_multiplier: float = Field(default=2.0, description="Exponential backoff multiplier")
    max_delay: float = Field(default=10.0, description="Max total delay before failing (seconds)")

    @field_validator("api_key")
    def validate_api_key(cls, v: str) -> str:
        """Validate api key is set (not empty/placeholder)."""
        if not v or v == "your_finnhub_api_key_here":
            raise ValueError("FINNHUB_API_KEY is required. Please set it in your .env file.")
        return v

    @field_validator("base_url")
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"FINNHUB_BASE_URL must be an http(s) URL. Got: {v!r}")
        return v.rstrip("/")

    @field_validator("max_attempt")
    def validate_max_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"FINNHUB_MAX_ATTEMPT must be >= 1. Got: {v}")
        return v


class FinnhubConfigValidator:
    """Builds a `FinnhubConfig` from the current environment."""

    @staticmethod
    def validate() -> FinnhubConfig:
        return FinnhubConfig(
            api_key=_get_required_env("FINNHUB_API_KEY"),
            base_url=os.getenv("FINNHUB_BASE_URL") or DEFAULT_BASE_URL,
            timeout_s=_get_env_number("FINNHUB_TIMEOUT", 10.0, float),
            max_attempt=_get_env_number("FINNHUB_MAX_ATTEMPT", 3, int),
            base_delay=_get_env_number("FINNHUB_BASE_DELAY", 0.5, float),
            backoff_multiplier=_get_env_number("FINNHUB_BACKOFF_MULTIPLIER", 2.0, float),
            max_delay=_get_env_number("FINNHUB_MAX_DELAY", 10.0, float),
        )
