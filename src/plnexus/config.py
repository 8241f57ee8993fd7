"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating required fields and providing actionable error messages.

Provider credentials are not read here; each provider validator under
`plnexus.providers` reads its own variables on demand.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, TypeVar

import dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_T = TypeVar("_T", int, float)

LogLevelName = Literal["error", "warn", "info", "debug"]

_LOG_LEVEL_ALIASES = {"warning": "warn"}


def _get_required_env(name: str) -> str:
    """Read a required env var or raise a helpful error."""
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"{name} is required. Please set it in your .env file.")
    if value.startswith("your_") and value.endswith("_here"):
        raise ValueError(f"{name} is required. Please replace the placeholder value in your .env file.")
    return value


def _get_env_flag(name: str) -> bool:
    """Read an opt-in flag: only the literal "true" (any case) enables it."""
    return os.getenv(name, "").strip().lower() == "true"


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


class RuntimeSettings(BaseModel):
    """Process-wide settings, hydrated once at startup."""

    model_config = ConfigDict(frozen=True)

    enable_tracing: bool = Field(default=False, description="Write execution traces to logs/traces")
    log_level: LogLevelName = Field(default="info", description="Verbosity for traces and diagnostics")
    environment: str = Field(default="development", description="Runtime environment descriptor")
    trace_namespace: str = Field(default="plnexus", description="Prefix of the trace file name")
    env_file: Path | None = Field(default=None, description="The .env file that was loaded, if any")

    @field_validator("log_level", mode="before")
    def normalize_log_level(cls, v: object) -> object:
        """Accept any case and the `warning` alias."""
        if isinstance(v, str):
            normalized = v.strip().lower()
            return _LOG_LEVEL_ALIASES.get(normalized, normalized)
        return v

    @property
    def tracing_enabled(self) -> bool:
        """Read-only accessor for the tracing switch."""
        return self.enable_tracing


def hydrate_environment(root: str | Path) -> RuntimeSettings:
    """Load `<root>/.env` and build the runtime settings.

    Notes:
    - A missing `.env` is not an error; shell variables are used as-is.
    - Raises `ValueError` when LOG_LEVEL is not one of error/warn/info/debug.
    """
    env_path = Path(root) / ".env"
    loaded: Path | None = None
    if env_path.is_file():
        dotenv.load_dotenv(env_path)
        loaded = env_path

    return RuntimeSettings(
        enable_tracing=_get_env_flag("ENABLE_TRACING"),
        log_level=os.getenv("LOG_LEVEL") or "info",
        environment=os.getenv("PLNEXUS_ENV") or "development",
        env_file=loaded,
    )
