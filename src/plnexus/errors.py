"""Error taxonomy for the quote CLI.

- Configuration errors: missing/malformed manifest, missing validator, failed
  credential validation. Fatal, reported with a remediation hint.
- Resolution errors: unknown mode, missing export. Fatal.
- Input errors: the operator's input could not be captured or is invalid.
- Cancellation: the operator quit at a prompt. Not a failure; exit 0.
- Market data errors: upstream failures, surfaced with a sanitized message.

Tracer failures are never raised; they have no type here.
"""

from __future__ import annotations

from typing import Any


class PlnexusError(Exception):
    """Base class for errors that end a run early."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(PlnexusError):
    """Configuration is missing or violates its contract."""


class ManifestError(ConfigurationError):
    """The adapter manifest is missing or cannot be parsed."""


class ProviderConfigError(ConfigurationError):
    """A provider validator is missing, incomplete, or rejected the environment."""

    def __init__(self, message: str, *, provider: str, hint: str | None = None) -> None:
        super().__init__(message, context={"provider": provider, "hint": hint})
        self.provider = provider
        self.hint = hint

    def __str__(self) -> str:
        base = super().__str__()
        if self.hint:
            return f"{base} (hint: {self.hint})"
        return base


class AdapterResolutionError(PlnexusError):
    """Any failure while turning a mode into an adapter instance."""

    def __init__(self, message: str, *, mode: str) -> None:
        super().__init__(message, context={"mode": mode})
        self.mode = mode


class InputError(PlnexusError):
    """User input could not be captured or is not acceptable."""


class SessionCancelled(PlnexusError):
    """The operator chose to quit at a prompt."""


class MarketDataUnavailableError(PlnexusError):
    """A quote could not be retrieved. The message is safe to show to the operator."""

    def __init__(self, message: str, *, symbol: str) -> None:
        super().__init__(message, context={"symbol": symbol})
        self.symbol = symbol
