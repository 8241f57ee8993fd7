"""Provider configuration resolution.

Each data provider ships a validator exposing `validate()`, which reads the
provider's environment variables and returns a frozen config model.
Validators are registered as lazy `"module:attribute"` targets and imported
only when their provider is requested, so running against one provider never
loads (or demands credentials for) another.
"""

from __future__ import annotations

import importlib
import inspect
from collections.abc import Mapping
from typing import Any

from ..errors import ProviderConfigError
from ..observability import get_logger

logger = get_logger(__name__)

VALIDATOR_HINT = "Check that the provider's validator exists in plnexus/providers/ and its environment variables are set."


def conventional_target(provider: str) -> str:
    """`Finnhub` -> `plnexus.providers.finnhub:FinnhubConfigValidator`."""
    return f"{__name__}.{provider.lower()}:{provider}ConfigValidator"


class ProviderConfigResolver:
    """Resolves and validates provider configuration on demand (never cached)."""

    def __init__(self, registry: Mapping[str, str] | None = None) -> None:
        """Create a resolver.

        Args:
            registry: Provider name -> `"module:attribute"` validator target.
                Providers without an entry use `conventional_target`.
        """
        self._registry: dict[str, str] = dict(registry or {})

    def register(self, provider: str, target: str) -> None:
        self._registry[provider] = target

    def target_for(self, provider: str) -> str:
        return self._registry.get(provider) or conventional_target(provider)

    async def get_provider_config(self, provider: str) -> Any:
        """Return the validated, immutable configuration for `provider`.

        Raises:
            ProviderConfigError: validator missing, lacking `validate()`, or validation failed.
        """
        try:
            validator = self._load_validator(provider)
            config = validator.validate()
            if inspect.isawaitable(config):
                config = await config
            return config
        except Exception as exc:
            logger.error(
                "provider_config_failed",
                provider=provider,
                error=str(exc),
                hint=VALIDATOR_HINT,
            )
            if isinstance(exc, ProviderConfigError):
                raise
            raise ProviderConfigError(
                f"Configuration for provider {provider} is invalid: {exc}",
                provider=provider,
                hint=VALIDATOR_HINT,
            ) from exc

    def _load_validator(self, provider: str) -> Any:
        if not provider:
            raise ProviderConfigError("Provider name is required.", provider=provider, hint=VALIDATOR_HINT)

        target = self.target_for(provider)
        module_name, _, attr = target.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            raise ProviderConfigError(
                f"Validator module {module_name} for provider {provider} was not found.",
                provider=provider,
                hint=VALIDATOR_HINT,
            ) from exc

        validator = getattr(module, attr, None)
        if validator is None or not callable(getattr(validator, "validate", None)):
            raise ProviderConfigError(
                f"Validator for {provider} does not implement the .validate() contract.",
                provider=provider,
                hint=VALIDATOR_HINT,
            )
        return validator


__all__ = ["ProviderConfigResolver", "conventional_target"]
