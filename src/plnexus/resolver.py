"""Manifest-driven adapter resolution.

`config/adapters.manifest.json` maps execution modes to adapter classes:

    {"adapters": {"2": {"path": "plnexus.market.adapters.mock",
                        "className": "MockMarketAdapter",
                        "requiresConfig": false}}}

`path` is either a dotted module name or a `.py` file (relative to the project
root, or absolute). The manifest is re-read on every call so edits take effect
without a restart, and only the selected adapter's module is ever imported.
"""

from __future__ import annotations

import asyncio
import importlib
import importlib.util
import json
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import AdapterResolutionError, ManifestError
from .observability import get_logger

logger = get_logger(__name__)

MANIFEST_RELATIVE_PATH = Path("config") / "adapters.manifest.json"


class ProviderConfigSource(Protocol):
    async def get_provider_config(self, provider: str) -> Any:
        """Return validated configuration for a provider."""


class AdapterManifestEntry(BaseModel):
    """How to construct one adapter variant."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    path: str = Field(..., min_length=1)
    class_name: str = Field(..., alias="className", min_length=1)
    requires_config: bool = Field(default=False, alias="requiresConfig")
    config_key: str | None = Field(default=None, alias="configKey")

    @model_validator(mode="after")
    def check_config_key(self) -> "AdapterManifestEntry":
        if self.requires_config and not self.config_key:
            raise ValueError(f"adapter {self.class_name} sets requiresConfig but has no configKey")
        return self


class AdapterManifest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    adapters: dict[str, AdapterManifestEntry]


class AdapterResolver:
    """Turns a mode identifier into an instantiated market data adapter."""

    def __init__(self, root: str | Path | None):
        if not root:
            raise ValueError("AdapterResolver requires a project root for path resolution.")
        self.root = Path(root)
        self.manifest_path = self.root / MANIFEST_RELATIVE_PATH

    async def load_adapter(self, mode: str, config_provider: ProviderConfigSource) -> Any:
        """Load and instantiate the adapter declared for `mode`.

        Raises:
            AdapterResolutionError: for any failure, with the cause chained.
        """
        try:
            manifest = await self._read_manifest()

            entry = manifest.adapters.get(mode)
            if entry is None:
                available = ", ".join(manifest.adapters)
                raise KeyError(f'Execution mode "{mode}" is not defined in manifest. Available: [{available}]')

            logger.debug("adapter_resolving", mode=mode, class_name=entry.class_name, path=entry.path)
            module = self._import_module(entry.path)

            adapter_cls = getattr(module, entry.class_name, None)
            if adapter_cls is None:
                raise LookupError(f'Export "{entry.class_name}" not found in module at {entry.path}')

            if entry.requires_config:
                config = await config_provider.get_provider_config(entry.config_key)
                logger.info("adapter_config_injected", class_name=entry.class_name, provider=entry.config_key)
                return adapter_cls(config)

            logger.info("adapter_initialized", class_name=entry.class_name)
            return adapter_cls()
        except Exception as exc:
            message = f"Load failure for mode {mode}: {_describe(exc)}"
            logger.error("adapter_load_failed", mode=mode, error=_describe(exc), exc_info=True)
            raise AdapterResolutionError(message, mode=mode) from exc

    async def _read_manifest(self) -> AdapterManifest:
        try:
            raw = await asyncio.to_thread(self.manifest_path.read_text, encoding="utf-8")
        except FileNotFoundError as exc:
            raise ManifestError(
                f"Manifest missing at: {self.manifest_path}. Please check your config/ directory."
            ) from exc
        except UnicodeDecodeError as exc:
            raise ManifestError(f"Malformed manifest: not valid UTF-8 ({exc.reason})") from exc
        except OSError as exc:
            raise ManifestError(f"Manifest unreadable at: {self.manifest_path} ({exc.strerror or exc})") from exc

        try:
            return AdapterManifest.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ManifestError(f"Malformed manifest: {exc}") from exc

    def _import_module(self, raw_path: str) -> ModuleType:
        if not _is_file_path(raw_path):
            return importlib.import_module(raw_path)

        path = Path(raw_path)
        if not path.is_absolute():
            path = self.root / path
        path = path.resolve()

        module_name = "_plnexus_adapter_" + re.sub(r"\W", "_", str(path.with_suffix("")))
        if module_name in sys.modules:
            return sys.modules[module_name]

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load adapter module from {path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module


def _is_file_path(raw_path: str) -> bool:
    return raw_path.endswith(".py") or "/" in raw_path or "\\" in raw_path


def _describe(exc: BaseException) -> str:
    # KeyError wraps its message in quotes when str()'d.
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)
