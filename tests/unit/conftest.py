from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def _no_threads_in_unit_tests(monkeypatch: pytest.MonkeyPatch):
    """Run `asyncio.to_thread` inline for unit tests.

    Trace writes, manifest reads and HTTP calls go through `asyncio.to_thread`.
    In unit tests, this can create threadpool workers that keep the Python
    process alive longer than expected under some runtimes.
    """

    async def _to_thread(func, /, *args, **kwargs):  # noqa: ANN001, D401
        return func(*args, **kwargs)

    monkeypatch.setattr("plnexus.observability.tracer.asyncio.to_thread", _to_thread)
    yield


@pytest.fixture
def write_manifest(tmp_path: Path):
    """Write `config/adapters.manifest.json` under `tmp_path` and return the root."""

    def _write(adapters: dict[str, Any] | str) -> Path:
        config_dir = tmp_path / "config"
        config_dir.mkdir(exist_ok=True)
        body = adapters if isinstance(adapters, str) else json.dumps({"adapters": adapters})
        (config_dir / "adapters.manifest.json").write_text(body, encoding="utf-8")
        return tmp_path

    return _write



REPO_MANIFEST = Path(__file__).resolve().parents[2] / "config" / "adapters.manifest.json"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root holding a copy of the shipped adapter manifest."""
    (tmp_path / "config").mkdir()
    shutil.copy(REPO_MANIFEST, tmp_path / "config" / "adapters.manifest.json")
    return tmp_path
