"""Pytest configuration.

Adds the repo's `src/` directory to `sys.path` so tests can import `plnexus`
without installing the project, and routes diagnostic logging to stderr.
"""

from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    """Configure pytest before collecting/running tests."""
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_dir_str = str(src_dir)
    if src_dir_str not in sys.path:
        sys.path.insert(0, src_dir_str)

    from plnexus.observability import configure_logging

    configure_logging("debug")
