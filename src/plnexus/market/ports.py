"""Market data port.

The use case depends on this small interface so data providers can be
swapped (via the adapter manifest) without touching domain code.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import MarketQuote


@runtime_checkable
class MarketDataPort(Protocol):
    async def fetch_quote(self, symbol: str) -> MarketQuote:
        """Return the latest quote for `symbol`."""
