"""Simulated market data adapter.

Mimics a real provider: random network latency, price drift around fixed
SPX/ES levels and occasional upstream failures.
"""

from __future__ import annotations

import asyncio
import random

from ...observability import get_logger
from ..models import MarketQuote, now_ms
from ..ports import MarketDataPort

logger = get_logger(__name__)

SPX_BASE_PRICE = 6834.50
DEFAULT_BASE_PRICE = 6887.25
SOURCE = "MockProvider_v2"


class MockUpstreamError(RuntimeError):
    """Simulated provider outage."""


class MockMarketAdapter(MarketDataPort):
    """MarketDataPort implementation that fabricates quotes."""

    def __init__(self, failure_rate: float = 0.05, max_latency_ms: int = 500):
        """Create a mock adapter.

        Args:
            failure_rate: Probability (0-1) that a fetch fails.
            max_latency_ms: Upper bound of the simulated network delay.
        """
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be between 0 and 1. Got: {failure_rate}")
        if max_latency_ms < 0:
            raise ValueError(f"max_latency_ms must be >= 0. Got: {max_latency_ms}")
        self.failure_rate = failure_rate
        self.max_latency_ms = max_latency_ms

    async def fetch_quote(self, symbol: str) -> MarketQuote:
        symbol = symbol.upper()

        latency_ms = int(random.random() * self.max_latency_ms)
        await asyncio.sleep(latency_ms / 1000.0)

        if random.random() < self.failure_rate:
            logger.error("mock_upstream_failure", symbol=symbol, latency_ms=latency_ms, error_context="UPSTREAM_TIMEOUT")
            raise MockUpstreamError("Upstream Market Provider is currently unreachable.")

        base_price = SPX_BASE_PRICE if symbol == "SPX" else DEFAULT_BASE_PRICE
        drift = (random.random() - 0.5) * 2.0
        price = round(base_price + drift, 2)

        logger.debug("mock_quote_generated", symbol=symbol, latency_ms=latency_ms, price=price)
        return MarketQuote(symbol=symbol, price=price, timestamp=now_ms(), source=SOURCE)
