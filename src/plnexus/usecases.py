"""Domain use cases."""

from __future__ import annotations

from .errors import InputError, MarketDataUnavailableError
from .market import MarketDataPort, MarketQuote
from .observability import SpanTracer, get_logger

logger = get_logger(__name__)


class GetMarketSnapshot:
    """Fetch one quote through the market data port, inside a traced span.

    Upstream failures are logged in full here and re-raised as a
    `MarketDataUnavailableError` whose message carries no adapter detail.
    """

    def __init__(self, adapter: MarketDataPort, tracer: SpanTracer):
        self._adapter = adapter
        self._tracer = tracer

    async def execute(self, symbol: str) -> MarketQuote:
        if not isinstance(symbol, str) or not symbol.strip():
            raise InputError("A ticker symbol is required.")
        symbol = symbol.strip().upper()

        try:
            return await self._tracer.trace_span(
                "DOMAIN",
                "GET_MARKET_SNAPSHOT",
                lambda: self._adapter.fetch_quote(symbol),
                {"symbol": symbol, "adapter": type(self._adapter).__name__},
            )
        except Exception as exc:
            logger.error(
                "market_snapshot_failed",
                symbol=symbol,
                adapter=type(self._adapter).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise MarketDataUnavailableError(
                f"Unable to retrieve market data for {symbol}. Please try again later.",
                symbol=symbol,
            ) from exc
