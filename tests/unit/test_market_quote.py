import math

import pytest

from plnexus.market import MarketQuote
from plnexus.market.models import STALE_AFTER_MS, now_ms


def test_symbol_is_upper_cased_and_source_defaults():
    quote = MarketQuote(symbol=" spx ", price=6834.5, timestamp=now_ms())

    assert quote.symbol == "SPX"
    assert quote.source == "UNKNOWN"


def test_zero_price_is_allowed():
    assert MarketQuote(symbol="es", price=0, timestamp=now_ms()).price == 0.0


@pytest.mark.parametrize("price", [-1, -0.01, "12", None, True, math.nan, math.inf])
def test_invalid_price_is_rejected(price):
    with pytest.raises(ValueError):
        MarketQuote(symbol="SPX", price=price, timestamp=now_ms())


@pytest.mark.parametrize("symbol", ["", "   ", None, 123])
def test_invalid_symbol_is_rejected(symbol):
    with pytest.raises(ValueError):
        MarketQuote(symbol=symbol, price=1.0, timestamp=now_ms())


@pytest.mark.parametrize("timestamp", ["yesterday", None, math.nan, False])
def test_invalid_timestamp_is_rejected(timestamp):
    with pytest.raises(ValueError):
        MarketQuote(symbol="SPX", price=1.0, timestamp=timestamp)


def test_quote_is_immutable():
    quote = MarketQuote(symbol="SPX", price=1.0, timestamp=now_ms(), source="Mock")

    with pytest.raises(ValueError):
        quote.price = 2.0  # type: ignore[misc]


def test_age_and_staleness():
    fresh = MarketQuote(symbol="SPX", price=1.0, timestamp=now_ms())
    assert 0 <= fresh.get_age() < 1000
    assert fresh.is_stale() is False

    captured = 1_700_000_000_000
    quote = MarketQuote(symbol="SPX", price=1.0, timestamp=captured)
    assert quote.get_age(now=captured + STALE_AFTER_MS) == STALE_AFTER_MS
    assert quote.is_stale(now=captured + STALE_AFTER_MS) is False
    assert quote.is_stale(now=captured + STALE_AFTER_MS + 1) is True
