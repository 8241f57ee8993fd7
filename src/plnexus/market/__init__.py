"""Market data domain: the `MarketQuote` value object and the port adapters implement."""

from .models import MarketQuote
from .ports import MarketDataPort

__all__ = ["MarketDataPort", "MarketQuote"]
