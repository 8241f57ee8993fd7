"""Terminal presentation of quotes."""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TextIO

from ..market import MarketQuote


class ConsoleRenderer:
    """Prints quotes to stdout and operator-facing errors to stderr."""

    def __init__(self, *, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self._out = out
        self._err = err

    def render(self, quote: MarketQuote) -> None:
        captured = datetime.fromtimestamp(quote.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
        lines = [
            "",
            f"  {quote.symbol}  {quote.price:,.2f}",
            f"  source: {quote.source}",
            f"  as of:  {captured}" + ("  (stale)" if quote.is_stale() else ""),
            "",
        ]
        print("\n".join(lines), file=self._out or sys.stdout)

    def render_error(self, message: str) -> None:
        print(f"Error: {message}", file=self._err or sys.stderr)
