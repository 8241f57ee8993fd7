"""Live market data adapter backed by the Finnhub REST API.

The HTTP call uses `requests` executed in a thread so the orchestrator's event
loop is not blocked. Transient failures (429, 5xx, transport errors) are
retried with exponential backoff and a little jitter.
"""

from __future__ import annotations

import asyncio
import random
import time
from typing import Any

import requests  # type: ignore

from ...observability import get_logger
from ...providers.finnhub import FinnhubConfig
from ..models import MarketQuote, now_ms
from ..ports import MarketDataPort

logger = get_logger(__name__)

SOURCE = "Finnhub"


class FinnhubHttpError(RuntimeError):
    """HTTP-level error returned by the Finnhub API."""

    def __init__(self, *, status_code: int, payload: dict[str, Any] | None):
        """Create an error capturing HTTP status code and parsed payload (if any)."""
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Finnhub API HTTP {status_code}: {payload}")


class FinnhubSymbolNotFound(LookupError):
    """Finnhub answered with an all-zero quote, its way of saying "unknown symbol"."""


class FinnhubMarketAdapter(MarketDataPort):
    """MarketDataPort implementation backed by Finnhub `/quote`."""

    def __init__(self, config: FinnhubConfig):
        self.config = config

    async def fetch_quote(self, symbol: str) -> MarketQuote:
        symbol = symbol.upper()
        payload = await self._send_with_retries("/quote", {"symbol": symbol})
        return _quote_from_payload(symbol, payload)

    async def _send_request(self, path: str, params: dict[str, str]) -> Any:
        """Send one GET request, returning the decoded JSON response.

        Raises:
        - `FinnhubHttpError` for non-2xx responses
        - `requests.RequestException` for transport errors
        """
        url = self.config.base_url + path
        query = {**params, "token": self.config.api_key}

        def _do_request() -> Any:
            """Execute the HTTP request synchronously (runs in a worker thread)."""
            resp = requests.get(url, params=query, timeout=self.config.timeout_s)
            if 200 <= resp.status_code < 300:
                if not resp.content:
                    return None
                return resp.json()

            error_payload: dict[str, Any] | None
            try:
                error_payload = resp.json()
            except Exception:  # noqa: BLE001 - best-effort parsing
                error_payload = None
            raise FinnhubHttpError(status_code=resp.status_code, payload=error_payload)

        return await asyncio.to_thread(_do_request)

    async def _send_with_retries(self, path: str, params: dict[str, str]) -> Any:
        attempt = 0
        start = time.monotonic()

        while True:
            try:
                return await self._send_request(path, params)
            except Exception as exc:  # noqa: BLE001 - classify and retry/raise
                attempt += 1
                if not _is_retryable_error(exc):
                    raise
                if attempt >= self.config.max_attempt:
                    raise

                delay = self.config.base_delay * (self.config.backoff_multiplier ** (attempt - 1))
                delay += random.uniform(0.0, delay * 0.1)  # small jitter

                if (time.monotonic() - start) + delay > self.config.max_delay:
                    raise
                logger.warning("finnhub_retry", path=path, attempt=attempt, delay_s=round(delay, 3), error=str(exc))
                await asyncio.sleep(delay)


def _is_retryable_error(exc: BaseException) -> bool:
    """Return True if the error is transient."""
    if isinstance(exc, FinnhubHttpError):
        # Retry 429 and all 5xx.
        return exc.status_code == 429 or exc.status_code >= 500

    # Network/transport errors.
    return isinstance(exc, requests.RequestException)


def _quote_from_payload(symbol: str, payload: Any) -> MarketQuote:
    """Map a `/quote` response (`c` = current price, `t` = epoch seconds) to a MarketQuote."""
    if not isinstance(payload, dict):
        raise ValueError(f"Unexpected Finnhub quote payload for {symbol}: {payload!r}")

    price = payload.get("c")
    ts = payload.get("t")
    if not price and not ts:
        raise FinnhubSymbolNotFound(f"Finnhub has no quote for symbol {symbol}")

    timestamp = int(ts) * 1000 if ts else now_ms()
    return MarketQuote(symbol=symbol, price=price, timestamp=timestamp, source=SOURCE)
