from __future__ import annotations

from typing import Any

import pytest
import requests

from plnexus.market import MarketDataPort
from plnexus.market.adapters.finnhub import FinnhubHttpError, FinnhubMarketAdapter, FinnhubSymbolNotFound
from plnexus.market.adapters.mock import MockMarketAdapter, MockUpstreamError
from plnexus.providers.finnhub import FinnhubConfig


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    slept: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        slept.append(seconds)

    monkeypatch.setattr("plnexus.market.adapters.mock.asyncio.sleep", fake_sleep)
    return slept


@pytest.mark.asyncio
async def test_mock_adapter_returns_spx_quote(monkeypatch: pytest.MonkeyPatch, no_sleep: list[float]) -> None:
    monkeypatch.setattr("plnexus.market.adapters.mock.random.random", lambda: 0.5)

    adapter = MockMarketAdapter()
    quote = await adapter.fetch_quote("spx")

    assert isinstance(adapter, MarketDataPort)
    assert quote.symbol == "SPX"
    assert quote.price == 6834.50
    assert "Mock" in quote.source
    assert no_sleep == [0.25]


@pytest.mark.asyncio
async def test_mock_adapter_uses_default_base_for_other_symbols(
    monkeypatch: pytest.MonkeyPatch, no_sleep: list[float]
) -> None:
    monkeypatch.setattr("plnexus.market.adapters.mock.random.random", lambda: 0.99)

    quote = await MockMarketAdapter(failure_rate=0.0).fetch_quote("es")

    assert quote.symbol == "ES"
    assert 6886.25 <= quote.price <= 6888.25


@pytest.mark.asyncio
async def test_mock_adapter_simulates_upstream_failure(no_sleep: list[float]) -> None:
    with pytest.raises(MockUpstreamError, match="currently unreachable"):
        await MockMarketAdapter(failure_rate=1.0, max_latency_ms=0).fetch_quote("SPX")


def test_mock_adapter_validates_arguments() -> None:
    with pytest.raises(ValueError):
        MockMarketAdapter(failure_rate=1.5)
    with pytest.raises(ValueError):
        MockMarketAdapter(max_latency_ms=-1)


class _FakeResponse:
    def __init__(self, payload: dict[str, Any] | None, *, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.content = b"{}" if payload is not None else b""

    def json(self) -> dict[str, Any]:
        if self._payload is None:
            raise ValueError("no json payload")
        return self._payload


def _make_config(**overrides: Any) -> FinnhubConfig:
    values: dict[str, Any] = {"api_key": "test_key", "base_delay": 0.5, "max_attempt": 3, "max_delay": 30.0}
    values.update(overrides)
    return FinnhubConfig(**values)


@pytest.fixture
def finnhub_no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    slept: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        slept.append(seconds)

    monkeypatch.setattr("plnexus.market.adapters.finnhub.asyncio.sleep", fake_sleep)
    monkeypatch.setattr("plnexus.market.adapters.finnhub.random.uniform", lambda _a, _b: 0.0)
    return slept


@pytest.mark.asyncio
async def test_finnhub_adapter_maps_quote(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_get(url: str, *, params: dict[str, str], timeout: float) -> _FakeResponse:
        captured.update(url=url, params=params, timeout=timeout)
        return _FakeResponse({"c": 6834.5, "t": 1_700_000_000, "h": 6840.0})

    monkeypatch.setattr("plnexus.market.adapters.finnhub.requests.get", fake_get)

    quote = await FinnhubMarketAdapter(_make_config()).fetch_quote("spy")

    assert captured["url"] == "https://finnhub.io/api/v1/quote"
    assert captured["params"] == {"symbol": "SPY", "token": "test_key"}
    assert captured["timeout"] == 10.0
    assert quote.symbol == "SPY"
    assert quote.price == 6834.5
    assert quote.timestamp == 1_700_000_000_000
    assert quote.source == "Finnhub"


@pytest.mark.asyncio
async def test_finnhub_adapter_rejects_unknown_symbol(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "plnexus.market.adapters.finnhub.requests.get",
        lambda url, *, params, timeout: _FakeResponse({"c": 0, "d": None, "t": 0}),
    )

    with pytest.raises(FinnhubSymbolNotFound):
        await FinnhubMarketAdapter(_make_config()).fetch_quote("NOPE")


@pytest.mark.asyncio
async def test_finnhub_adapter_retries_transient_errors(
    monkeypatch: pytest.MonkeyPatch, finnhub_no_sleep: list[float]
) -> None:
    responses = [
        _FakeResponse({"error": "busy"}, status_code=503),
        _FakeResponse({"error": "slow down"}, status_code=429),
        _FakeResponse({"c": 101.25, "t": 1_700_000_000}),
    ]

    def fake_get(url: str, *, params: dict[str, str], timeout: float) -> _FakeResponse:
        return responses.pop(0)

    monkeypatch.setattr("plnexus.market.adapters.finnhub.requests.get", fake_get)

    quote = await FinnhubMarketAdapter(_make_config()).fetch_quote("AAPL")

    assert quote.price == 101.25
    assert finnhub_no_sleep == [0.5, 1.0]


@pytest.mark.asyncio
async def test_finnhub_adapter_does_not_retry_client_errors(
    monkeypatch: pytest.MonkeyPatch, finnhub_no_sleep: list[float]
) -> None:
    calls = 0

    def fake_get(url: str, *, params: dict[str, str], timeout: float) -> _FakeResponse:
        nonlocal calls
        calls += 1
        return _FakeResponse({"error": "Invalid API key"}, status_code=401)

    monkeypatch.setattr("plnexus.market.adapters.finnhub.requests.get", fake_get)

    with pytest.raises(FinnhubHttpError) as excinfo:
        await FinnhubMarketAdapter(_make_config()).fetch_quote("AAPL")

    assert excinfo.value.status_code == 401
    assert calls == 1
    assert finnhub_no_sleep == []


@pytest.mark.asyncio
async def test_finnhub_adapter_gives_up_after_max_attempt(
    monkeypatch: pytest.MonkeyPatch, finnhub_no_sleep: list[float]
) -> None:
    def fake_get(url: str, *, params: dict[str, str], timeout: float) -> _FakeResponse:
        raise requests.ConnectionError("network down")

    monkeypatch.setattr("plnexus.market.adapters.finnhub.requests.get", fake_get)

    with pytest.raises(requests.ConnectionError):
        await FinnhubMarketAdapter(_make_config(max_attempt=2)).fetch_quote("AAPL")

    assert finnhub_no_sleep == [0.5]
