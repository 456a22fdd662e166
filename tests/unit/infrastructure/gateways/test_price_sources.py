from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from dhab.domain.entities.errors import PriceSourceUnavailableError
from dhab.domain.entities.gold import Karat
from dhab.infrastructure.gateways.gold_price_gateway import GoldPriceGateway
from dhab.infrastructure.gateways.price_sources import (
    DEFAULT_OUNCE_USD,
    DEFAULT_USD_EGP_RATE,
    DefaultPriceSource,
    GoldApiSource,
    SpotExchangeSource,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

GOLDAPI_PAYLOAD = {
    "timestamp": 1735725600,
    "metal": "XAU",
    "currency": "EGP",
    "price": 230165.0,
    "price_gram_24k": 7400.0,
    "price_gram_22k": 6783.33,
    "price_gram_21k": 6475.0,
    "price_gram_18k": 5550.0,
}


class _StubResponse:
    def __init__(self, status_code: int, json_data=None, invalid_json: bool = False):
        self.status_code = status_code
        self._json = json_data
        self._invalid_json = invalid_json
        self.headers = {}
        self.text = "error"

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("GET", "http://upstream")
            response = httpx.Response(self.status_code, request=request, text=self.text)
            raise httpx.HTTPStatusError("error", request=request, response=response)


class _StubAsyncClient:
    """Answers per URL; unknown URLs fail like an unreachable host."""

    def __init__(self, responses):
        self._responses = responses
        self.calls = []

    async def __aenter__(self) -> "_StubAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url, headers=None, **kwargs):
        self.calls.append((url, headers))
        response = self._responses.get(url)
        if response is None:
            raise httpx.ConnectError("refused", request=httpx.Request("GET", url))
        return response


def _install(monkeypatch, responses) -> _StubAsyncClient:
    client = _StubAsyncClient(responses)
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)
    return client


@pytest.mark.asyncio
async def test_goldapi_source_requires_key() -> None:
    source = GoldApiSource(api_key=None)

    assert source.configured is False
    with pytest.raises(PriceSourceUnavailableError) as exc_info:
        await source.fetch()
    assert exc_info.value.source == "goldapi"


@pytest.mark.asyncio
async def test_goldapi_source_builds_snapshot(monkeypatch) -> None:
    client = _install(
        monkeypatch,
        {"https://gold.test/api/XAU/EGP": _StubResponse(200, GOLDAPI_PAYLOAD)},
    )
    source = GoldApiSource(api_key="token", base_url="https://gold.test/api/")

    snapshot = await source.fetch()

    url, headers = client.calls[0]
    assert url == "https://gold.test/api/XAU/EGP"
    assert headers["x-access-token"] == "token"
    assert snapshot.timestamp == 1735725600000
    assert snapshot.date == "2025-01-01"
    assert snapshot.prices[Karat.K24].gram == 7400
    assert snapshot.prices[Karat.K24].ounce == 230165
    assert snapshot.prices[Karat.K22].gram == 6784
    assert snapshot.prices[Karat.K22].ounce == 210992
    assert snapshot.prices[Karat.K18].gram == 5550
    assert snapshot.usd_egp_rate == 1.0
    assert snapshot.global_ounce_usd == 230165


@pytest.mark.asyncio
async def test_goldapi_source_requests_historical_day(monkeypatch) -> None:
    client = _install(
        monkeypatch,
        {
            "https://www.goldapi.io/api/XAU/EGP/20250101": _StubResponse(
                200, GOLDAPI_PAYLOAD
            )
        },
    )

    snapshot = await GoldApiSource(api_key="token").fetch("20250101")

    assert client.calls[0][0].endswith("/XAU/EGP/20250101")
    assert snapshot.date == "2025-01-01"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "reason"),
    [
        (_StubResponse(403, {"error": "quota"}), "HTTP 403"),
        (_StubResponse(200, invalid_json=True), "not JSON"),
        (_StubResponse(200, {**GOLDAPI_PAYLOAD, "price": "n/a"}), "malformed"),
        (_StubResponse(200, {**GOLDAPI_PAYLOAD, "price_gram_24k": 0}), "malformed"),
        (_StubResponse(200, {"timestamp": 1735725600}), "malformed"),
    ],
)
async def test_goldapi_source_rejects_bad_responses(monkeypatch, response, reason) -> None:
    _install(monkeypatch, {"https://www.goldapi.io/api/XAU/EGP": response})

    with pytest.raises(PriceSourceUnavailableError, match=reason):
        await GoldApiSource(api_key="token").fetch()


@pytest.mark.asyncio
async def test_goldapi_source_network_error(monkeypatch) -> None:
    _install(monkeypatch, {})

    with pytest.raises(PriceSourceUnavailableError, match="request failed"):
        await GoldApiSource(api_key="token").fetch()


@pytest.mark.asyncio
async def test_spot_exchange_source_computes_egp_prices(monkeypatch) -> None:
    _install(
        monkeypatch,
        {
            "https://spot.test": _StubResponse(200, {"price": 3000.0}),
            "https://fx.test": _StubResponse(200, {"rates": {"EGP": 48.5}}),
        },
    )
    source = SpotExchangeSource(
        spot_url="https://spot.test",
        exchange_rate_url="https://fx.test",
        clock=lambda: NOW,
    )

    snapshot = await source.fetch()

    assert snapshot.prices[Karat.K24].ounce == 145500
    assert snapshot.prices[Karat.K24].gram == 4678
    assert snapshot.usd_egp_rate == 48.5
    assert snapshot.global_ounce_usd == 3000
    assert snapshot.date == "2025-01-15"


@pytest.mark.asyncio
async def test_spot_exchange_source_falls_back_to_constants(monkeypatch) -> None:
    _install(
        monkeypatch,
        {
            "https://spot.test": _StubResponse(500),
            "https://fx.test": _StubResponse(200, {"rates": {"EGP": "fifty"}}),
        },
    )
    source = SpotExchangeSource(
        spot_url="https://spot.test",
        exchange_rate_url="https://fx.test",
        clock=lambda: NOW,
    )

    snapshot = await source.fetch()

    assert snapshot.global_ounce_usd == DEFAULT_OUNCE_USD
    assert snapshot.usd_egp_rate == DEFAULT_USD_EGP_RATE
    assert snapshot.prices[Karat.K24].ounce == 142380
    assert snapshot.prices[Karat.K24].gram == 4578


@pytest.mark.asyncio
async def test_spot_exchange_source_has_no_history() -> None:
    with pytest.raises(PriceSourceUnavailableError):
        await SpotExchangeSource().fetch("20250101")


@pytest.mark.asyncio
async def test_default_source_serves_hardcoded_quote() -> None:
    source = DefaultPriceSource(clock=lambda: NOW)

    snapshot = await source.fetch()

    assert snapshot.prices[Karat.K24].gram == 7408
    assert snapshot.prices[Karat.K18].ounce == 172800
    assert snapshot.usd_egp_rate == 50.85
    assert snapshot.global_ounce_usd == 2800
    with pytest.raises(PriceSourceUnavailableError):
        await source.fetch("20250101")


@pytest.mark.asyncio
async def test_spot_exchange_source_ignores_infinite_readings(monkeypatch) -> None:
    # 1e400 overflows to inf when the JSON body is decoded
    _install(
        monkeypatch,
        {
            "https://spot.test": _StubResponse(200, {"price": float("inf")}),
            "https://fx.test": _StubResponse(200, {"rates": {"EGP": float("nan")}}),
        },
    )
    source = SpotExchangeSource(
        spot_url="https://spot.test",
        exchange_rate_url="https://fx.test",
        clock=lambda: NOW,
    )

    snapshot = await source.fetch()

    assert snapshot.global_ounce_usd == DEFAULT_OUNCE_USD
    assert snapshot.usd_egp_rate == DEFAULT_USD_EGP_RATE
    assert snapshot.prices[Karat.K24].ounce == 142380


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "ounce_usd, egp_rate",
    [
        (3000.0, -48.5),
        (1e200, 1e200),
    ],
)
async def test_spot_exchange_source_rejects_unusable_prices(
    monkeypatch, ounce_usd, egp_rate
) -> None:
    _install(
        monkeypatch,
        {
            "https://spot.test": _StubResponse(200, {"price": ounce_usd}),
            "https://fx.test": _StubResponse(200, {"rates": {"EGP": egp_rate}}),
        },
    )
    source = SpotExchangeSource(
        spot_url="https://spot.test",
        exchange_rate_url="https://fx.test",
        clock=lambda: NOW,
    )

    with pytest.raises(PriceSourceUnavailableError) as exc_info:
        await source.fetch()

    assert exc_info.value.source == "spot-exchange"


@pytest.mark.asyncio
async def test_gateway_reaches_defaults_when_spot_prices_are_unusable(
    monkeypatch,
) -> None:
    _install(
        monkeypatch,
        {
            "https://spot.test": _StubResponse(200, {"price": 3000.0}),
            "https://fx.test": _StubResponse(200, {"rates": {"EGP": -48.5}}),
        },
    )
    gateway = GoldPriceGateway(
        current_sources=[
            GoldApiSource(api_key=None),
            SpotExchangeSource(
                spot_url="https://spot.test",
                exchange_rate_url="https://fx.test",
                clock=lambda: NOW,
            ),
            DefaultPriceSource(clock=lambda: NOW),
        ],
        historical_sources=[],
    )

    snapshot = await gateway.fetch_current_price()

    assert snapshot is not None
    assert snapshot.prices[Karat.K24].gram == 7408
    assert snapshot.usd_egp_rate == 50.85
