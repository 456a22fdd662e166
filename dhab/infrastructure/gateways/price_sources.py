"""
Infrastructure Gateway - Price Sources

Individual providers of EGP gold price snapshots. Each source either
returns a complete snapshot or raises PriceSourceUnavailableError; the
gateway walks them in order until one succeeds.
"""

import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Annotated, Any, Callable, Optional

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dhab.domain.entities.errors import PriceSourceUnavailableError
from dhab.domain.entities.gold import CurrentPriceSnapshot, Karat, KaratPrice
from dhab.domain.entities.time_series import iso_day, to_epoch_ms
from dhab.domain.services.pricing import derive_karat_prices, round_half_up
from dhab.shared.consts import TROY_OUNCE_GRAMS

logger = structlog.get_logger(__name__)

DEFAULT_GOLDAPI_BASE_URL = "https://www.goldapi.io/api"
DEFAULT_SPOT_URL = "https://api.gold-api.com/price/XAU"
DEFAULT_EXCHANGE_RATE_URL = "https://api.exchangerate-api.com/v4/latest/USD"

DEFAULT_OUNCE_USD = 2800.0
DEFAULT_USD_EGP_RATE = 50.85

Clock = Callable[[], datetime]

PositiveNumber = Annotated[float, Field(strict=True, gt=0, allow_inf_nan=False)]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _usable(amount: float) -> bool:
    return math.isfinite(amount) and amount > 0


class GoldApiQuote(BaseModel):
    """The part of a GoldAPI ``XAU/EGP`` payload the service relies on."""

    model_config = ConfigDict(extra="ignore")

    timestamp: PositiveNumber
    price: PositiveNumber
    price_gram_24k: PositiveNumber
    price_gram_22k: PositiveNumber
    price_gram_21k: PositiveNumber
    price_gram_18k: PositiveNumber


class PriceSource(ABC):
    """A single provider in the price source chain."""

    name: str = "source"

    @abstractmethod
    async def fetch(self, date_key: Optional[str] = None) -> CurrentPriceSnapshot:
        """
        Produce a snapshot for today, or for ``date_key`` (``YYYYMMDD``).

        Raises:
            PriceSourceUnavailableError: If no usable snapshot can be produced
        """
        pass

    def unavailable(self, reason: str, **details: Any) -> PriceSourceUnavailableError:
        return PriceSourceUnavailableError(self.name, reason, details)


def _snapshot_at(
    moment: datetime,
    gram_24k: float,
    ounce_24k: float,
    usd_egp_rate: float,
    global_ounce_usd: float,
) -> CurrentPriceSnapshot:
    timestamp = to_epoch_ms(moment)
    return CurrentPriceSnapshot(
        timestamp=timestamp,
        date=iso_day(timestamp),
        prices=derive_karat_prices(gram_24k, ounce_24k),
        usd_egp_rate=usd_egp_rate,
        global_ounce_usd=global_ounce_usd,
    )


class GoldApiSource(PriceSource):
    """Quotes from goldapi.io, with per-day history."""

    name = "goldapi"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_GOLDAPI_BASE_URL,
        timeout: float = 10.0,
    ):
        """
        Initialize the GoldAPI source.

        Args:
            api_key: Access token; the source is skipped when empty
            base_url: API root, e.g. "https://www.goldapi.io/api"
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def fetch(self, date_key: Optional[str] = None) -> CurrentPriceSnapshot:
        if not self.api_key:
            raise self.unavailable("API key not configured")

        url = f"{self.base_url}/XAU/EGP"
        if date_key:
            url = f"{url}/{date_key}"
        headers = {
            "x-access-token": self.api_key,
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise self.unavailable(
                f"HTTP {e.response.status_code}", url=url
            ) from e
        except httpx.RequestError as e:
            raise self.unavailable(f"request failed: {e}", url=url) from e
        except ValueError as e:
            raise self.unavailable("response is not JSON", url=url) from e

        try:
            quote = GoldApiQuote.model_validate(payload)
        except ValidationError as e:
            raise self.unavailable(
                f"malformed payload ({e.error_count()} error(s))", url=url
            ) from e

        return self._transform(quote)

    def _transform(self, quote: GoldApiQuote) -> CurrentPriceSnapshot:
        usd_egp_rate = round_half_up(
            quote.price / (quote.price_gram_24k * TROY_OUNCE_GRAMS), 2
        )
        if usd_egp_rate <= 0:
            raise self.unavailable("implied USD/EGP rate rounds to zero")

        moment = datetime.fromtimestamp(quote.timestamp, tz=timezone.utc)
        return _snapshot_at(
            moment,
            gram_24k=quote.price_gram_24k,
            ounce_24k=quote.price,
            usd_egp_rate=usd_egp_rate,
            global_ounce_usd=round_half_up(quote.price / usd_egp_rate),
        )


class SpotExchangeSource(PriceSource):
    """EGP prices computed from the USD spot ounce and the USD/EGP rate."""

    name = "spot-exchange"

    def __init__(
        self,
        spot_url: str = DEFAULT_SPOT_URL,
        exchange_rate_url: str = DEFAULT_EXCHANGE_RATE_URL,
        timeout: float = 5.0,
        clock: Optional[Clock] = None,
    ):
        self.spot_url = spot_url
        self.exchange_rate_url = exchange_rate_url
        self.timeout = timeout
        self._clock = clock or _utc_now

    async def _get_json(self, url: str) -> Optional[Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "price_source.fetch_failed", source=self.name, url=url, error=str(e)
            )
            return None

    @staticmethod
    def _number(value: Any, default: float) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        if not value or not math.isfinite(value):
            return default
        return float(value)

    async def fetch_ounce_usd(self) -> float:
        payload = await self._get_json(self.spot_url)
        if not isinstance(payload, dict):
            return DEFAULT_OUNCE_USD
        return self._number(payload.get("price"), DEFAULT_OUNCE_USD)

    async def fetch_usd_egp_rate(self) -> float:
        payload = await self._get_json(self.exchange_rate_url)
        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            return DEFAULT_USD_EGP_RATE
        return self._number(rates.get("EGP"), DEFAULT_USD_EGP_RATE)

    async def fetch(self, date_key: Optional[str] = None) -> CurrentPriceSnapshot:
        if date_key:
            raise self.unavailable("no historical quotes", date=date_key)

        ounce_usd = await self.fetch_ounce_usd()
        usd_egp_rate = await self.fetch_usd_egp_rate()
        ounce_egp = ounce_usd * usd_egp_rate
        gram_egp = ounce_egp / TROY_OUNCE_GRAMS

        snapshot = _snapshot_at(
            self._clock(),
            gram_24k=gram_egp,
            ounce_24k=ounce_egp,
            usd_egp_rate=usd_egp_rate,
            global_ounce_usd=round_half_up(ounce_usd),
        )
        prices = snapshot.prices.values()
        if not all(_usable(price.gram) and _usable(price.ounce) for price in prices):
            raise self.unavailable(
                "computed prices are not finite and positive",
                ounce_usd=ounce_usd,
                usd_egp_rate=usd_egp_rate,
            )
        return snapshot


DEFAULT_PRICES = {
    Karat.K24: (7408, 230400),
    Karat.K22: (6829, 212400),
    Karat.K21: (6482, 201600),
    Karat.K18: (5556, 172800),
}


class DefaultPriceSource(PriceSource):
    """Hardcoded last-resort quote; never unavailable for current prices."""

    name = "default"

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or _utc_now

    async def fetch(self, date_key: Optional[str] = None) -> CurrentPriceSnapshot:
        if date_key:
            raise self.unavailable("no historical quotes", date=date_key)

        timestamp = to_epoch_ms(self._clock())
        return CurrentPriceSnapshot(
            timestamp=timestamp,
            date=iso_day(timestamp),
            prices={
                karat: KaratPrice(gram=float(gram), ounce=float(ounce))
                for karat, (gram, ounce) in DEFAULT_PRICES.items()
            },
            usd_egp_rate=DEFAULT_USD_EGP_RATE,
            global_ounce_usd=DEFAULT_OUNCE_USD,
        )
