"""
Infrastructure Gateway - Gold Price Chain

Implements IGoldPriceGateway as an ordered chain of price sources. Current
prices walk GoldAPI, then the spot/exchange-rate computation, then the
hardcoded defaults; historical prices only have GoldAPI to ask.
"""

from typing import Optional, Sequence

import structlog

from dhab.domain.entities.errors import PriceSourceUnavailableError
from dhab.domain.entities.gold import CurrentPriceSnapshot
from dhab.domain.gateways.gold_price_gateway import IGoldPriceGateway
from dhab.infrastructure.gateways.price_sources import PriceSource

logger = structlog.get_logger(__name__)


class GoldPriceGateway(IGoldPriceGateway):
    """Price gateway trying each source in turn."""

    def __init__(
        self,
        current_sources: Sequence[PriceSource],
        historical_sources: Sequence[PriceSource],
    ):
        self.current_sources = list(current_sources)
        self.historical_sources = list(historical_sources)

    async def _first_available(
        self, sources: Sequence[PriceSource], date_key: Optional[str] = None
    ) -> Optional[CurrentPriceSnapshot]:
        for source in sources:
            try:
                snapshot = await source.fetch(date_key)
            except PriceSourceUnavailableError as exc:
                logger.warning(
                    "price_gateway.source_unavailable",
                    source=exc.source,
                    error=exc.message,
                    date=date_key,
                    **exc.details,
                )
                continue

            logger.info(
                "price_gateway.quote_received",
                source=source.name,
                timestamp=snapshot.timestamp,
                date=date_key,
            )
            return snapshot

        logger.error(
            "price_gateway.exhausted",
            sources=[source.name for source in sources],
            date=date_key,
        )
        return None

    async def fetch_current_price(self) -> Optional[CurrentPriceSnapshot]:
        return await self._first_available(self.current_sources)

    async def fetch_historical_price(
        self, date_key: str
    ) -> Optional[CurrentPriceSnapshot]:
        return await self._first_available(self.historical_sources, date_key)
