"""
Current Price Use Case - Application Layer

Serves the live snapshot from the store while it is fresh and refreshes it
from the price gateway otherwise.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

import structlog

from dhab.domain.entities.errors import PriceUnavailableError
from dhab.domain.entities.gold import CurrentPriceSnapshot, Karat
from dhab.domain.entities.time_series import to_epoch_ms
from dhab.domain.gateways.gold_price_gateway import IGoldPriceGateway
from dhab.domain.repositories.gold_price_repository import IGoldPriceRepository
from dhab.domain.services.pricing import apply_price_changes

from ..dtos.gold_dto import CurrentPriceSnapshotDTO

logger = structlog.get_logger(__name__)

CURRENT_PRICE_MAX_AGE = timedelta(hours=1)


async def apply_changes_from_history(
    repository: IGoldPriceRepository, snapshot: CurrentPriceSnapshot
) -> CurrentPriceSnapshot:
    """Fill each karat's change against the latest stored historical point."""
    previous: Dict[Karat, Optional[float]] = {}
    for karat in snapshot.prices:
        point = await repository.get_last_historical_point(karat)
        previous[karat] = point.price if point else None
    return apply_price_changes(snapshot, previous)


class GetCurrentPriceUseCase:
    """Use case for retrieving the current price of every karat."""

    def __init__(
        self,
        repository: IGoldPriceRepository,
        gateway: IGoldPriceGateway,
        max_age: timedelta = CURRENT_PRICE_MAX_AGE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.gateway = gateway
        self.max_age = max_age
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _is_fresh(self, snapshot: CurrentPriceSnapshot) -> bool:
        oldest_allowed = to_epoch_ms(self._clock() - self.max_age)
        return snapshot.timestamp >= oldest_allowed

    async def execute(self) -> CurrentPriceSnapshotDTO:
        """
        Return the current snapshot.

        Raises:
            PriceUnavailableError: If neither the store nor the gateway has one
        """
        cached = await self.repository.get_current()
        if cached is not None and self._is_fresh(cached):
            return CurrentPriceSnapshotDTO.from_domain(cached)

        fresh = await self.gateway.fetch_current_price()
        if fresh is not None:
            fresh = await apply_changes_from_history(self.repository, fresh)
            await self.repository.set_current(fresh)
            logger.info("current_price.refreshed", timestamp=fresh.timestamp)
            return CurrentPriceSnapshotDTO.from_domain(fresh)

        if cached is not None:
            logger.warning("current_price.serving_stale", timestamp=cached.timestamp)
            return CurrentPriceSnapshotDTO.from_domain(cached)

        raise PriceUnavailableError("Failed to fetch gold prices")
