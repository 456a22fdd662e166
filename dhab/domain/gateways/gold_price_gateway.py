"""
Domain Gateway - Gold Price Source

Interface for obtaining EGP gold price snapshots from upstream providers.
"""

from abc import ABC, abstractmethod
from typing import Optional

from dhab.domain.entities.gold import CurrentPriceSnapshot


class IGoldPriceGateway(ABC):
    """Interface for gold price providers."""

    @abstractmethod
    async def fetch_current_price(self) -> Optional[CurrentPriceSnapshot]:
        """
        Fetch the live price snapshot for every karat.

        Upstream failures are never raised; implementations degrade through
        their fallbacks and return ``None`` only when nothing is left to try.
        """
        pass

    @abstractmethod
    async def fetch_historical_price(
        self, date_key: str
    ) -> Optional[CurrentPriceSnapshot]:
        """
        Fetch the snapshot for a past day.

        Args:
            date_key: Day formatted as ``YYYYMMDD``

        Returns:
            The snapshot, or ``None`` when no provider has data for that day
        """
        pass
