"""
Gold Price Repository Interface

Persistence of the current snapshot, per-karat price history, cached
predictions and model metadata. Implementations are best-effort: failures
surface as a miss (``None`` / empty list) instead of an exception.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from dhab.domain.entities.gold import CurrentPriceSnapshot, Karat
from dhab.domain.entities.prediction import ModelMetadata, PredictionSet
from dhab.domain.entities.time_series import PricePoint


class IGoldPriceRepository(ABC):
    """Interface for gold price repository implementations."""

    @abstractmethod
    async def get_current(self) -> Optional[CurrentPriceSnapshot]:
        """Return the live snapshot, or None when absent or unreadable."""
        pass

    @abstractmethod
    async def set_current(self, snapshot: CurrentPriceSnapshot) -> None:
        """Overwrite the live snapshot. Invalid snapshots are not written."""
        pass

    @abstractmethod
    async def add_historical_point(
        self, karat: Karat, timestamp: int, price: float
    ) -> None:
        """
        Append a price to the karat's time-ordered series.

        Args:
            karat: Series to append to
            timestamp: Milliseconds since the epoch, used as the sort key
            price: Gram price in EGP
        """
        pass

    @abstractmethod
    async def get_historical(self, karat: Karat, days: int) -> List[PricePoint]:
        """Return the points of the last ``days`` days, oldest first."""
        pass

    @abstractmethod
    async def get_last_historical_point(self, karat: Karat) -> Optional[PricePoint]:
        """Return the most recent point of the karat's series."""
        pass

    @abstractmethod
    async def get_latest_prediction(self, karat: Karat) -> Optional[PredictionSet]:
        pass

    @abstractmethod
    async def set_latest_prediction(
        self, karat: Karat, prediction_set: PredictionSet
    ) -> None:
        """Overwrite the latest set and append it to the bounded history log."""
        pass

    @abstractmethod
    async def get_model_metadata(self) -> Optional[ModelMetadata]:
        pass

    @abstractmethod
    async def set_model_metadata(self, metadata: ModelMetadata) -> None:
        pass
