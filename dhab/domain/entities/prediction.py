"""Domain entities for price forecasts."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import List

from dhab.domain.entities.gold import Karat


class Trend(str, Enum):
    UPWARD = "upward"
    DOWNWARD = "downward"
    SIDEWAYS = "sideways"


class VolatilityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class PredictionPoint:
    """Forecast for one future day."""

    date: str
    timestamp: int
    price: float
    confidence: float
    lower_bound: float
    upper_bound: float


@dataclass(slots=True)
class PredictionSet:
    """Cached forecast for one karat, regenerated once it ages out."""

    model_version: str
    last_trained: datetime
    accuracy: float
    trend: Trend
    volatility: VolatilityLevel
    karat: Karat
    predictions: List[PredictionPoint] = field(default_factory=list)

    @property
    def horizon(self) -> int:
        return len(self.predictions)

    def is_stale(self, now: datetime, max_age: timedelta) -> bool:
        return self.last_trained < now - max_age

    def truncated(self, days: int) -> "PredictionSet":
        """Copy limited to the first ``days`` predictions."""
        return replace(self, predictions=list(self.predictions[:days]))


@dataclass(slots=True)
class ModelMetadata:
    """Bookkeeping about the most recent forecast regeneration."""

    version: str
    last_trained: datetime
    training_data_points: int
    accuracy: float
