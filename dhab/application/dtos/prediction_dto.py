"""
Application DTOs - Prediction

Data contracts for cached forecasts and model metadata.
"""

from datetime import datetime
from typing import List

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from dhab.application.dtos.gold_dto import CamelModel
from dhab.domain.entities.gold import Karat
from dhab.domain.entities.prediction import (
    ModelMetadata,
    PredictionPoint,
    PredictionSet,
    Trend,
    VolatilityLevel,
)


class PredictionPointDTO(CamelModel):
    """Represents the forecast for one future day."""

    date: str
    timestamp: int
    price: float
    confidence: float = Field(ge=0, le=1)
    lower_bound: float
    upper_bound: float

    @classmethod
    def from_domain(cls, point: PredictionPoint) -> "PredictionPointDTO":
        return cls(
            date=point.date,
            timestamp=point.timestamp,
            price=point.price,
            confidence=point.confidence,
            lower_bound=point.lower_bound,
            upper_bound=point.upper_bound,
        )

    def to_domain(self) -> PredictionPoint:
        return PredictionPoint(
            date=self.date,
            timestamp=self.timestamp,
            price=self.price,
            confidence=self.confidence,
            lower_bound=self.lower_bound,
            upper_bound=self.upper_bound,
        )


class PredictionSetDTO(CamelModel):
    """DTO returned by the prediction endpoint and cached per karat."""

    model_version: str
    last_trained: datetime
    accuracy: float = Field(
        description="Placeholder figure, not computed from a backtest"
    )
    predictions: List[PredictionPointDTO] = Field(default_factory=list)
    trend: Trend
    volatility: VolatilityLevel
    karat: Karat

    # "model_" prefixed fields are legitimate here
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    @classmethod
    def from_domain(cls, prediction_set: PredictionSet) -> "PredictionSetDTO":
        return cls(
            model_version=prediction_set.model_version,
            last_trained=prediction_set.last_trained,
            accuracy=prediction_set.accuracy,
            predictions=[
                PredictionPointDTO.from_domain(point)
                for point in prediction_set.predictions
            ],
            trend=prediction_set.trend,
            volatility=prediction_set.volatility,
            karat=prediction_set.karat,
        )

    def to_domain(self) -> PredictionSet:
        return PredictionSet(
            model_version=self.model_version,
            last_trained=self.last_trained,
            accuracy=self.accuracy,
            trend=self.trend,
            volatility=self.volatility,
            karat=self.karat,
            predictions=[point.to_domain() for point in self.predictions],
        )


class ModelMetadataDTO(CamelModel):
    version: str
    last_trained: datetime
    training_data_points: int = Field(ge=0)
    accuracy: float

    @classmethod
    def from_domain(cls, metadata: ModelMetadata) -> "ModelMetadataDTO":
        return cls(
            version=metadata.version,
            last_trained=metadata.last_trained,
            training_data_points=metadata.training_data_points,
            accuracy=metadata.accuracy,
        )

    def to_domain(self) -> ModelMetadata:
        return ModelMetadata(
            version=self.version,
            last_trained=self.last_trained,
            training_data_points=self.training_data_points,
            accuracy=self.accuracy,
        )
