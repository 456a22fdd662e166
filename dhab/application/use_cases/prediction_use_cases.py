"""
Prediction Use Cases - Application Layer

Serve cached forecasts per karat and regenerate them once they age out or
no longer cover the requested horizon.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog

from dhab.domain.entities.prediction import ModelMetadata, PredictionSet
from dhab.domain.repositories.gold_price_repository import IGoldPriceRepository
from dhab.domain.services.forecast_engine import (
    ForecastEngine,
    horizon_bucket,
    moving_average_trend,
)
from dhab.domain.services.request_validator import (
    PREDICTION_MAX_DAYS,
    parse_int_in_range,
    parse_karat,
)

from ..dtos.prediction_dto import ModelMetadataDTO, PredictionSetDTO

logger = structlog.get_logger(__name__)

DEFAULT_PREDICTION_DAYS = 7
TRAINING_LOOKBACK_DAYS = 90
PREDICTION_MAX_AGE = timedelta(hours=24)


class GetPredictionsUseCase:
    """Use case for the /predict endpoint."""

    def __init__(
        self,
        repository: IGoldPriceRepository,
        engine: ForecastEngine,
        max_age: timedelta = PREDICTION_MAX_AGE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.engine = engine
        self.max_age = max_age
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _is_usable(self, cached: Optional[PredictionSet], days: int) -> bool:
        if cached is None:
            return False
        if cached.is_stale(self._clock(), self.max_age):
            return False
        return cached.horizon >= days

    async def execute(
        self, karat: Optional[str] = None, days: Optional[str] = None
    ) -> PredictionSetDTO:
        """
        Raises:
            InvalidRequestError: For an unknown karat or days outside [1, 30]
        """
        parsed_karat = parse_karat(karat)
        parsed_days = parse_int_in_range(
            days,
            name="days",
            default=DEFAULT_PREDICTION_DAYS,
            minimum=1,
            maximum=PREDICTION_MAX_DAYS,
        )

        cached = await self.repository.get_latest_prediction(parsed_karat)
        if self._is_usable(cached, parsed_days):
            return PredictionSetDTO.from_domain(cached.truncated(parsed_days))

        series = await self.repository.get_historical(
            parsed_karat, TRAINING_LOOKBACK_DAYS
        )
        horizon = horizon_bucket(parsed_days)
        prediction_set = self.engine.build_prediction_set(
            parsed_karat, series, horizon
        )

        logger.info(
            "prediction.regenerated",
            karat=parsed_karat.value,
            horizon=horizon,
            data_points=len(series),
            trend=prediction_set.trend.value,
            ma_trend=moving_average_trend([point.price for point in series]).value,
        )

        await self.repository.set_latest_prediction(parsed_karat, prediction_set)
        await self.repository.set_model_metadata(
            ModelMetadata(
                version=prediction_set.model_version,
                last_trained=prediction_set.last_trained,
                training_data_points=len(series),
                accuracy=prediction_set.accuracy,
            )
        )

        return PredictionSetDTO.from_domain(prediction_set.truncated(parsed_days))


class GetModelMetadataUseCase:
    """Use case for reading the last regeneration's bookkeeping."""

    def __init__(self, repository: IGoldPriceRepository):
        self.repository = repository

    async def execute(self) -> Optional[ModelMetadataDTO]:
        metadata = await self.repository.get_model_metadata()
        if metadata is None:
            return None
        return ModelMetadataDTO.from_domain(metadata)
