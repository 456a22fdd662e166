"""
Redis Gold Price Repository - Infrastructure Layer

Implements IGoldPriceRepository on top of RedisStore. Records are stored as
camelCase JSON produced by the application DTOs:

- ``gold:current``: the live snapshot
- ``gold:history:{karat}``: sorted set of ``{timestamp, price}`` scored by timestamp
- ``predictions:latest:{karat}``: the cached prediction set
- ``predictions:history:{karat}``: the last 100 generated sets, newest first
- ``model:metadata``: bookkeeping about the last regeneration
"""

import math
import time
from typing import Callable, List, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from dhab.application.dtos.gold_dto import CurrentPriceSnapshotDTO, PricePointDTO
from dhab.application.dtos.prediction_dto import ModelMetadataDTO, PredictionSetDTO
from dhab.domain.entities.errors import StoreDecodeError
from dhab.domain.entities.gold import CurrentPriceSnapshot, Karat
from dhab.domain.entities.prediction import ModelMetadata, PredictionSet
from dhab.domain.entities.time_series import PricePoint
from dhab.domain.repositories.gold_price_repository import IGoldPriceRepository
from dhab.infrastructure.database.redis_store import RedisStore
from dhab.shared.consts import MS_PER_DAY

logger = structlog.get_logger(__name__)

CURRENT_KEY = "gold:current"
MODEL_METADATA_KEY = "model:metadata"
PREDICTION_HISTORY_LIMIT = 100

ModelT = TypeVar("ModelT", bound=BaseModel)


def history_key(karat: Karat) -> str:
    return f"gold:history:{karat.value}"


def latest_prediction_key(karat: Karat) -> str:
    return f"predictions:latest:{karat.value}"


def prediction_history_key(karat: Karat) -> str:
    return f"predictions:history:{karat.value}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class RedisGoldPriceRepository(IGoldPriceRepository):
    """Redis implementation of the gold price repository."""

    def __init__(self, store: RedisStore, clock: Optional[Callable[[], int]] = None):
        """
        Initialize the repository.

        Args:
            store: Redis store wrapper
            clock: Returns the current time in epoch milliseconds
        """
        self.store = store
        self._clock = clock or _now_ms

    def _decode(self, key: str, raw: str, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate_json(raw)
        except ValidationError as exc:
            raise StoreDecodeError(
                key, f"{exc.error_count()} validation error(s)"
            ) from exc

    async def _read(self, key: str, model: Type[ModelT]) -> Optional[ModelT]:
        raw = await self.store.get(key)
        if raw is None:
            return None
        try:
            return self._decode(key, raw, model)
        except StoreDecodeError as exc:
            logger.warning("price_store.decode_failed", key=exc.key, error=exc.message)
            return None

    async def get_current(self) -> Optional[CurrentPriceSnapshot]:
        dto = await self._read(CURRENT_KEY, CurrentPriceSnapshotDTO)
        return dto.to_domain() if dto else None

    async def set_current(self, snapshot: CurrentPriceSnapshot) -> None:
        try:
            dto = CurrentPriceSnapshotDTO.from_domain(snapshot)
        except ValidationError as exc:
            logger.error(
                "price_store.snapshot_rejected",
                timestamp=snapshot.timestamp,
                errors=exc.error_count(),
            )
            return
        await self.store.set(CURRENT_KEY, dto.model_dump_json(by_alias=True))

    async def add_historical_point(
        self, karat: Karat, timestamp: int, price: float
    ) -> None:
        if timestamp <= 0 or not math.isfinite(price) or price <= 0:
            logger.warning(
                "price_store.point_rejected",
                karat=karat.value,
                timestamp=timestamp,
                price=price,
            )
            return
        member = PricePointDTO(timestamp=timestamp, price=price)
        await self.store.zadd(
            history_key(karat), timestamp, member.model_dump_json(by_alias=True)
        )

    async def get_historical(self, karat: Karat, days: int) -> List[PricePoint]:
        key = history_key(karat)
        end = self._clock()
        start = end - days * MS_PER_DAY
        members = await self.store.zrange_by_score(key, start, end)

        points: List[PricePoint] = []
        dropped = 0
        for raw in members:
            try:
                points.append(self._decode(key, raw, PricePointDTO).to_domain())
            except StoreDecodeError:
                dropped += 1

        if dropped:
            logger.warning("price_store.points_dropped", key=key, dropped=dropped)

        points.sort(key=lambda point: point.timestamp)
        return points

    async def get_last_historical_point(self, karat: Karat) -> Optional[PricePoint]:
        key = history_key(karat)
        raw = await self.store.zlast(key)
        if raw is None:
            return None
        try:
            return self._decode(key, raw, PricePointDTO).to_domain()
        except StoreDecodeError as exc:
            logger.warning("price_store.decode_failed", key=exc.key, error=exc.message)
            return None

    async def get_latest_prediction(self, karat: Karat) -> Optional[PredictionSet]:
        dto = await self._read(latest_prediction_key(karat), PredictionSetDTO)
        return dto.to_domain() if dto else None

    async def set_latest_prediction(
        self, karat: Karat, prediction_set: PredictionSet
    ) -> None:
        payload = PredictionSetDTO.from_domain(prediction_set).model_dump_json(
            by_alias=True
        )
        await self.store.set(latest_prediction_key(karat), payload)
        await self.store.push_bounded(
            prediction_history_key(karat), payload, PREDICTION_HISTORY_LIMIT
        )

    async def get_model_metadata(self) -> Optional[ModelMetadata]:
        dto = await self._read(MODEL_METADATA_KEY, ModelMetadataDTO)
        return dto.to_domain() if dto else None

    async def set_model_metadata(self, metadata: ModelMetadata) -> None:
        await self.store.set(
            MODEL_METADATA_KEY,
            ModelMetadataDTO.from_domain(metadata).model_dump_json(by_alias=True),
        )
