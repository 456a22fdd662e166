from __future__ import annotations

import math
from datetime import timedelta

import pytest

from dhab.domain.entities.gold import Karat
from dhab.domain.entities.prediction import (
    ModelMetadata,
    PredictionSet,
    Trend,
    VolatilityLevel,
)
from dhab.domain.entities.time_series import to_epoch_ms
from dhab.infrastructure.repositories.gold_price_repository import (
    CURRENT_KEY,
    MODEL_METADATA_KEY,
    PREDICTION_HISTORY_LIMIT,
    history_key,
    prediction_history_key,
)


@pytest.mark.asyncio
async def test_current_snapshot_round_trip(repository, fake_redis, make_snapshot) -> None:
    snapshot = make_snapshot()
    snapshot.prices[Karat.K24].change = 12.0
    snapshot.prices[Karat.K24].change_percent = 0.16

    await repository.set_current(snapshot)

    assert '"usdEgpRate":50.85' in fake_redis.values[CURRENT_KEY]
    assert await repository.get_current() == snapshot


@pytest.mark.asyncio
async def test_invalid_snapshot_is_not_written(repository, fake_redis, make_snapshot) -> None:
    snapshot = make_snapshot()
    snapshot.prices[Karat.K22].gram = -1.0

    await repository.set_current(snapshot)

    assert CURRENT_KEY not in fake_redis.values


@pytest.mark.asyncio
async def test_malformed_current_snapshot_reads_as_miss(repository, fake_redis) -> None:
    fake_redis.values[CURRENT_KEY] = '{"timestamp": "yesterday"}'

    assert await repository.get_current() is None


@pytest.mark.asyncio
async def test_historical_points_window_and_order(repository, now) -> None:
    for days_ago, price in [(3, 7300.0), (1, 7400.0), (2, 7350.0), (40, 7000.0)]:
        await repository.add_historical_point(
            Karat.K24, to_epoch_ms(now - timedelta(days=days_ago)), price
        )

    points = await repository.get_historical(Karat.K24, 30)

    assert [point.price for point in points] == [7300.0, 7350.0, 7400.0]
    last = await repository.get_last_historical_point(Karat.K24)
    assert last.price == 7400.0
    assert await repository.get_last_historical_point(Karat.K18) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("timestamp", "price"), [(0, 7400.0), (1, 0.0), (1, -5.0), (1, math.nan), (1, math.inf)]
)
async def test_invalid_points_are_rejected(
    repository, fake_redis, timestamp, price
) -> None:
    await repository.add_historical_point(Karat.K24, timestamp, price)

    assert history_key(Karat.K24) not in fake_redis.sorted_sets


@pytest.mark.asyncio
async def test_malformed_members_are_dropped(repository, fake_redis, now) -> None:
    timestamp = to_epoch_ms(now - timedelta(days=1))
    await repository.add_historical_point(Karat.K21, timestamp, 6475.0)
    fake_redis.sorted_sets[history_key(Karat.K21)].update(
        {"not json": timestamp - 1, '{"timestamp": 5, "price": -1}': timestamp - 2}
    )

    points = await repository.get_historical(Karat.K21, 7)

    assert len(points) == 1
    assert points[0].price == 6475.0


@pytest.mark.asyncio
async def test_prediction_history_is_bounded(repository, fake_redis, now) -> None:
    prediction_set = PredictionSet(
        model_version="v1.0-linear-regression",
        last_trained=now,
        accuracy=88.5,
        trend=Trend.SIDEWAYS,
        volatility=VolatilityLevel.LOW,
        karat=Karat.K24,
    )

    for _ in range(PREDICTION_HISTORY_LIMIT + 5):
        await repository.set_latest_prediction(Karat.K24, prediction_set)

    assert len(fake_redis.lists[prediction_history_key(Karat.K24)]) == 100
    assert await repository.get_latest_prediction(Karat.K24) == prediction_set
    assert await repository.get_latest_prediction(Karat.K18) is None


@pytest.mark.asyncio
async def test_model_metadata_round_trip(repository, fake_redis, now) -> None:
    metadata = ModelMetadata(
        version="v1.0-linear-regression",
        last_trained=now,
        training_data_points=42,
        accuracy=88.5,
    )

    await repository.set_model_metadata(metadata)

    assert '"trainingDataPoints":42' in fake_redis.values[MODEL_METADATA_KEY]
    assert await repository.get_model_metadata() == metadata
