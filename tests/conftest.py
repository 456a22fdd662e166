from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dhab.domain.entities.gold import CurrentPriceSnapshot  # noqa: E402
from dhab.domain.entities.time_series import iso_day, to_epoch_ms  # noqa: E402
from dhab.domain.services.pricing import derive_karat_prices  # noqa: E402
from dhab.infrastructure.database.redis_store import RedisStore  # noqa: E402
from dhab.infrastructure.repositories.gold_price_repository import (  # noqa: E402
    RedisGoldPriceRepository,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
NOW_MS = to_epoch_ms(NOW)


class FakeRedis:
    """In-memory stand-in for ``redis.asyncio.Redis`` (decoded responses)."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = {}
        self.sorted_sets: Dict[str, Dict[str, float]] = {}
        self.lists: Dict[str, List[str]] = {}
        self.fail = False
        self.closed = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("connection refused")

    def _ordered(self, key: str) -> List[str]:
        members = self.sorted_sets.get(key, {})
        return [
            member
            for member, _ in sorted(members.items(), key=lambda item: (item[1], item[0]))
        ]

    async def get(self, key: str) -> Optional[str]:
        self._check()
        return self.values.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._check()
        self.values[key] = value
        return True

    async def zadd(self, key: str, mapping: Dict[str, float]) -> int:
        self._check()
        self.sorted_sets.setdefault(key, {}).update(mapping)
        return len(mapping)

    async def zrangebyscore(self, key: str, minimum: float, maximum: float) -> List[str]:
        self._check()
        members = self.sorted_sets.get(key, {})
        return [m for m in self._ordered(key) if minimum <= members[m] <= maximum]

    async def zrange(self, key: str, start: int, end: int) -> List[str]:
        self._check()
        stop = None if end == -1 else end + 1
        return self._ordered(key)[start:stop]

    async def lpush(self, key: str, *values: str) -> int:
        self._check()
        items = self.lists.setdefault(key, [])
        for value in values:
            items.insert(0, value)
        return len(items)

    async def ltrim(self, key: str, start: int, end: int) -> bool:
        self._check()
        stop = None if end == -1 else end + 1
        self.lists[key] = self.lists.get(key, [])[start:stop]
        return True

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self) -> None:
        self.closed = True


class StubGateway:
    """Price gateway returning canned snapshots."""

    def __init__(
        self,
        current: Optional[CurrentPriceSnapshot] = None,
        historical: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.current = current
        self.historical = historical or {}
        self.current_calls = 0
        self.historical_calls: List[str] = []

    async def fetch_current_price(self) -> Optional[CurrentPriceSnapshot]:
        self.current_calls += 1
        return self.current

    async def fetch_historical_price(
        self, date_key: str
    ) -> Optional[CurrentPriceSnapshot]:
        self.historical_calls.append(date_key)
        value = self.historical.get(date_key)
        if isinstance(value, Exception):
            raise value
        return value


def build_snapshot(
    gram_24k: float = 7400.0,
    ounce_24k: float = 230165.0,
    moment: datetime = NOW,
) -> CurrentPriceSnapshot:
    timestamp = to_epoch_ms(moment)
    return CurrentPriceSnapshot(
        timestamp=timestamp,
        date=iso_day(timestamp),
        prices=derive_karat_prices(gram_24k, ounce_24k),
        usd_egp_rate=50.85,
        global_ounce_usd=2800.0,
    )


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def store(fake_redis: FakeRedis) -> RedisStore:
    return RedisStore(url=None, client=fake_redis, timeout=1.0)


@pytest.fixture()
def repository(store: RedisStore) -> RedisGoldPriceRepository:
    return RedisGoldPriceRepository(store, clock=lambda: NOW_MS)


@pytest.fixture()
def make_snapshot() -> Callable[..., CurrentPriceSnapshot]:
    return build_snapshot


@pytest.fixture()
def make_gateway() -> Callable[..., StubGateway]:
    return StubGateway
