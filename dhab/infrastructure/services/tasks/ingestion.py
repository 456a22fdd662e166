"""Celery tasks running the ingestion jobs outside the HTTP process."""

import asyncio
from typing import Any, Dict, Tuple

from celery import shared_task

from dhab.application.use_cases.ingestion_use_cases import (
    BackfillHistoryUseCase,
    RefreshCurrentPricesUseCase,
)
from dhab.domain.entities.errors import PriceUnavailableError
from dhab.infrastructure.database.redis_store import RedisStore
from dhab.infrastructure.gateways import (
    DefaultPriceSource,
    GoldApiSource,
    GoldPriceGateway,
    SpotExchangeSource,
)
from dhab.infrastructure.repositories.gold_price_repository import (
    RedisGoldPriceRepository,
)
from dhab.infrastructure.services.celery_config import BACKFILL_TASK, REFRESH_TASK
from dhab.infrastructure.services.tasks.base import CallbackTask, logger


def _build_dependencies(
    settings: Any,
) -> Tuple[RedisStore, RedisGoldPriceRepository, GoldPriceGateway]:
    store = RedisStore(
        url=settings.store.url,
        token=settings.store.token,
        timeout=settings.store.timeout,
    )
    goldapi = GoldApiSource(
        api_key=settings.price_api.api_key,
        base_url=settings.price_api.base_url,
        timeout=settings.price_api.timeout,
    )
    gateway = GoldPriceGateway(
        current_sources=[
            goldapi,
            SpotExchangeSource(
                spot_url=settings.price_api.spot_url,
                exchange_rate_url=settings.price_api.exchange_rate_url,
                timeout=settings.price_api.fallback_timeout,
            ),
            DefaultPriceSource(),
        ],
        historical_sources=[goldapi],
    )
    return store, RedisGoldPriceRepository(store), gateway


def _load_settings() -> Any:
    # Import here to avoid circular imports
    from dhab.main.config import get_settings

    return get_settings()


async def _refresh() -> Dict[str, Any]:
    store, repository, gateway = _build_dependencies(_load_settings())
    try:
        result = await RefreshCurrentPricesUseCase(repository, gateway).execute()
    finally:
        await store.close()
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)


async def _backfill(days: int, offset: int, limit: int) -> Dict[str, Any]:
    settings = _load_settings()
    store, repository, gateway = _build_dependencies(settings)
    use_case = BackfillHistoryUseCase(
        repository,
        gateway,
        delay_seconds=settings.ingestion.backfill_delay_seconds,
    )
    try:
        result = await use_case.execute(days=days, offset=offset, limit=limit)
    finally:
        await store.close()
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)


@shared_task(
    bind=True,
    base=CallbackTask,
    name=REFRESH_TASK,
    autoretry_for=(PriceUnavailableError,),
    retry_backoff=True,
)
def refresh_current_prices(self) -> Dict[str, Any]:
    """Fetch the live prices and append them to every karat's history."""
    logger.info("ingestion.task.refresh.started", task_id=self.request.id)
    return asyncio.run(_refresh())


@shared_task(bind=True, base=CallbackTask, name=BACKFILL_TASK)
def backfill_history(
    self, days: int = 30, offset: int = 0, limit: int = 5
) -> Dict[str, Any]:
    """Import ``min(days, limit)`` past days, starting ``offset`` days ago."""
    logger.info(
        "ingestion.task.backfill.started",
        task_id=self.request.id,
        days=days,
        offset=offset,
        limit=limit,
    )
    return asyncio.run(_backfill(days, offset, limit))
