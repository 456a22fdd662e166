"""
Ingestion Use Cases - Application Layer

Jobs that write prices into the store: the current-price refresh and the
day-by-day historical backfill. Both are triggered externally, either by
the protected HTTP endpoints or by the Celery tasks.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional, Union

import structlog

from dhab.domain.entities.errors import PriceUnavailableError
from dhab.domain.entities.gold import CurrentPriceSnapshot, Karat
from dhab.domain.gateways.gold_price_gateway import IGoldPriceGateway
from dhab.domain.repositories.gold_price_repository import IGoldPriceRepository
from dhab.domain.services.request_validator import HISTORY_MAX_DAYS, parse_int_in_range

from ..dtos.gold_dto import KaratPriceDTO
from ..dtos.ingestion_dto import (
    BackfillDayResultDTO,
    BackfillDayStatus,
    BackfillResultDTO,
    RefreshResultDTO,
)
from .current_price_use_case import apply_changes_from_history

logger = structlog.get_logger(__name__)

BACKFILL_DEFAULT_DAYS = 30
BACKFILL_DEFAULT_OFFSET = 0
BACKFILL_DEFAULT_LIMIT = 5
BACKFILL_MAX_LIMIT = 31
BACKFILL_DEFAULT_DELAY = 0.5

QueryValue = Union[str, int, None]


async def _append_history(
    repository: IGoldPriceRepository, snapshot: CurrentPriceSnapshot
) -> None:
    for karat in Karat:
        await repository.add_historical_point(
            karat, snapshot.timestamp, snapshot.gram_price(karat)
        )


class RefreshCurrentPricesUseCase:
    """Fetch, persist and record the live price of every karat."""

    def __init__(self, repository: IGoldPriceRepository, gateway: IGoldPriceGateway):
        self.repository = repository
        self.gateway = gateway

    async def execute(self) -> RefreshResultDTO:
        """
        Raises:
            PriceUnavailableError: If the gateway returned nothing
        """
        snapshot = await self.gateway.fetch_current_price()
        if snapshot is None:
            raise PriceUnavailableError("Failed to fetch gold prices")

        snapshot = await apply_changes_from_history(self.repository, snapshot)
        await self.repository.set_current(snapshot)
        await _append_history(self.repository, snapshot)

        logger.info(
            "ingestion.refresh.completed",
            timestamp=snapshot.timestamp,
            gram_24k=snapshot.gram_price(Karat.K24),
        )

        return RefreshResultDTO(
            success=True,
            message="Gold prices updated successfully",
            timestamp=snapshot.timestamp,
            date=snapshot.date,
            prices={
                karat: KaratPriceDTO.from_domain(price)
                for karat, price in snapshot.prices.items()
            },
        )


class BackfillHistoryUseCase:
    """Import past daily prices, a bounded number of days per run."""

    def __init__(
        self,
        repository: IGoldPriceRepository,
        gateway: IGoldPriceGateway,
        delay_seconds: float = BACKFILL_DEFAULT_DELAY,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.gateway = gateway
        self.delay_seconds = delay_seconds
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def execute(
        self,
        days: QueryValue = None,
        offset: QueryValue = None,
        limit: QueryValue = None,
    ) -> BackfillResultDTO:
        """
        Process ``min(days, limit)`` days going back from ``offset`` days ago.

        Raises:
            InvalidRequestError: If a parameter is outside its range
        """
        parsed_days = parse_int_in_range(
            days,
            name="days",
            default=BACKFILL_DEFAULT_DAYS,
            minimum=1,
            maximum=HISTORY_MAX_DAYS,
        )
        parsed_offset = parse_int_in_range(
            offset,
            name="offset",
            default=BACKFILL_DEFAULT_OFFSET,
            minimum=0,
            maximum=HISTORY_MAX_DAYS,
        )
        parsed_limit = parse_int_in_range(
            limit,
            name="limit",
            default=BACKFILL_DEFAULT_LIMIT,
            minimum=1,
            maximum=BACKFILL_MAX_LIMIT,
        )

        to_process = min(parsed_days, parsed_limit)
        today = self._clock()
        logger.info(
            "ingestion.backfill.started", days=to_process, offset=parsed_offset
        )

        results: List[BackfillDayResultDTO] = []
        for index in range(to_process):
            if index and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)

            day = today - timedelta(days=parsed_offset + index)
            results.append(await self._backfill_day(day.strftime("%Y%m%d")))

        logger.info(
            "ingestion.backfill.completed",
            processed=len(results),
            succeeded=sum(r.status == BackfillDayStatus.SUCCESS for r in results),
        )
        return BackfillResultDTO(success=True, processed=len(results), results=results)

    async def _backfill_day(self, date_key: str) -> BackfillDayResultDTO:
        try:
            snapshot = await self.gateway.fetch_historical_price(date_key)
            if snapshot is None:
                logger.warning("ingestion.backfill.day_failed", date=date_key)
                return BackfillDayResultDTO(
                    date=date_key,
                    status=BackfillDayStatus.FAILED,
                    error="No data returned",
                )

            await _append_history(self.repository, snapshot)
            return BackfillDayResultDTO(
                date=date_key,
                status=BackfillDayStatus.SUCCESS,
                price=snapshot.gram_price(Karat.K24),
            )
        except Exception as exc:
            # one bad day must not abort the run
            logger.error(
                "ingestion.backfill.day_error",
                date=date_key,
                error=str(exc),
                exc_info=exc,
            )
            return BackfillDayResultDTO(
                date=date_key, status=BackfillDayStatus.ERROR, error=str(exc)
            )
