"""Use case for the per-karat price history endpoint."""

from typing import Optional

from dhab.domain.repositories.gold_price_repository import IGoldPriceRepository
from dhab.domain.services.request_validator import (
    HISTORY_MAX_DAYS,
    parse_int_in_range,
    parse_karat,
)

from ..dtos.gold_dto import HistoricalPointDTO, HistoryResponseDTO

DEFAULT_HISTORY_DAYS = 90


class GetHistoricalPricesUseCase:
    """Validate the request window and read the karat's series."""

    def __init__(self, repository: IGoldPriceRepository):
        self.repository = repository

    async def execute(
        self, karat: Optional[str] = None, days: Optional[str] = None
    ) -> HistoryResponseDTO:
        """
        Raises:
            InvalidRequestError: For an unknown karat or days outside [1, 1825]
        """
        parsed_karat = parse_karat(karat)
        parsed_days = parse_int_in_range(
            days,
            name="days",
            default=DEFAULT_HISTORY_DAYS,
            minimum=1,
            maximum=HISTORY_MAX_DAYS,
        )

        points = await self.repository.get_historical(parsed_karat, parsed_days)
        data = [HistoricalPointDTO.from_domain(point) for point in points]
        return HistoryResponseDTO(
            karat=parsed_karat, days=parsed_days, count=len(data), data=data
        )
