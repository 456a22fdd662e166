"""
Application DTOs - Ingestion

Responses of the current-price refresh and historical backfill jobs.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from dhab.application.dtos.gold_dto import CamelModel, KaratPriceDTO
from dhab.domain.entities.gold import Karat


class RefreshResultDTO(CamelModel):
    success: bool
    message: str
    timestamp: int
    date: str
    prices: Dict[Karat, KaratPriceDTO]


class BackfillDayStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    ERROR = "error"


class BackfillDayResultDTO(CamelModel):
    """Outcome of one backfilled day."""

    date: str = Field(description="Day processed, formatted YYYYMMDD")
    status: BackfillDayStatus
    price: Optional[float] = Field(
        default=None, description="24k gram price stored for the day"
    )
    error: Optional[str] = None


class BackfillResultDTO(CamelModel):
    success: bool
    processed: int
    results: List[BackfillDayResultDTO] = Field(default_factory=list)
