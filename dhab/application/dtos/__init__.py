"""
DTOs Package - Application Layer

Data Transfer Objects exchanged between the application layer, the
presentation layer and the Redis store.
"""

from .gold_dto import (
    CurrentPriceSnapshotDTO,
    HistoricalPointDTO,
    HistoryResponseDTO,
    KaratPriceDTO,
    PricePointDTO,
)
from .health_dto import ApplicationInfoDTO, DependencyStatusDTO, SystemHealthDTO
from .ingestion_dto import (
    BackfillDayResultDTO,
    BackfillDayStatus,
    BackfillResultDTO,
    RefreshResultDTO,
)
from .prediction_dto import ModelMetadataDTO, PredictionPointDTO, PredictionSetDTO

__all__ = [
    "KaratPriceDTO",
    "CurrentPriceSnapshotDTO",
    "PricePointDTO",
    "HistoricalPointDTO",
    "HistoryResponseDTO",
    "PredictionPointDTO",
    "PredictionSetDTO",
    "ModelMetadataDTO",
    "RefreshResultDTO",
    "BackfillDayStatus",
    "BackfillDayResultDTO",
    "BackfillResultDTO",
    "SystemHealthDTO",
    "DependencyStatusDTO",
    "ApplicationInfoDTO",
]
