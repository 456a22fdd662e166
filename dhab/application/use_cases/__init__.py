"""
Use Cases Package - Application Layer

Each use case orchestrates repositories, gateways and domain services for a
single operation exposed by the API or the worker.
"""

from .current_price_use_case import GetCurrentPriceUseCase
from .health_use_cases import GetApplicationInfoUseCase, GetHealthStatusUseCase
from .history_use_cases import GetHistoricalPricesUseCase
from .ingestion_use_cases import BackfillHistoryUseCase, RefreshCurrentPricesUseCase
from .prediction_use_cases import GetModelMetadataUseCase, GetPredictionsUseCase

__all__ = [
    "GetCurrentPriceUseCase",
    "GetHistoricalPricesUseCase",
    "GetPredictionsUseCase",
    "GetModelMetadataUseCase",
    "RefreshCurrentPricesUseCase",
    "BackfillHistoryUseCase",
    "GetHealthStatusUseCase",
    "GetApplicationInfoUseCase",
]
