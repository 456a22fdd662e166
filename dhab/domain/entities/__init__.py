"""
Domain Entities Package

This package contains the core domain entities and business logic.
"""

from .errors import (
    DomainError,
    InvalidRequestError,
    PriceSourceUnavailableError,
    PriceUnavailableError,
    StoreDecodeError,
)
from .gold import FINENESS_RATIOS, CurrentPriceSnapshot, Karat, KaratPrice
from .health import ApplicationInfo, DependencyStatus, ServiceStatus, SystemHealth
from .prediction import (
    ModelMetadata,
    PredictionPoint,
    PredictionSet,
    Trend,
    VolatilityLevel,
)
from .time_series import PricePoint

__all__ = [
    "Karat",
    "KaratPrice",
    "FINENESS_RATIOS",
    "CurrentPriceSnapshot",
    "PricePoint",
    "PredictionPoint",
    "PredictionSet",
    "ModelMetadata",
    "Trend",
    "VolatilityLevel",
    "SystemHealth",
    "DependencyStatus",
    "ServiceStatus",
    "ApplicationInfo",
    "DomainError",
    "InvalidRequestError",
    "PriceSourceUnavailableError",
    "PriceUnavailableError",
    "StoreDecodeError",
]
