"""Domain services: pricing arithmetic, forecasting and input validation."""

from .forecast_engine import ForecastEngine
from .pricing import (
    apply_price_changes,
    calculate_karat_price,
    calculate_price_change,
    derive_karat_prices,
)
from .request_validator import parse_int_in_range, parse_karat

__all__ = [
    "ForecastEngine",
    "apply_price_changes",
    "calculate_karat_price",
    "calculate_price_change",
    "derive_karat_prices",
    "parse_int_in_range",
    "parse_karat",
]
