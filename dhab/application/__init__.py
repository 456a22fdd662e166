"""
Application Layer Package

Use cases for reading prices, history and forecasts and for running the
ingestion jobs, plus the DTOs they exchange with the outer layers.
"""

from dhab.application import dtos, models, use_cases

__all__ = ["dtos", "use_cases", "models"]
