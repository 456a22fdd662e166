"""Celery task implementations for infrastructure services."""

from .base import CallbackTask, logger
from .ingestion import backfill_history, refresh_current_prices

__all__ = [
    "CallbackTask",
    "backfill_history",
    "logger",
    "refresh_current_prices",
]
