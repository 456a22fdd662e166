"""
Infrastructure Services - Celery Configuration

Celery application running the ingestion jobs, optionally driven by
Celery beat for the periodic current-price refresh.
"""

import os
from typing import Optional

from celery import Celery

REFRESH_TASK = "refresh_current_prices"
BACKFILL_TASK = "backfill_history"


def create_celery_app(
    broker_url: Optional[str] = None,
    backend_url: Optional[str] = None,
    refresh_interval_seconds: Optional[int] = None,
) -> Celery:
    """
    Create and configure Celery application.

    Args:
        broker_url: Message broker URL (uses env var if not provided)
        backend_url: Result backend URL (uses env var if not provided)
        refresh_interval_seconds: Beat period of the price refresh; no
            periodic task is scheduled when unset

    Returns:
        Configured Celery application
    """
    effective_broker = broker_url or os.getenv(
        "CELERY_BROKER_URL", "redis://redis:6379/0"
    )
    effective_backend = backend_url or os.getenv(
        "CELERY_RESULT_BACKEND", "redis://redis:6379/1"
    )

    app = Celery(
        "dhab_worker",
        broker=effective_broker,
        backend=effective_backend,
        include=["dhab.infrastructure.services.tasks.ingestion"],
    )

    beat_schedule = {}
    if refresh_interval_seconds:
        beat_schedule["refresh-current-prices"] = {
            "task": REFRESH_TASK,
            "schedule": float(refresh_interval_seconds),
        }

    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        result_expires=3600,  # 1 hour
        task_routes={
            REFRESH_TASK: {"queue": "ingestion"},
            BACKFILL_TASK: {"queue": "ingestion"},
        },
        worker_prefetch_multiplier=1,
        task_acks_late=True,
        # A backfill run makes at most 31 upstream calls
        task_time_limit=300,
        task_default_retry_delay=60,  # 1 minute
        task_max_retries=3,
        beat_schedule=beat_schedule,
    )

    return app


def _interval_from_env() -> Optional[int]:
    raw = os.getenv("INGEST_REFRESH_INTERVAL_SECONDS")
    return int(raw) if raw else None


celery_app = create_celery_app(refresh_interval_seconds=_interval_from_env())
