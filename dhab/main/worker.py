#!/usr/bin/env python3
"""
Ingestion Worker - Main Layer

Runs the Celery worker consuming the ``ingestion`` queue. When
``INGEST_REFRESH_INTERVAL_SECONDS`` is set the beat scheduler is embedded
so the hourly price refresh needs no external cron.
"""

import os

from dhab.main.config import get_settings
from dhab.shared import configure_logging, get_logger, update_logging_from_settings

configure_logging()

settings = get_settings()

update_logging_from_settings(settings)

logger = get_logger(__name__)


def create_worker():
    """Build the Celery app from the current settings."""
    current = get_settings()
    broker_url = current.celery.broker_url
    backend_url = current.celery.result_backend_url

    # Celery reads these when tasks are imported by the worker process
    os.environ.setdefault("CELERY_BROKER_URL", broker_url)
    os.environ.setdefault("CELERY_RESULT_BACKEND", backend_url)

    from dhab.infrastructure.services.celery_config import create_celery_app

    worker_app = create_celery_app(
        broker_url=broker_url,
        backend_url=backend_url,
        refresh_interval_seconds=current.ingestion.refresh_interval_seconds,
    )
    logger.info(
        "worker.configured",
        app_name=worker_app.main,
        beat_tasks=sorted(worker_app.conf.beat_schedule),
    )
    return worker_app


def main():
    worker_app = create_worker()

    argv = ["worker", "--loglevel=info", "--queues=ingestion", "--concurrency=1"]
    if settings.ingestion.refresh_interval_seconds:
        # one process only, otherwise every worker would schedule the refresh
        argv.append("--beat")

    logger.info("worker.starting", argv=argv)
    worker_app.worker_main(argv)


if __name__ == "__main__":
    main()
