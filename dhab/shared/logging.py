"""
Logging Configuration - Shared Layer

Routes structlog events through the standard ``logging`` handlers so that
uvicorn, celery and httpx records share one renderer: coloured console
output while developing, one JSON object per line in production.
"""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import Processor

from dhab.shared.consts import EnumEnvironment

# Third-party loggers that flood INFO with per-request lines
NOISY_LOGGERS = ("httpx", "httpcore")


def _common_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(environment: str) -> Processor:
    if environment.lower() == EnumEnvironment.PRODUCTION:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _handlers(file_path: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if file_path:
        handlers.append(logging.FileHandler(file_path))
    return handlers


def configure_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    file_path: Optional[str] = None,
    environment: str = "development",
) -> None:
    """
    Install the structlog pipeline on the root logger.

    Safe to call more than once: the first call happens at import time with
    values taken from ``LOG_LEVEL`` / ``LOG_FILE_PATH``, the second one from
    :func:`update_logging_from_settings` once settings are loaded.

    Args:
        level: Log level name, ``LOG_LEVEL`` or INFO when omitted.
        format_string: Accepted for settings compatibility; rendering is
            owned by structlog.
        file_path: Optional extra file destination.
        environment: ``production`` switches to JSON lines.
    """
    level_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    log_file = file_path or os.environ.get("LOG_FILE_PATH")

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_common_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(environment),
        ],
    )
    handlers = _handlers(log_file)
    for handler in handlers:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.handlers = handlers
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_common_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    get_logger(__name__).debug(
        "logging.configured", level=level_name, file_path=log_file
    )


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)


def update_logging_from_settings(settings: Any) -> None:
    """Reapply :func:`configure_logging` with the loaded ``AppSettings``."""
    configure_logging(
        level=_plain(settings.logging.level),
        format_string=settings.logging.format,
        file_path=settings.logging.file_path,
        environment=_plain(settings.environment),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
