"""
Shared module - Cross-cutting concerns / Shared Layer

Constants, enums and logging helpers used across every layer.
It must not depend on Infrastructure or Frameworks.
"""

from .consts import MS_PER_DAY, TROY_OUNCE_GRAMS, EnumEnvironment, EnumLogLevel
from .logging import configure_logging, get_logger, update_logging_from_settings

__all__ = [
    "EnumEnvironment",
    "EnumLogLevel",
    "MS_PER_DAY",
    "TROY_OUNCE_GRAMS",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
