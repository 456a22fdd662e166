"""
Database Package - Infrastructure Layer

Redis client wrapper used by the repositories.
"""

from .redis_store import RedisStore

__all__ = ["RedisStore"]
