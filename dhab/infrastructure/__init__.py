"""
Infrastructure Layer Package

Implementations of the domain interfaces: the Redis store, the HTTP price
sources and the Celery worker.
"""

from dhab.infrastructure import repositories

__all__ = ["repositories"]
