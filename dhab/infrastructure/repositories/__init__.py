"""
Repositories Package - Infrastructure Layer

Concrete implementations of the repository interfaces defined in the
domain layer.
"""

from .gold_price_repository import RedisGoldPriceRepository

__all__ = ["RedisGoldPriceRepository"]
