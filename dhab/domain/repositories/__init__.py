"""Domain repository interfaces."""

from .gold_price_repository import IGoldPriceRepository

__all__ = ["IGoldPriceRepository"]
