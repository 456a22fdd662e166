"""Domain gateway interfaces for upstream price providers."""

from .gold_price_gateway import IGoldPriceGateway

__all__ = ["IGoldPriceGateway"]
