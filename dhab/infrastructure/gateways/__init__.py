"""
Gateways Package - Infrastructure Layer

HTTP price sources and the gateway that chains them.
"""

from .gold_price_gateway import GoldPriceGateway
from .price_sources import (
    DefaultPriceSource,
    GoldApiSource,
    PriceSource,
    SpotExchangeSource,
)

__all__ = [
    "GoldPriceGateway",
    "PriceSource",
    "GoldApiSource",
    "SpotExchangeSource",
    "DefaultPriceSource",
]
