"""
Gold Price Domain Entities

Karat grades and the current price snapshot served to clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class Karat(str, Enum):
    """Closed set of gold purity grades quoted by the service."""

    K24 = "24k"
    K22 = "22k"
    K21 = "21k"
    K18 = "18k"

    @property
    def fineness(self) -> float:
        """Multiplier converting a 24k price to this karat."""
        return FINENESS_RATIOS[self]

    @property
    def number(self) -> int:
        return int(self.value[:-1])

    @classmethod
    def values(cls) -> list[str]:
        return [karat.value for karat in cls]


FINENESS_RATIOS: Dict[Karat, float] = {
    Karat.K24: 1.0,
    Karat.K22: 0.9167,
    Karat.K21: 0.875,
    Karat.K18: 0.75,
}


@dataclass(slots=True)
class KaratPrice:
    """EGP price of one karat, per gram and per troy ounce."""

    gram: float
    ounce: float
    change: Optional[float] = None
    change_percent: Optional[float] = None


@dataclass(slots=True)
class CurrentPriceSnapshot:
    """The single live price record for every karat at one moment."""

    timestamp: int
    date: str
    prices: Dict[Karat, KaratPrice] = field(default_factory=dict)
    usd_egp_rate: float = 0.0
    global_ounce_usd: float = 0.0

    def gram_price(self, karat: Karat) -> float:
        return self.prices[karat].gram
