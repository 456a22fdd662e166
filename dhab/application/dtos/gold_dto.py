"""
Application DTOs - Gold Prices

Data contracts for price snapshots and historical points. The same models
serve HTTP responses and the JSON stored in Redis, so every field keeps
its camelCase wire name (``usdEgpRate``, ``changePercent``...).
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dhab.domain.entities.gold import CurrentPriceSnapshot, Karat, KaratPrice
from dhab.domain.entities.time_series import PricePoint


class CamelModel(BaseModel):
    """Base model emitting and accepting camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KaratPriceDTO(CamelModel):
    gram: float = Field(gt=0, allow_inf_nan=False, description="EGP per gram")
    ounce: float = Field(gt=0, allow_inf_nan=False, description="EGP per troy ounce")
    change: Optional[float] = Field(
        default=None, description="Gram price change against the last stored point"
    )
    change_percent: Optional[float] = Field(
        default=None, description="Relative change in percent"
    )

    @classmethod
    def from_domain(cls, price: KaratPrice) -> "KaratPriceDTO":
        return cls(
            gram=price.gram,
            ounce=price.ounce,
            change=price.change,
            change_percent=price.change_percent,
        )

    def to_domain(self) -> KaratPrice:
        return KaratPrice(
            gram=self.gram,
            ounce=self.ounce,
            change=self.change,
            change_percent=self.change_percent,
        )


class CurrentPriceSnapshotDTO(CamelModel):
    """Live price record covering exactly the four supported karats."""

    timestamp: int = Field(gt=0, description="Milliseconds since the epoch")
    date: str = Field(description="ISO day of the snapshot")
    prices: Dict[Karat, KaratPriceDTO]
    usd_egp_rate: float = Field(gt=0, allow_inf_nan=False)
    global_ounce_usd: float = Field(gt=0, allow_inf_nan=False)

    @field_validator("prices")
    @classmethod
    def _require_every_karat(
        cls, prices: Dict[Karat, KaratPriceDTO]
    ) -> Dict[Karat, KaratPriceDTO]:
        missing = [karat.value for karat in Karat if karat not in prices]
        if missing:
            raise ValueError(f"missing prices for karats: {', '.join(missing)}")
        return prices

    @classmethod
    def from_domain(cls, snapshot: CurrentPriceSnapshot) -> "CurrentPriceSnapshotDTO":
        return cls(
            timestamp=snapshot.timestamp,
            date=snapshot.date,
            prices={
                karat: KaratPriceDTO.from_domain(price)
                for karat, price in snapshot.prices.items()
            },
            usd_egp_rate=snapshot.usd_egp_rate,
            global_ounce_usd=snapshot.global_ounce_usd,
        )

    def to_domain(self) -> CurrentPriceSnapshot:
        return CurrentPriceSnapshot(
            timestamp=self.timestamp,
            date=self.date,
            prices={karat: price.to_domain() for karat, price in self.prices.items()},
            usd_egp_rate=self.usd_egp_rate,
            global_ounce_usd=self.global_ounce_usd,
        )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "timestamp": 1735725600000,
                "date": "2025-01-01",
                "prices": {
                    "24k": {
                        "gram": 7400,
                        "ounce": 230165,
                        "change": 12,
                        "changePercent": 0.16,
                    },
                    "22k": {"gram": 6784, "ounce": 210992},
                    "21k": {"gram": 6475, "ounce": 201394},
                    "18k": {"gram": 5550, "ounce": 172624},
                },
                "usdEgpRate": 50.85,
                "globalOunceUsd": 2800,
            }
        },
    )


class PricePointDTO(CamelModel):
    """Stored member of a karat's history sorted set."""

    timestamp: int = Field(gt=0)
    price: float = Field(gt=0, allow_inf_nan=False)

    @classmethod
    def from_domain(cls, point: PricePoint) -> "PricePointDTO":
        return cls(timestamp=point.timestamp, price=point.price)

    def to_domain(self) -> PricePoint:
        return PricePoint(timestamp=self.timestamp, price=self.price)


class HistoricalPointDTO(PricePointDTO):
    """History point as served over HTTP, with its ISO day."""

    date: str

    @classmethod
    def from_domain(cls, point: PricePoint) -> "HistoricalPointDTO":
        return cls(timestamp=point.timestamp, price=point.price, date=point.date)


class HistoryResponseDTO(CamelModel):
    karat: Karat
    days: int
    count: int
    data: List[HistoricalPointDTO] = Field(default_factory=list)
