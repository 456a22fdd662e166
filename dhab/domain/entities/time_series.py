"""Domain entities for per-karat historical price series."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime into milliseconds since the epoch."""
    return int(moment.timestamp() * 1000)


def from_epoch_ms(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)


def iso_day(timestamp: int) -> str:
    """ISO calendar day (UTC) of a millisecond timestamp."""
    return from_epoch_ms(timestamp).date().isoformat()


@dataclass(frozen=True, slots=True)
class PricePoint:
    """A single gram price observation for one karat."""

    timestamp: int
    price: float

    @property
    def date(self) -> str:
        return iso_day(self.timestamp)
