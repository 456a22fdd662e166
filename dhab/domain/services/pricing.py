"""Domain service helpers for karat pricing and day-over-day changes."""

import math
from typing import Dict, Mapping, Optional, Tuple

from dhab.domain.entities.gold import CurrentPriceSnapshot, Karat, KaratPrice


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero on the positive side, like ``Math.round``.

    Non-finite values are returned untouched.
    """
    if not math.isfinite(value):
        return value
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def calculate_price_change(current: float, previous: float) -> Tuple[float, float]:
    """Return ``(change, change_percent)`` rounded to two decimals.

    A zero ``previous`` is not guarded: the percentage follows IEEE
    division and becomes ``inf``/``-inf``, or ``nan`` when nothing changed.
    """
    change = current - previous
    if previous == 0:
        change_percent = math.copysign(math.inf, change) if change else math.nan
    else:
        change_percent = change / previous * 100
    return round_half_up(change, 2), round_half_up(change_percent, 2)


def calculate_karat_price(price_24k: float, karat: Karat) -> float:
    """Scale a 24k price by the karat number (``price * k / 24``)."""
    return round_half_up(price_24k * karat.number / 24)


def derive_karat_prices(gram_24k: float, ounce_24k: float) -> Dict[Karat, KaratPrice]:
    """Build every karat's gram and ounce price from the 24k figures."""
    return {
        karat: KaratPrice(
            gram=round_half_up(gram_24k * karat.fineness),
            ounce=round_half_up(ounce_24k * karat.fineness),
        )
        for karat in Karat
    }


def apply_price_changes(
    snapshot: CurrentPriceSnapshot,
    previous_prices: Mapping[Karat, Optional[float]],
) -> CurrentPriceSnapshot:
    """Fill ``change``/``change_percent`` against the previous gram prices.

    A karat without a previous price is compared with itself, which yields
    a zero change.
    """
    for karat, price in snapshot.prices.items():
        previous = previous_prices.get(karat)
        if not previous:
            previous = price.gram
        price.change, price.change_percent = calculate_price_change(
            price.gram, previous
        )
    return snapshot
