"""
Domain Service - Forecast Engine

Naive gold price forecasting. Two regimes are used:

  * fewer than ``MIN_REGRESSION_POINTS`` observations: a random walk around
    the last known price, good enough to cold-start the UI;
  * otherwise: an ordinary least squares line over the whole series plus a
    fixed-amplitude sine term, with bands widened by the recent volatility.

The engine is pure apart from the injected random source and clock.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from dhab.domain.entities.gold import Karat
from dhab.domain.entities.prediction import (
    PredictionPoint,
    PredictionSet,
    Trend,
    VolatilityLevel,
)
from dhab.domain.entities.time_series import PricePoint, to_epoch_ms
from dhab.domain.services.pricing import round_half_up

MODEL_VERSION = "v1.0-linear-regression"
# Not derived from any backtest.
PLACEHOLDER_ACCURACY = 88.5

MIN_REGRESSION_POINTS = 30
VOLATILITY_WINDOW = 30
DEFAULT_LAST_PRICE = 7400.0
HORIZON_BUCKETS = (7, 14, 30)

SEASONAL_PERIOD = 30.0
SEASONAL_AMPLITUDE = 50.0


def linear_regression(prices: Sequence[float]) -> Tuple[float, float]:
    """Closed-form OLS of price against its index ``0..n-1``.

    Returns:
        ``(slope, intercept)``
    """
    y = np.asarray(prices, dtype=float)
    n = y.size
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    return float(slope), float(intercept)


def population_stdev(prices: Sequence[float]) -> float:
    if len(prices) == 0:
        return 0.0
    return float(np.std(np.asarray(prices, dtype=float)))


def moving_average_trend(prices: Sequence[float]) -> Trend:
    """Compare the 7 and 30 sample moving averages of the last 30 prices."""
    recent = np.asarray(prices[-VOLATILITY_WINDOW:], dtype=float)
    if recent.size == 0:
        return Trend.SIDEWAYS
    ma7 = recent[-7:].mean()
    ma30 = recent.mean()
    if ma7 > ma30:
        return Trend.UPWARD
    if ma7 < ma30:
        return Trend.DOWNWARD
    return Trend.SIDEWAYS


def week_over_week_trend(prices: Sequence[float]) -> Trend:
    """Upward/downward when the last week moved more than 2% from the one before."""
    last_week = prices[-7:]
    previous_week = prices[-14:-7]
    if not last_week or not previous_week:
        return Trend.SIDEWAYS

    last_avg = sum(last_week) / len(last_week)
    previous_avg = sum(previous_week) / len(previous_week)
    if last_avg > previous_avg * 1.02:
        return Trend.UPWARD
    if last_avg < previous_avg * 0.98:
        return Trend.DOWNWARD
    return Trend.SIDEWAYS


def volatility_level(prices: Sequence[float]) -> VolatilityLevel:
    """Label the coefficient of variation: <=3% low, <=5% medium, above high."""
    if len(prices) == 0:
        return VolatilityLevel.LOW
    mean = sum(prices) / len(prices)
    if mean == 0:
        return VolatilityLevel.LOW

    percent = population_stdev(prices) / mean * 100
    if percent > 5:
        return VolatilityLevel.HIGH
    if percent > 3:
        return VolatilityLevel.MEDIUM
    return VolatilityLevel.LOW


def horizon_bucket(days: int) -> int:
    """Smallest generated horizon covering ``days``."""
    for bucket in HORIZON_BUCKETS:
        if days <= bucket:
            return bucket
    return HORIZON_BUCKETS[-1]


class ForecastEngine:
    """Produce day-ahead gold price predictions from a price series."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def predict(
        self, series: Sequence[PricePoint], horizon_days: int
    ) -> List[PredictionPoint]:
        now = self._clock()
        if len(series) < MIN_REGRESSION_POINTS:
            return self._predict_random_walk(series, horizon_days, now)
        return self._predict_regression(series, horizon_days, now)

    def build_prediction_set(
        self,
        karat: Karat,
        series: Sequence[PricePoint],
        horizon_days: int,
    ) -> PredictionSet:
        """Wrap ``predict`` with trend and volatility labels for ``series``."""
        prices = [point.price for point in series]
        return PredictionSet(
            model_version=MODEL_VERSION,
            last_trained=self._clock(),
            accuracy=PLACEHOLDER_ACCURACY,
            trend=week_over_week_trend(prices),
            volatility=volatility_level(prices),
            karat=karat,
            predictions=self.predict(series, horizon_days),
        )

    def _predict_random_walk(
        self, series: Sequence[PricePoint], horizon_days: int, now: datetime
    ) -> List[PredictionPoint]:
        last_price = series[-1].price if series else DEFAULT_LAST_PRICE
        predictions: List[PredictionPoint] = []

        for day in range(1, horizon_days + 1):
            # Slight upward bias: [-24, 26)
            price = last_price + self._rng.uniform(-24.0, 26.0)
            confidence = max(0.5, 0.95 - day * 0.02)
            margin = 50 * (1 - confidence)
            predictions.append(
                self._point(
                    now=now,
                    day=day,
                    price=price,
                    confidence=confidence,
                    lower=price - margin,
                    upper=price + margin,
                )
            )

        return predictions

    def _predict_regression(
        self, series: Sequence[PricePoint], horizon_days: int, now: datetime
    ) -> List[PredictionPoint]:
        prices = [point.price for point in series]
        slope, intercept = linear_regression(prices)
        last_index = len(prices) - 1
        recent_volatility = population_stdev(prices[-VOLATILITY_WINDOW:])

        predictions: List[PredictionPoint] = []
        for day in range(1, horizon_days + 1):
            index = last_index + day
            seasonal = math.sin(index / SEASONAL_PERIOD) * SEASONAL_AMPLITUDE
            predicted = round_half_up(slope * index + intercept + seasonal)
            confidence = max(0.5, 0.92 - day * 0.015)
            margin = recent_volatility * (1 + day * 0.1)
            predictions.append(
                self._point(
                    now=now,
                    day=day,
                    price=predicted,
                    confidence=confidence,
                    lower=predicted - margin,
                    upper=predicted + margin,
                )
            )

        return predictions

    @staticmethod
    def _point(
        now: datetime,
        day: int,
        price: float,
        confidence: float,
        lower: float,
        upper: float,
    ) -> PredictionPoint:
        target = now + timedelta(days=day)
        return PredictionPoint(
            date=target.date().isoformat(),
            timestamp=to_epoch_ms(target),
            price=round_half_up(price),
            confidence=round_half_up(confidence, 2),
            lower_bound=round_half_up(lower),
            upper_bound=round_half_up(upper),
        )
