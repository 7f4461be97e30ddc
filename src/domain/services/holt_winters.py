"""
Domain service - Holt-Winters Forecaster

Triple exponential smoothing (level, trend and multiplicative seasonality)
used to forecast daily consumption:

    level_t  = a * y_t / s_{t-p} + (1 - a) * (level_{t-1} + trend_{t-1})
    trend_t  = b * (level_t - level_{t-1}) + (1 - b) * trend_{t-1}
    s_t      = g * y_t / level_t + (1 - g) * s_{t-p}
    y_{t+h}  = (level_t + h * trend_t) * s_{t-p+h}
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Union

import numpy as np

from src.domain.entities.errors import (
    InsufficientDataError,
    ModelConfigurationError,
    ModelNotTrainedError,
)
from src.domain.entities.time_series import TimeSeriesPoint
from src.shared.consts import EPSILON

Z_SCORES = {0.95: 1.96, 0.99: 2.58}
DEFAULT_Z_SCORE = 1.645
STANDARD_ERROR_RATIO = 0.15


@dataclass(frozen=True)
class PredictionInterval:
    lower: float
    upper: float


def _floor(value: float) -> float:
    if abs(value) < EPSILON:
        return EPSILON if value >= 0 else -EPSILON
    return value


class HoltWintersForecaster:
    """Multiplicative Holt-Winters model fitted in a single pass."""

    name = "ets"

    def __init__(
        self,
        alpha: float = 0.3,
        beta: float = 0.1,
        gamma: float = 0.2,
        period: int = 7,
    ):
        errors: List[str] = []
        for label, value in (("alpha", alpha), ("beta", beta), ("gamma", gamma)):
            if not 0.0 < value <= 1.0:
                errors.append(f"{label} must be greater than 0 and at most 1.")
        if period < 1:
            errors.append("period must be at least 1.")
        if errors:
            raise ModelConfigurationError(
                "Invalid Holt-Winters configuration", {"errors": errors}
            )

        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.period = period

        self.level = 0.0
        self.trend = 0.0
        self.seasonality = np.zeros(period)
        self.fitted = False
        self.n_observations = 0
        self.metrics: Dict[str, float] = {}

    @property
    def last_value(self) -> float:
        return float(self.metrics.get("last_value", 0.0))

    def fit(
        self, series: Sequence[Union[TimeSeriesPoint, float]]
    ) -> "HoltWintersForecaster":
        """
        Fit the model over the whole series.

        Args:
            series: Observations in chronological order, either
                ``TimeSeriesPoint`` items or plain numbers.

        Raises:
            InsufficientDataError: If fewer than two full seasons are given.
        """
        values = np.array(
            [
                point.value if isinstance(point, TimeSeriesPoint) else point
                for point in series
            ],
            dtype=float,
        )
        required = 2 * self.period
        if values.size < required:
            raise InsufficientDataError(required=required, received=int(values.size))

        period = self.period
        level = float(values[0])
        trend = float(values[1] - values[0])
        seasonality = np.empty(period)
        for i in range(period):
            seasonality[i] = values[i] / _floor(float(values[i : i + period].mean()))

        residuals = np.empty(values.size)
        for t, y in enumerate(values):
            idx = t % period
            residuals[t] = y - (level + trend) * seasonality[idx]

            prev_level = level
            level = self.alpha * (y / _floor(seasonality[idx])) + (1 - self.alpha) * (
                prev_level + trend
            )
            trend = self.beta * (level - prev_level) + (1 - self.beta) * trend
            seasonality[idx] = self.gamma * (y / _floor(level)) + (
                1 - self.gamma
            ) * seasonality[idx]

        self.level = level
        self.trend = trend
        self.seasonality = seasonality
        self.n_observations = int(values.size)
        self.metrics = {
            "mae": float(np.mean(np.abs(residuals))),
            "rmse": float(math.sqrt(np.mean(residuals**2))),
            "last_value": float(values[-1]),
            "observations": self.n_observations,
        }
        self.fitted = True
        return self

    def forecast(self, horizon: int) -> List[float]:
        """Non-negative forecasts for steps 1..horizon after the last observation."""
        if not self.fitted:
            raise ModelNotTrainedError(self.name)
        if horizon < 1:
            raise ModelConfigurationError(
                "Forecast horizon must be at least 1", {"horizon": horizon}
            )

        last_index = self.n_observations - 1
        forecasts: List[float] = []
        for h in range(1, horizon + 1):
            season = self.seasonality[(last_index + h) % self.period]
            forecasts.append(max(0.0, float((self.level + h * self.trend) * season)))
        return forecasts

    @staticmethod
    def prediction_intervals(
        forecasts: Sequence[float], confidence: float = 0.95
    ) -> List[PredictionInterval]:
        z_score = Z_SCORES.get(confidence, DEFAULT_Z_SCORE)
        intervals = []
        for value in forecasts:
            margin = z_score * value * STANDARD_ERROR_RATIO
            intervals.append(
                PredictionInterval(lower=max(0.0, value - margin), upper=value + margin)
            )
        return intervals
