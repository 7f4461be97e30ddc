from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.domain.entities.errors import (
    InsufficientDataError,
    ModelConfigurationError,
    ModelNotTrainedError,
)
from src.domain.entities.time_series import TimeSeriesPoint
from src.domain.services.holt_winters import HoltWintersForecaster


def test_constant_series_forecasts_the_constant() -> None:
    model = HoltWintersForecaster().fit([50.0] * 28)

    forecasts = model.forecast(10)

    assert len(forecasts) == 10
    assert forecasts == pytest.approx([50.0] * 10)
    assert model.metrics["mae"] == pytest.approx(0.0)
    assert model.last_value == 50.0


def test_linear_trend_is_followed() -> None:
    values = [200 + 0.5 * t for t in range(140)]
    model = HoltWintersForecaster().fit(values)

    forecasts = model.forecast(7)

    for step, value in enumerate(forecasts, start=1):
        assert value == pytest.approx(200 + 0.5 * (139 + step), rel=0.05)


def test_fit_accepts_time_series_points() -> None:
    start = date(2024, 1, 1)
    points = [
        TimeSeriesPoint(date=start + timedelta(days=i), value=20.0) for i in range(14)
    ]
    model = HoltWintersForecaster().fit(points)

    assert model.fitted is True
    assert model.n_observations == 14
    assert model.metrics["observations"] == 14


def test_forecasts_are_never_negative() -> None:
    values = [100.0 - 7 * t for t in range(14)]
    model = HoltWintersForecaster(alpha=0.9, beta=0.9).fit(values)

    assert all(value >= 0.0 for value in model.forecast(30))


def test_requires_two_seasons() -> None:
    with pytest.raises(InsufficientDataError) as exc_info:
        HoltWintersForecaster(period=7).fit([1.0] * 13)

    assert exc_info.value.details == {"required": 14, "received": 13}


def test_forecast_before_fit_raises() -> None:
    with pytest.raises(ModelNotTrainedError):
        HoltWintersForecaster().forecast(5)


def test_forecast_rejects_empty_horizon() -> None:
    model = HoltWintersForecaster().fit([10.0] * 14)

    with pytest.raises(ModelConfigurationError):
        model.forecast(0)


@pytest.mark.parametrize(
    "kwargs",
    [{"alpha": 0.0}, {"beta": 1.5}, {"gamma": -0.1}, {"period": 0}],
)
def test_invalid_parameters_are_rejected(kwargs) -> None:
    with pytest.raises(ModelConfigurationError) as exc_info:
        HoltWintersForecaster(**kwargs)

    assert exc_info.value.details["errors"]


def test_prediction_intervals_scale_with_confidence() -> None:
    narrow = HoltWintersForecaster.prediction_intervals([100.0], confidence=0.95)[0]
    wide = HoltWintersForecaster.prediction_intervals([100.0], confidence=0.99)[0]
    fallback = HoltWintersForecaster.prediction_intervals([100.0], confidence=0.9)[0]

    assert narrow.lower == pytest.approx(70.6)
    assert narrow.upper == pytest.approx(129.4)
    assert wide.upper == pytest.approx(138.7)
    assert fallback.upper == pytest.approx(124.675)


def test_prediction_interval_lower_bound_is_clamped() -> None:
    interval = HoltWintersForecaster.prediction_intervals([0.0])[0]

    assert interval.lower == 0.0
    assert interval.upper == 0.0
