"""Domain entities for time-series / historic data."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class TimeSeriesPoint:
    """One observation of a regularly sampled series (usually daily)."""

    date: date
    value: float


@dataclass(frozen=True, slots=True)
class HistoricalDataPoint:
    """Daily inventory record reported for a facility/product pair."""

    date: date
    consumption: float
    stock: float
    wastage: float = 0.0
