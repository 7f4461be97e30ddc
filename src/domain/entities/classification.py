"""Domain entities for risk classification."""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from typing import Dict, Tuple

from .risk import RiskLevel


@dataclass(frozen=True)
class ClassificationFeatures:
    """Fixed 8-dimensional feature record consumed by the risk classifier."""

    current_stock: float
    avg_daily_consumption: float
    days_until_stockout: float
    expiry_risk: float
    capacity_utilization: float
    temperature_deviation: float
    data_quality: float
    seasonality_factor: float

    def as_vector(self) -> Tuple[float, ...]:
        """Values in ``FEATURE_NAMES`` order."""
        return tuple(float(value) for value in astuple(self))


FEATURE_NAMES: Tuple[str, ...] = tuple(f.name for f in fields(ClassificationFeatures))


@dataclass(frozen=True)
class ClassificationResult:
    risk_level: RiskLevel
    confidence: int
    probabilities: Dict[RiskLevel, float]
