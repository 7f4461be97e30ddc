"""Domain entities describing risk tiers and rule/model prediction results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, Union

MetricValue = Union[int, float, str]


class RiskLevel(str, Enum):
    """Risk tier assigned to every prediction."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def severity(self) -> int:
        """Rank used for sorting; 0 is the most severe tier."""
        return _SEVERITY[self]

    @classmethod
    def worst(cls, levels: Iterable["RiskLevel"]) -> "RiskLevel":
        return min(levels, key=lambda level: level.severity)


_SEVERITY = {
    RiskLevel.CRITICAL: 0,
    RiskLevel.HIGH: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW: 3,
}


class PredictionType(str, Enum):
    """Kind of event an insight warns about."""

    STOCKOUT = "STOCKOUT"
    EXPIRY = "EXPIRY"
    COLD_CHAIN = "COLD_CHAIN"
    AGGREGATED = "AGGREGATED"


@dataclass(frozen=True)
class PredictionResult:
    """Output of every rule or model evaluation."""

    prediction: str
    expected_date: date
    confidence: int
    risk_level: RiskLevel
    days_until_event: int
    metrics: Dict[str, MetricValue] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregatedPrediction:
    """The three rule predictions for one facility/product pair."""

    stockout: PredictionResult
    expiry: PredictionResult
    cold_chain: PredictionResult

    @property
    def overall_risk_level(self) -> RiskLevel:
        return RiskLevel.worst(
            [
                self.stockout.risk_level,
                self.expiry.risk_level,
                self.cold_chain.risk_level,
            ]
        )
