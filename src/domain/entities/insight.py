"""Domain entities for ranked risk insights."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Dict, Optional, Tuple
from uuid import uuid4

from .risk import MetricValue, PredictionResult, PredictionType, RiskLevel


@dataclass(frozen=True)
class InsightRecord:
    """A prediction attached to the facility/product it was computed for."""

    facility_id: str
    facility_name: str
    product_id: str
    product_name: str
    prediction_type: PredictionType
    prediction: str
    expected_date: date
    confidence: int
    risk_level: RiskLevel
    days_until_event: int
    metrics: Dict[str, MetricValue] = field(default_factory=dict)
    state: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_prediction(
        cls,
        result: PredictionResult,
        *,
        prediction_type: PredictionType,
        facility_id: str,
        facility_name: str,
        product_id: str,
        product_name: str,
        state: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> "InsightRecord":
        return cls(
            facility_id=facility_id,
            facility_name=facility_name,
            product_id=product_id,
            product_name=product_name,
            prediction_type=prediction_type,
            prediction=result.prediction,
            expected_date=result.expected_date,
            confidence=result.confidence,
            risk_level=result.risk_level,
            days_until_event=result.days_until_event,
            metrics=dict(result.metrics),
            state=state,
            generated_at=generated_at or datetime.now(timezone.utc),
        )

    def sort_key(self) -> Tuple[int, int, int]:
        """Most severe first, then soonest event, then highest confidence."""
        return (self.risk_level.severity, self.days_until_event, -self.confidence)


@dataclass(frozen=True)
class InsightSnapshot:
    """Complete output of one refresh cycle; replaced, never patched."""

    records: Tuple[InsightRecord, ...]
    generated_at: datetime
    failed_pairs: int = 0
