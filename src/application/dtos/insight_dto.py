"""
Application DTOs - Insights

Data Transfer Objects for the ranked insight feed and the per-pair
aggregated rule predictions.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from src.domain.entities.insight import InsightRecord
from src.domain.entities.risk import PredictionResult, PredictionType, RiskLevel

MetricValue = Union[int, float, str]


class InsightQueryDTO(BaseModel):
    """Filters applied to the cached insight snapshot."""

    risk_level: Optional[RiskLevel] = Field(
        default=None, description="Only return insights of this tier"
    )
    state: Optional[str] = Field(
        default=None, description="Only return insights for facilities in this state"
    )
    facility_id: Optional[str] = None
    product_id: Optional[str] = None
    prediction_type: Optional[PredictionType] = None


class PredictionResultDTO(BaseModel):
    """Serialised rule or model prediction."""

    prediction: str
    expected_date: date
    confidence: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    days_until_event: int = Field(ge=0)
    metrics: Dict[str, MetricValue] = Field(default_factory=dict)

    @classmethod
    def from_entity(cls, result: PredictionResult) -> "PredictionResultDTO":
        return cls(
            prediction=result.prediction,
            expected_date=result.expected_date,
            confidence=result.confidence,
            risk_level=result.risk_level,
            days_until_event=result.days_until_event,
            metrics=dict(result.metrics),
        )


class InsightDTO(PredictionResultDTO):
    """One ranked insight for a facility/product pair."""

    id: str
    facility_id: str
    facility_name: str
    product_id: str
    product_name: str
    prediction_type: PredictionType
    state: Optional[str] = None
    generated_at: datetime

    @classmethod
    def from_entity(cls, record: InsightRecord) -> "InsightDTO":
        return cls(
            id=record.id,
            facility_id=record.facility_id,
            facility_name=record.facility_name,
            product_id=record.product_id,
            product_name=record.product_name,
            prediction_type=record.prediction_type,
            prediction=record.prediction,
            expected_date=record.expected_date,
            confidence=record.confidence,
            risk_level=record.risk_level,
            days_until_event=record.days_until_event,
            metrics=dict(record.metrics),
            state=record.state,
            generated_at=record.generated_at,
        )


class InsightsResponseDTO(BaseModel):
    data: List[InsightDTO]
    count: int
    generated_at: Optional[datetime] = None


class AggregatedPredictionsDTO(BaseModel):
    """The three rule predictions computed fresh for one pair."""

    facility_id: str
    product_id: str
    stockout: PredictionResultDTO
    expiry: PredictionResultDTO
    cold_chain: PredictionResultDTO
    overall_risk_level: RiskLevel
