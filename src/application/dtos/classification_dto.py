"""
Application DTOs - Risk classification
"""

from typing import Dict

from pydantic import BaseModel, Field

from src.domain.entities.classification import ClassificationFeatures
from src.domain.entities.model import ModelKind
from src.domain.entities.risk import RiskLevel


class ClassificationFeaturesDTO(BaseModel):
    """The eight features the risk classifier consumes; all are required."""

    current_stock: float = Field(ge=0)
    avg_daily_consumption: float = Field(ge=0)
    days_until_stockout: float = Field(ge=0)
    expiry_risk: float = Field(ge=0, le=100, description="Expiring share in percent")
    capacity_utilization: float = Field(ge=0, description="Cold-chain usage in percent")
    temperature_deviation: float = Field(
        description="Degrees above (positive) or below the safe limit"
    )
    data_quality: float = Field(ge=0, le=1)
    seasonality_factor: float = Field(gt=0)

    def to_entity(self) -> ClassificationFeatures:
        return ClassificationFeatures(**self.model_dump())

    @classmethod
    def from_entity(cls, features: ClassificationFeatures) -> "ClassificationFeaturesDTO":
        return cls(
            current_stock=features.current_stock,
            avg_daily_consumption=features.avg_daily_consumption,
            days_until_stockout=features.days_until_stockout,
            expiry_risk=features.expiry_risk,
            capacity_utilization=features.capacity_utilization,
            temperature_deviation=features.temperature_deviation,
            data_quality=features.data_quality,
            seasonality_factor=features.seasonality_factor,
        )


class ClassificationResultDTO(BaseModel):
    risk_level: RiskLevel
    confidence: int = Field(ge=0, le=100)
    probabilities: Dict[RiskLevel, float]
    method: ModelKind
