"""
Application DTOs - Forecasting and anomaly detection
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from src.domain.entities.model import ModelKind


class PredictionIntervalDTO(BaseModel):
    lower: float = Field(ge=0)
    upper: float


class ConsumptionForecastDTO(BaseModel):
    """Daily consumption forecast with its confidence bands."""

    forecast: List[float]
    prediction_intervals: List[PredictionIntervalDTO]
    confidence: int
    method: ModelKind = Field(description="'ets' or 'rule-based'")


class AnomalyRecordDTO(BaseModel):
    value: float
    timestamp: datetime
    context: Optional[Dict[str, Union[int, float, str]]] = None


class AnomalyDetectionResultDTO(BaseModel):
    """Anomalous records, the score of every input record and the method used."""

    anomalies: List[AnomalyRecordDTO]
    scores: List[float]
    threshold: float
    anomaly_count: int
    method: str = Field(description="'isolation-forest' or 'z-score'")
