"""
DTOs Package - Application Layer

This package contains Data Transfer Objects (DTOs) used for data exchange
between the application layer and its callers.
"""

from .classification_dto import ClassificationFeaturesDTO, ClassificationResultDTO
from .forecast_dto import (
    AnomalyDetectionResultDTO,
    AnomalyRecordDTO,
    ConsumptionForecastDTO,
    PredictionIntervalDTO,
)
from .insight_dto import (
    AggregatedPredictionsDTO,
    InsightDTO,
    InsightQueryDTO,
    InsightsResponseDTO,
    PredictionResultDTO,
)
from .training_dto import (
    ETSConfigDTO,
    FeatureImportancesDTO,
    IsolationForestConfigDTO,
    ModelStatusDTO,
    RandomForestConfigDTO,
    TrainingResultDTO,
)

__all__ = [
    "AggregatedPredictionsDTO",
    "AnomalyDetectionResultDTO",
    "AnomalyRecordDTO",
    "ClassificationFeaturesDTO",
    "ClassificationResultDTO",
    "ConsumptionForecastDTO",
    "ETSConfigDTO",
    "FeatureImportancesDTO",
    "InsightDTO",
    "InsightQueryDTO",
    "InsightsResponseDTO",
    "IsolationForestConfigDTO",
    "ModelStatusDTO",
    "PredictionIntervalDTO",
    "PredictionResultDTO",
    "RandomForestConfigDTO",
    "TrainingResultDTO",
]
