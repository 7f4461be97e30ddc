"""
Use Cases Package - Application Layer

This package contains use cases that implement the business logic
of the application. Use cases orchestrate the flow of data between
the inventory feed, the rule engine and the registered models.
"""

from .data_preprocessing_use_case import DataPreprocessingUseCase
from .insight_use_cases import (
    GetAggregatedPredictionsUseCase,
    GetInsightsUseCase,
    InsightOrchestrator,
)
from .model_training_use_case import ModelTrainingUseCase
from .model_use_cases import (
    ClassifyRiskUseCase,
    DetectAnomaliesUseCase,
    ForecastConsumptionUseCase,
    GetFeatureImportancesUseCase,
    GetModelStatusUseCase,
)

__all__ = [
    "ClassifyRiskUseCase",
    "DataPreprocessingUseCase",
    "DetectAnomaliesUseCase",
    "ForecastConsumptionUseCase",
    "GetAggregatedPredictionsUseCase",
    "GetFeatureImportancesUseCase",
    "GetInsightsUseCase",
    "GetModelStatusUseCase",
    "InsightOrchestrator",
    "ModelTrainingUseCase",
]
