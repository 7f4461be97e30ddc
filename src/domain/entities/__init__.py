"""
Domain Entities Package

This package contains the core domain entities of the risk prediction engine.
"""

from .anomaly import AnomalyRecord
from .classification import FEATURE_NAMES, ClassificationFeatures, ClassificationResult
from .errors import (
    DomainError,
    InsufficientDataError,
    InventoryItemNotFoundError,
    ModelConfigurationError,
    ModelNotFoundError,
    ModelNotTrainedError,
)
from .insight import InsightRecord, InsightSnapshot
from .inventory import (
    ColdChainSnapshot,
    ExpirySnapshot,
    Facility,
    ProductStock,
    StockSnapshot,
)
from .model import ModelKind, RegisteredModel, scoped_model_name
from .risk import AggregatedPrediction, PredictionResult, PredictionType, RiskLevel
from .time_series import HistoricalDataPoint, TimeSeriesPoint

__all__ = [
    "AggregatedPrediction",
    "AnomalyRecord",
    "ClassificationFeatures",
    "ClassificationResult",
    "ColdChainSnapshot",
    "DomainError",
    "ExpirySnapshot",
    "FEATURE_NAMES",
    "Facility",
    "HistoricalDataPoint",
    "InsightRecord",
    "InsightSnapshot",
    "InsufficientDataError",
    "InventoryItemNotFoundError",
    "ModelConfigurationError",
    "ModelKind",
    "ModelNotFoundError",
    "ModelNotTrainedError",
    "PredictionResult",
    "PredictionType",
    "ProductStock",
    "RegisteredModel",
    "RiskLevel",
    "StockSnapshot",
    "TimeSeriesPoint",
    "scoped_model_name",
]
