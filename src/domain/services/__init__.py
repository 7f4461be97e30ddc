"""
Domain Services Package

Rule engine and the statistical models that can supersede it once enough
history is available.
"""

from . import rule_engine
from .holt_winters import HoltWintersForecaster, PredictionInterval
from .isolation_forest import IsolationForest, average_path_length
from .random_forest import (
    RandomForestClassifier,
    gini_impurity,
    rule_based_classification,
)

__all__ = [
    "rule_engine",
    "HoltWintersForecaster",
    "PredictionInterval",
    "IsolationForest",
    "average_path_length",
    "RandomForestClassifier",
    "gini_impurity",
    "rule_based_classification",
]
