"""
Application DTOs - Training

This module contains Data Transfer Objects (DTOs) for model training,
registry status and model introspection. Range checks mirror the
constructor validation of each model.
"""

from datetime import datetime
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field

from src.domain.entities.model import ModelKind


class ETSConfigDTO(BaseModel):
    """Holt-Winters smoothing parameters."""

    alpha: float = Field(default=0.3, gt=0, le=1, description="Level smoothing")
    beta: float = Field(default=0.1, gt=0, le=1, description="Trend smoothing")
    gamma: float = Field(default=0.2, gt=0, le=1, description="Seasonal smoothing")
    period: int = Field(default=7, ge=1, le=366, description="Season length in days")


class IsolationForestConfigDTO(BaseModel):
    num_trees: int = Field(default=100, ge=1, le=1000)
    sub_sampling_size: int = Field(default=256, ge=2)
    max_depth: int = Field(default=8, ge=1, le=64)
    seed: Optional[int] = Field(
        default=None, description="Random seed; the configured default when omitted"
    )


class RandomForestConfigDTO(BaseModel):
    num_trees: int = Field(default=50, ge=1, le=1000)
    max_depth: int = Field(default=10, ge=1, le=64)
    min_samples_split: int = Field(default=2, ge=2)
    max_features: Optional[int] = Field(
        default=None,
        ge=1,
        le=8,
        description="Features tried per split; floor(sqrt(8)) when omitted",
    )
    seed: Optional[int] = None


class TrainingResultDTO(BaseModel):
    """Outcome of one training run."""

    model_name: str
    version: str
    kind: ModelKind
    metrics: Dict[str, Union[int, float, str]] = Field(default_factory=dict)
    trained_at: datetime


class ModelStatusDTO(BaseModel):
    """Which predictors are trained and which phase the engine runs in."""

    phase: int = Field(ge=1, le=2, description="1 = rule-based only, 2 = ML models")
    models: Dict[ModelKind, bool]
    registered_models: int = Field(ge=0)
    last_trained_at: Optional[datetime] = None


class FeatureImportancesDTO(BaseModel):
    importances: Dict[str, float]
    method: ModelKind
