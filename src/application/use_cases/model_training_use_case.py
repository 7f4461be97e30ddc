"""
Application Use Case - Model Training

Fits the Holt-Winters forecaster, the isolation forest and the random
forest on caller-supplied data and registers every fitted instance. A
retrain always builds a fresh instance; readers holding the previous one
are unaffected.
"""

from __future__ import annotations

from typing import Hashable, Optional, Sequence, Tuple, Union

import structlog

from src.application.dtos.training_dto import (
    ETSConfigDTO,
    IsolationForestConfigDTO,
    RandomForestConfigDTO,
    TrainingResultDTO,
)
from src.domain.entities.anomaly import AnomalyRecord
from src.domain.entities.classification import ClassificationFeatures
from src.domain.entities.errors import ModelConfigurationError
from src.domain.entities.model import ModelKind, RegisteredModel, scoped_model_name
from src.domain.entities.risk import RiskLevel
from src.domain.entities.time_series import TimeSeriesPoint
from src.domain.repositories.model_registry import IModelRegistry
from src.domain.services.holt_winters import HoltWintersForecaster
from src.domain.services.isolation_forest import IsolationForest
from src.domain.services.random_forest import RandomForestClassifier

logger = structlog.get_logger(__name__)

Scope = Tuple[str, str]


def _is_risk_level(label: Hashable) -> bool:
    try:
        RiskLevel(label)
    except ValueError:
        return False
    return True


class ModelTrainingUseCase:
    """Use case for training and registering the statistical models."""

    def __init__(
        self,
        model_registry: IModelRegistry,
        random_seed: Optional[int] = None,
        ets_defaults: Optional[ETSConfigDTO] = None,
        isolation_forest_defaults: Optional[IsolationForestConfigDTO] = None,
        random_forest_defaults: Optional[RandomForestConfigDTO] = None,
    ):
        self.model_registry = model_registry
        self.random_seed = random_seed
        self.ets_defaults = ets_defaults or ETSConfigDTO()
        self.isolation_forest_defaults = (
            isolation_forest_defaults or IsolationForestConfigDTO()
        )
        self.random_forest_defaults = random_forest_defaults or RandomForestConfigDTO()

    @staticmethod
    def _to_result(entry: RegisteredModel) -> TrainingResultDTO:
        return TrainingResultDTO(
            model_name=entry.name,
            version=entry.version,
            kind=entry.kind,
            metrics=dict(entry.metrics),
            trained_at=entry.registered_at,
        )

    def _seed(self, seed: Optional[int]) -> Optional[int]:
        return self.random_seed if seed is None else seed

    def train_ets_model(
        self,
        series: Sequence[Union[TimeSeriesPoint, float]],
        config: Optional[ETSConfigDTO] = None,
        scope: Optional[Scope] = None,
    ) -> TrainingResultDTO:
        """
        Fit a Holt-Winters forecaster.

        Args:
            series: Daily observations in chronological order
            config: Smoothing parameters; configured defaults when omitted
            scope: ``(facility_id, product_id)`` to register a per-pair model

        Raises:
            InsufficientDataError: When the series is shorter than two seasons
            ModelConfigurationError: When the parameters are out of range
        """
        config = config or self.ets_defaults
        name = scoped_model_name(ModelKind.ETS, *(scope or ()))
        logger.info(
            "training.ets.start", model_name=name, observations=len(series)
        )

        forecaster = HoltWintersForecaster(
            alpha=config.alpha,
            beta=config.beta,
            gamma=config.gamma,
            period=config.period,
        ).fit(series)
        entry = self.model_registry.register(
            name,
            forecaster,
            ModelKind.ETS,
            metrics={
                **forecaster.metrics,
                "alpha": config.alpha,
                "beta": config.beta,
                "gamma": config.gamma,
                "period": config.period,
            },
        )

        logger.info(
            "training.ets.completed",
            model_name=name,
            version=entry.version,
            mae=forecaster.metrics["mae"],
            rmse=forecaster.metrics["rmse"],
        )
        return self._to_result(entry)

    def train_isolation_forest(
        self,
        records: Sequence[AnomalyRecord],
        config: Optional[IsolationForestConfigDTO] = None,
    ) -> TrainingResultDTO:
        config = config or self.isolation_forest_defaults
        name = scoped_model_name(ModelKind.ANOMALY_FOREST)
        logger.info("training.isolation_forest.start", records=len(records))

        forest = IsolationForest(
            num_trees=config.num_trees,
            sub_sampling_size=config.sub_sampling_size,
            max_depth=config.max_depth,
            rng=self._seed(config.seed),
        ).fit(records)
        entry = self.model_registry.register(
            name,
            forest,
            ModelKind.ANOMALY_FOREST,
            metrics={
                "records": len(records),
                "sample_size": forest.sample_size,
                "num_trees": config.num_trees,
            },
        )

        logger.info(
            "training.isolation_forest.completed",
            version=entry.version,
            sample_size=forest.sample_size,
        )
        return self._to_result(entry)

    def train_random_forest(
        self,
        features: Sequence[ClassificationFeatures],
        labels: Sequence[Hashable],
        config: Optional[RandomForestConfigDTO] = None,
    ) -> TrainingResultDTO:
        """
        Fit the risk classifier on labelled feature records.

        Raises:
            ModelConfigurationError: When features and labels differ in length
                or a label is not a risk tier
            InsufficientDataError: When no training records are given
        """
        config = config or self.random_forest_defaults
        name = scoped_model_name(ModelKind.RISK_FOREST)
        logger.info("training.random_forest.start", records=len(features))

        invalid = sorted({str(label) for label in labels if not _is_risk_level(label)})
        if invalid:
            logger.error("training.random_forest.invalid_labels", labels=invalid)
            raise ModelConfigurationError(
                "Risk forest labels must be risk tiers",
                {"invalid_labels": invalid, "allowed": [level.value for level in RiskLevel]},
            )
        labels = [RiskLevel(label) for label in labels]

        forest = RandomForestClassifier(
            num_trees=config.num_trees,
            max_depth=config.max_depth,
            min_samples_split=config.min_samples_split,
            max_features=config.max_features,
            rng=self._seed(config.seed),
        ).fit(features, labels)
        entry = self.model_registry.register(
            name,
            forest,
            ModelKind.RISK_FOREST,
            metrics={
                "records": len(features),
                "classes": len(forest.classes),
                "num_trees": config.num_trees,
            },
        )

        logger.info(
            "training.random_forest.completed",
            version=entry.version,
            classes=[getattr(label, "value", label) for label in forest.classes],
        )
        return self._to_result(entry)
