"""
Application Use Cases - Model inference

Forecasting, anomaly detection and risk classification. Each use case
serves the registered model when one exists and otherwise falls back to
its rule-based counterpart, so callers never see ``ModelNotTrainedError``.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import structlog

from src.application.dtos.classification_dto import (
    ClassificationFeaturesDTO,
    ClassificationResultDTO,
)
from src.application.dtos.forecast_dto import (
    AnomalyDetectionResultDTO,
    AnomalyRecordDTO,
    ConsumptionForecastDTO,
    PredictionIntervalDTO,
)
from src.application.dtos.training_dto import FeatureImportancesDTO, ModelStatusDTO
from src.domain.entities.anomaly import AnomalyRecord
from src.domain.entities.classification import ClassificationFeatures
from src.domain.entities.errors import ModelConfigurationError
from src.domain.entities.model import ModelKind, scoped_model_name
from src.domain.entities.risk import RiskLevel
from src.domain.entities.time_series import TimeSeriesPoint
from src.domain.repositories.model_registry import IModelRegistry
from src.domain.services.holt_winters import HoltWintersForecaster
from src.domain.services.random_forest import rule_based_classification

logger = structlog.get_logger(__name__)

ETS_CONFIDENCE = 85
RULE_BASED_CONFIDENCE = 70
FLAT_FORECAST_BAND = 0.2
Z_SCORE_ANOMALY = 2.0
Z_SCORE_SCALE = 3.0
Z_SCORE_METHOD = "z-score"

FeaturesInput = Union[ClassificationFeatures, ClassificationFeaturesDTO]


def _anomaly_dto(record: AnomalyRecord) -> AnomalyRecordDTO:
    return AnomalyRecordDTO(
        value=record.value,
        timestamp=record.timestamp,
        context=dict(record.context) if record.context else None,
    )


class ForecastConsumptionUseCase:
    """Daily consumption forecast from the registered Holt-Winters model."""

    def __init__(self, model_registry: IModelRegistry):
        self.model_registry = model_registry

    def execute(
        self,
        horizon: int = 30,
        use_ml: bool = True,
        history: Optional[Sequence[Union[TimeSeriesPoint, float]]] = None,
        scope: Optional[Tuple[str, str]] = None,
    ) -> ConsumptionForecastDTO:
        """
        Forecast ``horizon`` days of consumption.

        Args:
            horizon: Number of days to forecast (at least 1)
            use_ml: Use the registered forecaster when one exists
            history: Recent observations; the last one seeds the flat
                rule-based forecast
            scope: ``(facility_id, product_id)`` of a per-pair forecaster

        Raises:
            ModelConfigurationError: When the horizon is below 1
        """
        if horizon < 1:
            raise ModelConfigurationError(
                "Forecast horizon must be at least 1", {"horizon": horizon}
            )

        entry = self.model_registry.find(
            scoped_model_name(ModelKind.ETS, *(scope or ()))
        )

        if use_ml and entry is not None:
            forecaster: HoltWintersForecaster = entry.model
            forecasts = forecaster.forecast(horizon)
            intervals = [
                PredictionIntervalDTO(lower=band.lower, upper=band.upper)
                for band in forecaster.prediction_intervals(forecasts)
            ]
            logger.info(
                "forecast.ets", model_name=entry.name, version=entry.version, horizon=horizon
            )
            return ConsumptionForecastDTO(
                forecast=forecasts,
                prediction_intervals=intervals,
                confidence=ETS_CONFIDENCE,
                method=ModelKind.ETS,
            )

        if history:
            last = history[-1]
            last_value = float(last.value if isinstance(last, TimeSeriesPoint) else last)
        elif entry is not None:
            last_value = entry.model.last_value
        else:
            last_value = 0.0
        last_value = max(0.0, last_value)

        logger.info("forecast.rule_based", horizon=horizon, last_value=last_value)
        return ConsumptionForecastDTO(
            forecast=[last_value] * horizon,
            prediction_intervals=[
                PredictionIntervalDTO(
                    lower=last_value * (1 - FLAT_FORECAST_BAND),
                    upper=last_value * (1 + FLAT_FORECAST_BAND),
                )
            ]
            * horizon,
            confidence=RULE_BASED_CONFIDENCE,
            method=ModelKind.RULE_BASED,
        )


class DetectAnomaliesUseCase:
    """Score stock movements with the isolation forest or a z-score."""

    def __init__(self, model_registry: IModelRegistry):
        self.model_registry = model_registry

    def execute(
        self, records: Sequence[AnomalyRecord], threshold: float = 0.5
    ) -> AnomalyDetectionResultDTO:
        entry = self.model_registry.find(scoped_model_name(ModelKind.ANOMALY_FOREST))

        if entry is not None:
            scores = entry.model.score(records)
            flagged = [score > threshold for score in scores]
            method = ModelKind.ANOMALY_FOREST.value
        else:
            scores, flagged = self._z_scores(records)
            method = Z_SCORE_METHOD

        anomalies = [
            _anomaly_dto(record) for record, hit in zip(records, flagged) if hit
        ]
        logger.info(
            "anomalies.detected",
            method=method,
            records=len(records),
            anomaly_count=len(anomalies),
        )
        return AnomalyDetectionResultDTO(
            anomalies=anomalies,
            scores=scores,
            threshold=threshold,
            anomaly_count=len(anomalies),
            method=method,
        )

    @staticmethod
    def _z_scores(records: Sequence[AnomalyRecord]) -> Tuple[List[float], List[bool]]:
        if not records:
            return [], []

        values = np.array([record.value for record in records], dtype=float)
        std = float(values.std())
        if std == 0:
            return [0.0] * len(records), [False] * len(records)

        z = np.abs(values - values.mean()) / std
        scores = [float(min(1.0, value / Z_SCORE_SCALE)) for value in z]
        return scores, [bool(value > Z_SCORE_ANOMALY) for value in z]


class ClassifyRiskUseCase:
    """Risk tier from the registered random forest or the weighted rules."""

    def __init__(self, model_registry: IModelRegistry):
        self.model_registry = model_registry

    def execute(self, features: FeaturesInput) -> ClassificationResultDTO:
        if isinstance(features, ClassificationFeaturesDTO):
            features = features.to_entity()

        entry = self.model_registry.find(scoped_model_name(ModelKind.RISK_FOREST))
        if entry is None:
            result = rule_based_classification(features)
            return ClassificationResultDTO(
                risk_level=result.risk_level,
                confidence=result.confidence,
                probabilities=result.probabilities,
                method=ModelKind.RULE_BASED,
            )

        raw = entry.model.predict_proba(features)
        probabilities = {level: 0.0 for level in RiskLevel}
        for label, probability in raw.items():
            probabilities[RiskLevel(label)] = probability

        ranked = sorted(raw.values(), reverse=True)
        margin = ranked[0] - (ranked[1] if len(ranked) > 1 else 0.0)
        risk_level = RiskLevel(entry.model.predict(features))

        logger.info(
            "classification.random_forest",
            version=entry.version,
            risk_level=risk_level.value,
        )
        return ClassificationResultDTO(
            risk_level=risk_level,
            confidence=int(round(margin * 100)),
            probabilities=probabilities,
            method=ModelKind.RISK_FOREST,
        )


class GetFeatureImportancesUseCase:
    """Use case exposing the risk forest's split-count feature importances."""

    def __init__(self, model_registry: IModelRegistry):
        self.model_registry = model_registry

    def execute(self) -> Optional[FeatureImportancesDTO]:
        """Split-count importances of the current forest; None when untrained."""
        entry = self.model_registry.find(scoped_model_name(ModelKind.RISK_FOREST))
        if entry is None:
            return None
        return FeatureImportancesDTO(
            importances=entry.model.feature_importances(),
            method=ModelKind.RISK_FOREST,
        )


class GetModelStatusUseCase:
    """Report which model kinds are trained and the resulting phase."""

    TRACKED_KINDS = (ModelKind.ETS, ModelKind.ANOMALY_FOREST, ModelKind.RISK_FOREST)

    def __init__(self, model_registry: IModelRegistry):
        self.model_registry = model_registry

    def execute(self) -> ModelStatusDTO:
        registered = self.model_registry.list_models()
        trained = {
            kind: any(entry.kind is kind for entry in registered)
            for kind in self.TRACKED_KINDS
        }
        last_trained_at = max(
            (entry.registered_at for entry in registered), default=None
        )
        return ModelStatusDTO(
            phase=2 if any(trained.values()) else 1,
            models=trained,
            registered_models=len(registered),
            last_trained_at=last_trained_at,
        )
