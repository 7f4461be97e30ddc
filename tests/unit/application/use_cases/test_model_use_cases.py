from __future__ import annotations

from datetime import date

import pytest

from src.application.dtos.classification_dto import ClassificationFeaturesDTO
from src.application.dtos.training_dto import RandomForestConfigDTO
from src.application.use_cases.model_training_use_case import ModelTrainingUseCase
from src.application.use_cases.model_use_cases import (
    ClassifyRiskUseCase,
    DetectAnomaliesUseCase,
    ForecastConsumptionUseCase,
    GetFeatureImportancesUseCase,
    GetModelStatusUseCase,
)
from src.domain.entities.errors import ModelConfigurationError
from src.domain.entities.model import ModelKind
from src.domain.entities.risk import RiskLevel
from src.domain.entities.time_series import TimeSeriesPoint


def _train_forest(registry, labelled_features) -> None:
    features, labels = labelled_features
    ModelTrainingUseCase(
        registry,
        random_seed=5,
        random_forest_defaults=RandomForestConfigDTO(num_trees=15, max_features=8),
    ).train_random_forest(features, labels)


def test_forecast_without_model_is_flat(model_registry) -> None:
    history = [
        TimeSeriesPoint(date=date(2024, 3, day), value=value)
        for day, value in ((1, 10.0), (2, 12.0))
    ]

    result = ForecastConsumptionUseCase(model_registry).execute(
        horizon=5, history=history
    )

    assert result.method is ModelKind.RULE_BASED
    assert result.confidence == 70
    assert result.forecast == [12.0] * 5
    assert result.prediction_intervals[0].lower == pytest.approx(9.6)
    assert result.prediction_intervals[0].upper == pytest.approx(14.4)


def test_forecast_without_model_or_history_is_zero(model_registry) -> None:
    result = ForecastConsumptionUseCase(model_registry).execute(horizon=3)

    assert result.forecast == [0.0, 0.0, 0.0]


def test_forecast_uses_registered_ets(model_registry) -> None:
    ModelTrainingUseCase(model_registry).train_ets_model([50.0] * 28)

    result = ForecastConsumptionUseCase(model_registry).execute(horizon=4)

    assert result.method is ModelKind.ETS
    assert result.confidence == 85
    assert result.forecast == pytest.approx([50.0] * 4)
    assert result.prediction_intervals[0].upper == pytest.approx(64.7)


def test_forecast_with_ml_disabled_reuses_last_value(model_registry) -> None:
    ModelTrainingUseCase(model_registry).train_ets_model([30.0] * 27 + [36.0])

    result = ForecastConsumptionUseCase(model_registry).execute(horizon=2, use_ml=False)

    assert result.method is ModelKind.RULE_BASED
    assert result.forecast == [36.0, 36.0]


def test_forecast_scoped_model(model_registry) -> None:
    ModelTrainingUseCase(model_registry).train_ets_model([20.0] * 14, scope=("F1", "BCG"))
    use_case = ForecastConsumptionUseCase(model_registry)

    assert use_case.execute(horizon=1, scope=("F1", "BCG")).method is ModelKind.ETS
    assert use_case.execute(horizon=1).method is ModelKind.RULE_BASED


def test_forecast_rejects_empty_horizon(model_registry) -> None:
    with pytest.raises(ModelConfigurationError):
        ForecastConsumptionUseCase(model_registry).execute(horizon=0)


def test_anomalies_fall_back_to_z_score(model_registry, make_anomaly_records) -> None:
    records = make_anomaly_records([10.0] * 20 + [100.0])

    result = DetectAnomaliesUseCase(model_registry).execute(records)

    assert result.method == "z-score"
    assert result.anomaly_count == 1
    assert result.anomalies[0].value == 100.0
    assert result.scores[-1] == 1.0
    assert len(result.scores) == 21


def test_z_score_on_constant_series_flags_nothing(
    model_registry, make_anomaly_records
) -> None:
    result = DetectAnomaliesUseCase(model_registry).execute(
        make_anomaly_records([5.0] * 10)
    )

    assert result.anomaly_count == 0
    assert result.scores == [0.0] * 10


def test_anomalies_use_registered_forest(model_registry, make_anomaly_records) -> None:
    records = make_anomaly_records([10.0] * 60 + [10.5] * 60 + [250.0])
    ModelTrainingUseCase(model_registry, random_seed=3).train_isolation_forest(records)

    result = DetectAnomaliesUseCase(model_registry).execute(records, threshold=0.6)

    assert result.method == "isolation-forest"
    assert [record.value for record in result.anomalies] == [250.0]
    assert result.threshold == 0.6


def test_classify_without_forest_uses_rules(model_registry) -> None:
    features = ClassificationFeaturesDTO(
        current_stock=30,
        avg_daily_consumption=10,
        days_until_stockout=3,
        expiry_risk=25,
        capacity_utilization=95,
        temperature_deviation=0,
        data_quality=0.9,
        seasonality_factor=1.0,
    )

    result = ClassifyRiskUseCase(model_registry).execute(features)

    assert result.method is ModelKind.RULE_BASED
    assert result.risk_level is RiskLevel.CRITICAL
    assert result.confidence == 100


def test_classify_with_forest(model_registry, labelled_features) -> None:
    _train_forest(model_registry, labelled_features)
    features, _ = labelled_features

    result = ClassifyRiskUseCase(model_registry).execute(features[0])

    assert result.method is ModelKind.RISK_FOREST
    assert result.risk_level is RiskLevel.CRITICAL
    assert set(result.probabilities) == set(RiskLevel)
    assert result.probabilities[RiskLevel.HIGH] == 0.0
    assert sum(result.probabilities.values()) == pytest.approx(1.0)
    margin = result.probabilities[RiskLevel.CRITICAL] - result.probabilities[RiskLevel.LOW]
    assert result.confidence == round(margin * 100)


def test_feature_importances(model_registry, labelled_features) -> None:
    use_case = GetFeatureImportancesUseCase(model_registry)
    assert use_case.execute() is None

    _train_forest(model_registry, labelled_features)
    result = use_case.execute()

    assert result.method is ModelKind.RISK_FOREST
    assert result.importances["days_until_stockout"] == pytest.approx(1.0)


def test_model_status_phases(model_registry) -> None:
    use_case = GetModelStatusUseCase(model_registry)

    initial = use_case.execute()
    assert initial.phase == 1
    assert initial.registered_models == 0
    assert initial.last_trained_at is None
    assert set(initial.models.values()) == {False}

    ModelTrainingUseCase(model_registry).train_ets_model([10.0] * 14)
    trained = use_case.execute()

    assert trained.phase == 2
    assert trained.models[ModelKind.ETS] is True
    assert trained.models[ModelKind.RISK_FOREST] is False
    assert trained.last_trained_at is not None
