"""
Dependency container injection module - Main Layer

This module implements the dependency injection container
to simplify the management and lifecycle of dependencies
in the application.
"""

from typing import Optional

from dependency_injector import containers, providers

from src.application.dtos.training_dto import (
    ETSConfigDTO,
    IsolationForestConfigDTO,
    RandomForestConfigDTO,
)
from src.application.use_cases.data_preprocessing_use_case import (
    DataPreprocessingUseCase,
)
from src.application.use_cases.insight_use_cases import (
    GetAggregatedPredictionsUseCase,
    GetInsightsUseCase,
    InsightOrchestrator,
)
from src.application.use_cases.model_training_use_case import ModelTrainingUseCase
from src.application.use_cases.model_use_cases import (
    ClassifyRiskUseCase,
    DetectAnomaliesUseCase,
    ForecastConsumptionUseCase,
    GetFeatureImportancesUseCase,
    GetModelStatusUseCase,
)
from src.infrastructure.gateways.inventory_gateway import InMemoryInventoryGateway
from src.infrastructure.repositories.insight_cache import InMemoryInsightCache
from src.infrastructure.repositories.model_registry import InMemoryModelRegistry
from src.shared import get_logger

from .config import AppSettings

logger = get_logger(__name__)


def build_inventory_gateway(
    snapshot_path: Optional[str], default_max_safe_temperature: float
) -> InMemoryInventoryGateway:
    """Load the configured snapshot, or start with an empty feed."""
    if not snapshot_path:
        logger.info("container.inventory.empty")
        return InMemoryInventoryGateway()
    return InMemoryInventoryGateway.from_json_file(
        snapshot_path, default_max_safe_temperature=default_max_safe_temperature
    )


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependency-injector."""

    # Settings
    config = providers.Configuration()

    # Infrastructure
    model_registry = providers.Singleton(InMemoryModelRegistry)

    insight_cache = providers.Singleton(
        InMemoryInsightCache,
        ttl_seconds=config.insights.cache_ttl_seconds,
    )

    inventory_gateway = providers.Singleton(
        build_inventory_gateway,
        snapshot_path=config.data.snapshot_path,
        default_max_safe_temperature=config.insights.default_max_safe_temperature,
    )

    # Use cases
    data_preprocessing_use_case = providers.Factory(DataPreprocessingUseCase)

    classify_risk_use_case = providers.Factory(
        ClassifyRiskUseCase,
        model_registry=model_registry,
    )

    insight_orchestrator = providers.Singleton(
        InsightOrchestrator,
        inventory_gateway=inventory_gateway,
        insight_cache=insight_cache,
        model_registry=model_registry,
        preprocessing=data_preprocessing_use_case,
        classify_risk=classify_risk_use_case,
        cache_ttl_seconds=config.insights.cache_ttl_seconds,
        forecast_horizon_days=config.insights.forecast_horizon_days,
        cold_chain_horizon_days=config.insights.cold_chain_horizon_days,
    )

    get_insights_use_case = providers.Factory(
        GetInsightsUseCase,
        orchestrator=insight_orchestrator,
    )

    get_aggregated_predictions_use_case = providers.Factory(
        GetAggregatedPredictionsUseCase,
        inventory_gateway=inventory_gateway,
        cold_chain_horizon_days=config.insights.cold_chain_horizon_days,
    )

    model_training_use_case = providers.Factory(
        ModelTrainingUseCase,
        model_registry=model_registry,
        random_seed=config.models.random_seed,
        ets_defaults=providers.Factory(
            ETSConfigDTO,
            alpha=config.models.ets_alpha,
            beta=config.models.ets_beta,
            gamma=config.models.ets_gamma,
            period=config.models.ets_period,
        ),
        isolation_forest_defaults=providers.Factory(
            IsolationForestConfigDTO,
            num_trees=config.models.isolation_forest_trees,
            sub_sampling_size=config.models.isolation_forest_sample_size,
            max_depth=config.models.isolation_forest_max_depth,
        ),
        random_forest_defaults=providers.Factory(
            RandomForestConfigDTO,
            num_trees=config.models.random_forest_trees,
            max_depth=config.models.random_forest_max_depth,
            min_samples_split=config.models.random_forest_min_samples_split,
        ),
    )

    forecast_consumption_use_case = providers.Factory(
        ForecastConsumptionUseCase,
        model_registry=model_registry,
    )

    detect_anomalies_use_case = providers.Factory(
        DetectAnomaliesUseCase,
        model_registry=model_registry,
    )

    get_feature_importances_use_case = providers.Factory(
        GetFeatureImportancesUseCase,
        model_registry=model_registry,
    )

    get_model_status_use_case = providers.Factory(
        GetModelStatusUseCase,
        model_registry=model_registry,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: Optional[AppContainer] = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container
