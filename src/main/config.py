"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
This module handles configuration settings provided using
environment variables, .env files and default values.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared import DEFAULT_CACHE_TTL_SECONDS, EnumEnvironment, EnumLogLevel


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class InsightSettings(BaseSettings):
    """Insight generation and caching settings."""

    cache_ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        gt=0,
        description="Lifetime of a generated insight snapshot",
    )
    cold_chain_horizon_days: int = Field(
        default=30, ge=1, description="Projection window of cold-chain insights"
    )
    forecast_horizon_days: int = Field(
        default=90,
        ge=1,
        description="Days searched for a forecast-based stockout date",
    )
    default_max_safe_temperature: float = Field(
        default=8.0,
        description="Safe storage limit (°C) for facilities that do not report one",
    )

    model_config = SettingsConfigDict(
        env_prefix="INSIGHTS_", case_sensitive=False, extra="ignore"
    )


class ModelSettings(BaseSettings):
    """Default hyperparameters of the statistical models."""

    random_seed: Optional[int] = Field(
        default=None, description="Seed for the forests (None = non-deterministic)"
    )
    ets_alpha: float = Field(default=0.3, gt=0, le=1)
    ets_beta: float = Field(default=0.1, gt=0, le=1)
    ets_gamma: float = Field(default=0.2, gt=0, le=1)
    ets_period: int = Field(default=7, ge=1)
    isolation_forest_trees: int = Field(default=100, ge=1)
    isolation_forest_sample_size: int = Field(default=256, ge=2)
    isolation_forest_max_depth: int = Field(default=8, ge=1)
    random_forest_trees: int = Field(default=50, ge=1)
    random_forest_max_depth: int = Field(default=10, ge=1)
    random_forest_min_samples_split: int = Field(default=2, ge=2)

    model_config = SettingsConfigDict(
        env_prefix="MODELS_", case_sensitive=False, extra="ignore"
    )


class DataSettings(BaseSettings):
    """Inventory data source settings."""

    snapshot_path: Optional[str] = Field(
        default=None,
        description="JSON inventory snapshot loaded at start-up (None = empty feed)",
    )

    model_config = SettingsConfigDict(
        env_prefix="DATA_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    insights: InsightSettings = Field(default_factory=InsightSettings)
    models: ModelSettings = Field(default_factory=ModelSettings)
    data: DataSettings = Field(default_factory=DataSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Used to be mocked in tests, allowing different settings based on environment.
    """
    return AppSettings()
