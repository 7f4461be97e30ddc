from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.main.config import AppSettings, get_settings
from src.shared.consts import EnumEnvironment


def test_get_settings_loads_defaults(monkeypatch) -> None:
    monkeypatch.delenv("INSIGHTS_CACHE_TTL_SECONDS", raising=False)
    monkeypatch.delenv("DATA_SNAPSHOT_PATH", raising=False)

    settings = get_settings()

    assert settings.environment == EnumEnvironment.DEVELOPMENT
    assert settings.insights.cache_ttl_seconds == 300
    assert settings.insights.cold_chain_horizon_days == 30
    assert settings.models.ets_period == 7
    assert settings.data.snapshot_path is None


def test_settings_respect_environment_variables(monkeypatch) -> None:
    monkeypatch.setenv("INSIGHTS_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("INSIGHTS_COLD_CHAIN_HORIZON_DAYS", "45")
    monkeypatch.setenv("MODELS_RANDOM_SEED", "42")
    monkeypatch.setenv("DATA_SNAPSHOT_PATH", "/data/inventory.json")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = AppSettings()

    assert settings.insights.cache_ttl_seconds == 60
    assert settings.insights.cold_chain_horizon_days == 45
    assert settings.models.random_seed == 42
    assert settings.data.snapshot_path == "/data/inventory.json"
    assert settings.logging.level.value == "DEBUG"


def test_settings_reject_invalid_values(monkeypatch) -> None:
    monkeypatch.setenv("MODELS_ETS_ALPHA", "1.5")

    with pytest.raises(ValidationError):
        AppSettings()
