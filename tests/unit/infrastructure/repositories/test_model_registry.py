from __future__ import annotations

import pytest

from src.domain.entities.errors import ModelConfigurationError, ModelNotFoundError
from src.domain.entities.model import ModelKind
from src.infrastructure.repositories.model_registry import InMemoryModelRegistry


def test_register_assigns_sequential_versions(model_registry: InMemoryModelRegistry) -> None:
    first = model_registry.register("ets", "model-a", ModelKind.ETS, {"mae": 2.0})
    second = model_registry.register("ets", "model-b", ModelKind.ETS, {"mae": 1.5})

    assert (first.version, second.version) == ("v1", "v2")
    assert model_registry.get("ets").model == "model-b"
    assert model_registry.get("ets", "v1").model == "model-a"
    assert [entry.version for entry in model_registry.list_versions("ets")] == [
        "v1",
        "v2",
    ]


def test_register_with_explicit_version(model_registry: InMemoryModelRegistry) -> None:
    entry = model_registry.register(
        "random-forest", object(), ModelKind.RISK_FOREST, version="2024-03"
    )

    assert entry.version == "2024-03"
    assert model_registry.is_registered("random-forest") is True


def test_get_unknown_model_raises(model_registry: InMemoryModelRegistry) -> None:
    with pytest.raises(ModelNotFoundError):
        model_registry.get("missing")

    model_registry.register("ets", object(), ModelKind.ETS)
    with pytest.raises(ModelNotFoundError):
        model_registry.get("ets", "v9")


def test_find_returns_none_for_unknown(model_registry: InMemoryModelRegistry) -> None:
    assert model_registry.find("ets") is None
    assert model_registry.is_registered("ets") is False


def test_set_current_version(model_registry: InMemoryModelRegistry) -> None:
    model_registry.register("ets", "old", ModelKind.ETS)
    model_registry.register("ets", "new", ModelKind.ETS)

    model_registry.set_current_version("ets", "v1")

    assert model_registry.get("ets").model == "old"
    with pytest.raises(ModelNotFoundError):
        model_registry.set_current_version("ets", "v3")


def test_compare_versions_prefers_lower_metric(
    model_registry: InMemoryModelRegistry,
) -> None:
    model_registry.register("ets", object(), ModelKind.ETS, {"rmse": 4.0})
    model_registry.register("ets", object(), ModelKind.ETS, {"rmse": 3.0})

    comparison = model_registry.compare_versions("ets", "v1", "v2", "rmse")

    assert comparison == {
        "metric": "rmse",
        "v1": 4.0,
        "v2": 3.0,
        "difference": -1.0,
        "better": "v2",
    }


def test_compare_versions_requires_metric(model_registry: InMemoryModelRegistry) -> None:
    model_registry.register("ets", object(), ModelKind.ETS, {"rmse": 4.0})
    model_registry.register("ets", object(), ModelKind.ETS)

    with pytest.raises(ModelConfigurationError) as exc_info:
        model_registry.compare_versions("ets", "v1", "v2", "rmse")

    assert exc_info.value.details["versions"] == ["v2"]


def test_list_models_filters_by_kind(model_registry: InMemoryModelRegistry) -> None:
    model_registry.register("ets/F1/BCG", object(), ModelKind.ETS)
    model_registry.register("ets/F1/BCG", object(), ModelKind.ETS)
    model_registry.register("isolation-forest", object(), ModelKind.ANOMALY_FOREST)

    assert len(model_registry.list_models()) == 2
    ets_models = model_registry.list_models(ModelKind.ETS)
    assert [(entry.name, entry.version) for entry in ets_models] == [
        ("ets/F1/BCG", "v2")
    ]
