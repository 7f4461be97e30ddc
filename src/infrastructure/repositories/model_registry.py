"""
In-Memory Model Registry - Infrastructure Layer

This module implements the IModelRegistry interface with process-local
dictionaries. Fitted models are not persisted across restarts.
"""

import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from src.domain.entities.errors import ModelConfigurationError, ModelNotFoundError
from src.domain.entities.model import ModelKind, RegisteredModel
from src.domain.repositories.model_registry import IModelRegistry, MetricMap
from src.shared import get_logger

logger = get_logger(__name__)


class InMemoryModelRegistry(IModelRegistry):
    """Thread-safe registry keyed by name, then version."""

    def __init__(self) -> None:
        self._versions: Dict[str, "OrderedDict[str, RegisteredModel]"] = {}
        self._current: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register(
        self,
        name: str,
        model: Any,
        kind: ModelKind,
        metrics: Optional[MetricMap] = None,
        version: Optional[str] = None,
    ) -> RegisteredModel:
        with self._lock:
            versions = self._versions.setdefault(name, OrderedDict())
            label = version or f"v{len(versions) + 1}"
            entry = RegisteredModel(
                name=name,
                version=label,
                kind=kind,
                model=model,
                metrics=dict(metrics or {}),
            )
            versions[label] = entry
            self._current[name] = label

        logger.info(
            "registry.model_registered", name=name, version=label, kind=kind.value
        )
        return entry

    def get(self, name: str, version: Optional[str] = None) -> RegisteredModel:
        with self._lock:
            versions = self._versions.get(name)
            if not versions:
                raise ModelNotFoundError(name)
            label = version or self._current[name]
            entry = versions.get(label)
        if entry is None:
            raise ModelNotFoundError(name, label)
        return entry

    def find(self, name: str) -> Optional[RegisteredModel]:
        try:
            return self.get(name)
        except ModelNotFoundError:
            return None

    def set_current_version(self, name: str, version: str) -> None:
        with self._lock:
            if version not in self._versions.get(name, {}):
                raise ModelNotFoundError(name, version)
            self._current[name] = version
        logger.info("registry.current_version_changed", name=name, version=version)

    def compare_versions(
        self, name: str, version_a: str, version_b: str, metric: str
    ) -> Dict[str, Any]:
        first = self.get(name, version_a)
        second = self.get(name, version_b)
        missing = [
            entry.version for entry in (first, second) if metric not in entry.metrics
        ]
        if missing:
            raise ModelConfigurationError(
                f"Metric '{metric}' not recorded for every version",
                {"name": name, "metric": metric, "versions": missing},
            )

        value_a = float(first.metrics[metric])
        value_b = float(second.metrics[metric])
        return {
            "metric": metric,
            version_a: value_a,
            version_b: value_b,
            "difference": value_b - value_a,
            "better": version_a if value_a <= value_b else version_b,
        }

    def list_versions(self, name: str) -> List[RegisteredModel]:
        with self._lock:
            return list(self._versions.get(name, {}).values())

    def list_models(self, kind: Optional[ModelKind] = None) -> List[RegisteredModel]:
        with self._lock:
            current = [
                self._versions[name][label] for name, label in self._current.items()
            ]
        if kind is None:
            return current
        return [entry for entry in current if entry.kind is kind]

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return bool(self._versions.get(name))
