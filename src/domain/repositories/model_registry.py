"""
Model Registry Interface

Contract for the store that owns fitted model instances. Use cases look
models up by name; a retrain registers a new version instead of mutating
the instance other readers hold.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from src.domain.entities.model import ModelKind, RegisteredModel

MetricMap = Dict[str, Union[int, float, str]]


class IModelRegistry(ABC):
    """Interface for model registry implementations."""

    @abstractmethod
    def register(
        self,
        name: str,
        model: Any,
        kind: ModelKind,
        metrics: Optional[MetricMap] = None,
        version: Optional[str] = None,
    ) -> RegisteredModel:
        """
        Store a fitted model and make it the current version of ``name``.

        Args:
            name: Registry name (see ``scoped_model_name``)
            model: The fitted model instance
            kind: Kind of model being registered
            metrics: Fit metrics recorded alongside the model
            version: Explicit version label; ``v1``, ``v2``... when omitted

        Returns:
            The registry entry that was stored
        """
        pass

    @abstractmethod
    def get(self, name: str, version: Optional[str] = None) -> RegisteredModel:
        """
        Fetch a registered model.

        Args:
            name: Registry name
            version: Specific version; the current one when omitted

        Raises:
            ModelNotFoundError: If the name or version is unknown
        """
        pass

    @abstractmethod
    def find(self, name: str) -> Optional[RegisteredModel]:
        """Return the current version of ``name`` or None."""
        pass

    @abstractmethod
    def set_current_version(self, name: str, version: str) -> None:
        """Point ``name`` at an already registered version."""
        pass

    @abstractmethod
    def compare_versions(
        self, name: str, version_a: str, version_b: str, metric: str
    ) -> Dict[str, Any]:
        """
        Compare one metric between two versions.

        Returns:
            Mapping with both values, their difference (b - a) and the
            version holding the lower value under ``better``
        """
        pass

    @abstractmethod
    def list_versions(self, name: str) -> List[RegisteredModel]:
        """All versions of ``name`` in registration order."""
        pass

    @abstractmethod
    def list_models(self, kind: Optional[ModelKind] = None) -> List[RegisteredModel]:
        """Current version of every registered name, optionally by kind."""
        pass

    @abstractmethod
    def is_registered(self, name: str) -> bool:
        pass
