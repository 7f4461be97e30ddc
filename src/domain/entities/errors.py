"""
Domain Errors

This module defines custom error classes for domain-specific exceptions.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InsufficientDataError(DomainError):
    """Raised when a model is fitted on fewer observations than it needs."""

    def __init__(
        self, required: int, received: int, details: Optional[Dict[str, Any]] = None
    ):
        message = f"Need at least {required} data points, received {received}"
        super().__init__(
            message, {"required": required, "received": received, **(details or {})}
        )


class ModelNotTrainedError(DomainError):
    """Raised when predict/forecast is called on a model that was never fitted."""

    def __init__(self, model_name: str, details: Optional[Dict[str, Any]] = None):
        message = f"Model '{model_name}' must be fitted before it can be used"
        super().__init__(message, details)


class ModelConfigurationError(DomainError):
    """Raised when model hyperparameters or training inputs are invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ModelNotFoundError(DomainError):
    """Raised when a model (or model version) is not present in the registry."""

    def __init__(
        self,
        name: str,
        version: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        label = f"{name}:{version}" if version else name
        super().__init__(f"Model {label} not found", details)


class InventoryItemNotFoundError(DomainError):
    """Raised when a facility/product pair is unknown to the inventory feed."""

    def __init__(
        self,
        facility_id: str,
        product_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        if product_id is None:
            message = f"Facility {facility_id} not found"
        else:
            message = f"Product {product_id} not found at facility {facility_id}"
        super().__init__(message, details)
