"""
Repositories Package - Infrastructure Layer

This package contains concrete implementations of the repository
interfaces defined in the domain layer. Both implementations keep
their state in process memory.
"""

from .insight_cache import InMemoryInsightCache
from .model_registry import InMemoryModelRegistry

__all__ = ["InMemoryInsightCache", "InMemoryModelRegistry"]
