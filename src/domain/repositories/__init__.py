"""
Repositories Package

This package contains interfaces defining repository contracts
for model and insight storage. Specific implementations are provided
by the infrastructure layer.
"""

from .insight_cache import IInsightCache
from .model_registry import IModelRegistry

__all__ = ["IInsightCache", "IModelRegistry"]
