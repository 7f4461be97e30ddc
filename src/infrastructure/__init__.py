"""
Infrastructure Layer Package

This package contains implementations of interfaces defined in the
domain layer: the model registry, the insight cache and the inventory
feed.
"""

from src.infrastructure import gateways, repositories

__all__ = ["gateways", "repositories"]
