"""
Gateways Package - Infrastructure Layer

This package contains concrete implementations of the gateway
interfaces defined in the domain layer.
"""

from .inventory_gateway import InMemoryInventoryGateway

__all__ = ["InMemoryInventoryGateway"]
