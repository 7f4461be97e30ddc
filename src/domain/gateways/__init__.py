"""
Gateways Package - Domain Layer

This package contains interfaces defining gateway contracts
for external data feeds. Specific implementations
are provided by the infrastructure layer.
"""

from .inventory_gateway import IInventoryGateway

__all__ = ["IInventoryGateway"]
