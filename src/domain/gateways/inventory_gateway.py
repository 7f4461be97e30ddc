"""
Inventory Gateway Interface - Domain Layer

This module defines the interface for reading the facility directory and
the per-product stock feed the insights are computed from.
"""

from abc import ABC, abstractmethod
from typing import List

from src.domain.entities.inventory import Facility, ProductStock


class IInventoryGateway(ABC):
    """Interface for Inventory Gateway."""

    @abstractmethod
    def list_facilities(self) -> List[Facility]:
        """
        Retrieve every facility of the directory.

        Returns:
            List[Facility]: Facilities in directory order
        """
        pass

    @abstractmethod
    def get_facility(self, facility_id: str) -> Facility:
        """
        Retrieve a single facility.

        Raises:
            InventoryItemNotFoundError: If the facility is unknown
        """
        pass

    @abstractmethod
    def list_products(self, facility_id: str) -> List[ProductStock]:
        """Retrieve the stock rows held at a facility (empty when none)."""
        pass

    @abstractmethod
    def get_product(self, facility_id: str, product_id: str) -> ProductStock:
        """
        Retrieve one product row of a facility.

        Raises:
            InventoryItemNotFoundError: If the pair is unknown
        """
        pass
