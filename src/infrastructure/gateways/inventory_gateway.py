"""In-memory inventory gateway, optionally loaded from a JSON snapshot."""

from __future__ import annotations

import datetime as dt
import json
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from src.domain.entities.errors import DomainError, InventoryItemNotFoundError
from src.domain.entities.inventory import Facility, ProductStock
from src.domain.entities.time_series import HistoricalDataPoint
from src.domain.gateways.inventory_gateway import IInventoryGateway
from src.shared import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_SAFE_TEMPERATURE = 8.0


class _HistoryPointSchema(BaseModel):
    date: dt.date
    consumption: float = Field(default=0.0)
    stock: float = Field(default=0.0)
    wastage: float = Field(default=0.0)


class _FacilitySchema(BaseModel):
    id: str
    name: str
    state: Optional[str] = None
    lga: Optional[str] = None
    cold_chain_capacity: float = 0.0
    ambient_temperature: Optional[float] = None
    max_safe_temperature: Optional[float] = None
    avg_incoming_shipments: float = 0.0


class _ProductSchema(BaseModel):
    facility_id: str
    product_id: str
    product_name: str
    current_stock: float
    expiring_doses: float = 0.0
    days_until_expiry: int = 0
    avg_daily_consumption: Optional[float] = None
    history: List[_HistoryPointSchema] = Field(default_factory=list)


class _InventorySnapshotSchema(BaseModel):
    facilities: List[_FacilitySchema] = Field(default_factory=list)
    products: List[_ProductSchema] = Field(default_factory=list)


class InMemoryInventoryGateway(IInventoryGateway):
    """Facility directory and stock feed held in process memory."""

    def __init__(
        self,
        facilities: Iterable[Facility] = (),
        products: Iterable[ProductStock] = (),
    ) -> None:
        self._facilities: Dict[str, Facility] = OrderedDict(
            (facility.id, facility) for facility in facilities
        )
        self._products: Dict[str, Dict[str, ProductStock]] = {}
        for product in products:
            self.upsert_product(product)

    @classmethod
    def from_json_file(
        cls,
        path: Union[str, Path],
        default_max_safe_temperature: float = DEFAULT_MAX_SAFE_TEMPERATURE,
    ) -> "InMemoryInventoryGateway":
        """
        Build a gateway from a snapshot file shaped as
        ``{"facilities": [...], "products": [...]}``. Facilities without a
        ``max_safe_temperature`` get ``default_max_safe_temperature``.

        Raises:
            DomainError: If the file cannot be read or does not match the
                snapshot layout.
        """
        snapshot_path = Path(path)
        try:
            payload = json.loads(snapshot_path.read_text(encoding="utf-8"))
            snapshot = _InventorySnapshotSchema.model_validate(payload)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(
                "inventory.snapshot.read_failed", path=str(snapshot_path), error=str(exc)
            )
            raise DomainError(
                f"Unable to read inventory snapshot {snapshot_path}",
                {"path": str(snapshot_path), "error": str(exc)},
            ) from exc
        except ValidationError as exc:
            logger.error(
                "inventory.snapshot.invalid",
                path=str(snapshot_path),
                errors=exc.error_count(),
            )
            raise DomainError(
                f"Invalid inventory snapshot {snapshot_path}",
                {"path": str(snapshot_path), "errors": exc.errors()},
            ) from exc

        facilities = [
            Facility(
                **item.model_dump(exclude={"max_safe_temperature"}),
                max_safe_temperature=(
                    default_max_safe_temperature
                    if item.max_safe_temperature is None
                    else item.max_safe_temperature
                ),
            )
            for item in snapshot.facilities
        ]
        products = [
            ProductStock(
                **item.model_dump(exclude={"history"}),
                history=[
                    HistoricalDataPoint(**point.model_dump()) for point in item.history
                ],
            )
            for item in snapshot.products
        ]
        logger.info(
            "inventory.snapshot.loaded",
            path=str(snapshot_path),
            facilities=len(facilities),
            products=len(products),
        )
        return cls(facilities, products)

    def upsert_facility(self, facility: Facility) -> None:
        self._facilities[facility.id] = facility

    def upsert_product(self, product: ProductStock) -> None:
        self._products.setdefault(product.facility_id, OrderedDict())[
            product.product_id
        ] = product

    def list_facilities(self) -> List[Facility]:
        return list(self._facilities.values())

    def get_facility(self, facility_id: str) -> Facility:
        facility = self._facilities.get(facility_id)
        if facility is None:
            raise InventoryItemNotFoundError(facility_id)
        return facility

    def list_products(self, facility_id: str) -> List[ProductStock]:
        return list(self._products.get(facility_id, {}).values())

    def get_product(self, facility_id: str, product_id: str) -> ProductStock:
        product = self._products.get(facility_id, {}).get(product_id)
        if product is None:
            raise InventoryItemNotFoundError(facility_id, product_id)
        return product
