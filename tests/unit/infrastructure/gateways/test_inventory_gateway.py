from __future__ import annotations

import json
from datetime import date

import pytest

from src.domain.entities.errors import DomainError, InventoryItemNotFoundError
from src.domain.entities.inventory import ProductStock
from src.infrastructure.gateways.inventory_gateway import InMemoryInventoryGateway

SNAPSHOT = {
    "facilities": [
        {
            "id": "FAC-1",
            "name": "Central Hospital",
            "state": "FCT",
            "cold_chain_capacity": 1000,
            "ambient_temperature": 4.5,
            "avg_incoming_shipments": 120,
        },
        {
            "id": "FAC-2",
            "name": "Rural Clinic",
            "max_safe_temperature": 6.0,
        },
    ],
    "products": [
        {
            "facility_id": "FAC-1",
            "product_id": "BCG",
            "product_name": "BCG Vaccine",
            "current_stock": 150,
            "expiring_doses": 20,
            "days_until_expiry": 12,
            "history": [
                {"date": "2024-03-14", "consumption": 48, "stock": 200},
                {"date": "2024-03-15", "consumption": 50, "stock": 150, "wastage": 1},
            ],
        }
    ],
}


def _write(tmp_path, payload) -> str:
    path = tmp_path / "inventory.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_lists_facilities_in_insertion_order(inventory_gateway) -> None:
    assert [facility.id for facility in inventory_gateway.list_facilities()] == [
        "FAC-ABJ-001",
        "FAC-LAG-002",
    ]


def test_get_product_and_facility(inventory_gateway) -> None:
    assert inventory_gateway.get_facility("FAC-LAG-002").state == "Lagos"
    assert inventory_gateway.get_product("FAC-ABJ-001", "BCG").current_stock == 150.0
    assert [p.product_id for p in inventory_gateway.list_products("FAC-LAG-002")] == [
        "MEASLES"
    ]


def test_unknown_items_raise(inventory_gateway) -> None:
    with pytest.raises(InventoryItemNotFoundError):
        inventory_gateway.get_facility("nope")
    with pytest.raises(InventoryItemNotFoundError):
        inventory_gateway.get_product("FAC-ABJ-001", "MEASLES")
    assert inventory_gateway.list_products("nope") == []


def test_upsert_product_replaces_existing(inventory_gateway) -> None:
    inventory_gateway.upsert_product(
        ProductStock(
            facility_id="FAC-ABJ-001",
            product_id="BCG",
            product_name="BCG Vaccine",
            current_stock=10.0,
        )
    )

    assert inventory_gateway.get_product("FAC-ABJ-001", "BCG").current_stock == 10.0
    assert len(inventory_gateway.list_products("FAC-ABJ-001")) == 1


def test_from_json_file_builds_entities(tmp_path) -> None:
    gateway = InMemoryInventoryGateway.from_json_file(
        _write(tmp_path, SNAPSHOT), default_max_safe_temperature=7.5
    )

    central, rural = gateway.list_facilities()
    assert central.max_safe_temperature == 7.5
    assert central.ambient_temperature == 4.5
    assert rural.max_safe_temperature == 6.0
    assert rural.ambient_temperature is None

    product = gateway.get_product("FAC-1", "BCG")
    assert product.avg_daily_consumption is None
    assert [point.date for point in product.history] == [
        date(2024, 3, 14),
        date(2024, 3, 15),
    ]
    assert product.history[-1].wastage == 1.0


def test_from_json_file_missing_file(tmp_path) -> None:
    with pytest.raises(DomainError) as exc_info:
        InMemoryInventoryGateway.from_json_file(tmp_path / "missing.json")

    assert "Unable to read" in exc_info.value.message


def test_from_json_file_rejects_bad_layout(tmp_path) -> None:
    payload = {"facilities": [{"name": "no id"}]}

    with pytest.raises(DomainError) as exc_info:
        InMemoryInventoryGateway.from_json_file(_write(tmp_path, payload))

    assert "Invalid inventory snapshot" in exc_info.value.message


def test_from_json_file_rejects_malformed_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DomainError):
        InMemoryInventoryGateway.from_json_file(path)
