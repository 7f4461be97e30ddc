from __future__ import annotations

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Sequence, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.domain.entities.anomaly import AnomalyRecord  # noqa: E402
from src.domain.entities.classification import ClassificationFeatures  # noqa: E402
from src.domain.entities.inventory import Facility, ProductStock  # noqa: E402
from src.domain.entities.risk import RiskLevel  # noqa: E402
from src.domain.entities.time_series import HistoricalDataPoint  # noqa: E402
from src.infrastructure.gateways.inventory_gateway import (  # noqa: E402
    InMemoryInventoryGateway,
)
from src.infrastructure.repositories.insight_cache import (  # noqa: E402
    InMemoryInsightCache,
)
from src.infrastructure.repositories.model_registry import (  # noqa: E402
    InMemoryModelRegistry,
)

TODAY = date(2024, 3, 15)


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_history(
    days: int,
    consumption: float = 10.0,
    stock: float = 500.0,
    end: date = TODAY,
) -> List[HistoricalDataPoint]:
    start = end - timedelta(days=days - 1)
    return [
        HistoricalDataPoint(
            date=start + timedelta(days=offset),
            consumption=consumption,
            stock=stock,
        )
        for offset in range(days)
    ]


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def history_factory() -> Callable[..., List[HistoricalDataPoint]]:
    return build_history


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def abuja_facility() -> Facility:
    return Facility(
        id="FAC-ABJ-001",
        name="Central Hospital, Abuja",
        state="FCT",
        lga="AMAC",
        cold_chain_capacity=1000.0,
        ambient_temperature=5.0,
        avg_incoming_shipments=100.0,
    )


@pytest.fixture()
def lagos_facility() -> Facility:
    return Facility(
        id="FAC-LAG-002",
        name="General Hospital, Lagos",
        state="Lagos",
        lga="Ikeja",
        cold_chain_capacity=500.0,
        ambient_temperature=10.0,
        avg_incoming_shipments=50.0,
    )


@pytest.fixture()
def bcg_stock(abuja_facility: Facility) -> ProductStock:
    return ProductStock(
        facility_id=abuja_facility.id,
        product_id="BCG",
        product_name="BCG Vaccine",
        current_stock=150.0,
        avg_daily_consumption=50.0,
        history=build_history(30, consumption=50.0),
    )


@pytest.fixture()
def measles_stock(lagos_facility: Facility) -> ProductStock:
    return ProductStock(
        facility_id=lagos_facility.id,
        product_id="MEASLES",
        product_name="Measles Vaccine",
        current_stock=200.0,
        expiring_doses=120.0,
        days_until_expiry=7,
        avg_daily_consumption=5.0,
        history=build_history(10, consumption=5.0),
    )


@pytest.fixture()
def inventory_gateway(
    abuja_facility: Facility,
    lagos_facility: Facility,
    bcg_stock: ProductStock,
    measles_stock: ProductStock,
) -> InMemoryInventoryGateway:
    return InMemoryInventoryGateway(
        facilities=[abuja_facility, lagos_facility],
        products=[bcg_stock, measles_stock],
    )


@pytest.fixture()
def model_registry() -> InMemoryModelRegistry:
    return InMemoryModelRegistry()


@pytest.fixture()
def insight_cache(fake_clock: FakeClock) -> InMemoryInsightCache:
    return InMemoryInsightCache(ttl_seconds=300, clock=fake_clock)


def build_features(days: float, expiry: float = 0.0, capacity: float = 50.0):
    return ClassificationFeatures(
        current_stock=100.0,
        avg_daily_consumption=10.0,
        days_until_stockout=days,
        expiry_risk=expiry,
        capacity_utilization=capacity,
        temperature_deviation=0.0,
        data_quality=0.8,
        seasonality_factor=1.0,
    )


@pytest.fixture()
def make_anomaly_records() -> Callable[[Sequence[float]], List[AnomalyRecord]]:
    base = datetime(2024, 2, 1, tzinfo=timezone.utc)

    def _build(values: Sequence[float]) -> List[AnomalyRecord]:
        return [
            AnomalyRecord(value=float(value), timestamp=base + timedelta(days=i))
            for i, value in enumerate(values)
        ]

    return _build


@pytest.fixture()
def labelled_features() -> Tuple[List[ClassificationFeatures], List[RiskLevel]]:
    """Two well separated stockout groups: 1-7 days CRITICAL, 30-36 days LOW."""
    features = [build_features(days) for days in range(1, 8)] + [
        build_features(days) for days in range(30, 37)
    ]
    labels = [RiskLevel.CRITICAL] * 7 + [RiskLevel.LOW] * 7
    return features, labels
