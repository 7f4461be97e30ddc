"""
Domain Entities - Inventory

Point-in-time inputs to the rule engine and the plain-data records supplied
by the facility directory and the per-product stock feed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .time_series import HistoricalDataPoint


@dataclass(frozen=True)
class StockSnapshot:
    current_stock: float
    avg_daily_consumption: float
    historical_data_quality: float
    min_stock_threshold: float = 0.0


@dataclass(frozen=True)
class ExpirySnapshot:
    total_doses: float
    expiring_doses: float
    days_until_expiry: int
    avg_daily_consumption: float


@dataclass(frozen=True)
class ColdChainSnapshot:
    current_stock: float
    max_capacity: float
    avg_incoming_shipments: float
    seasonality_factor: float
    current_temperature: Optional[float] = None
    max_safe_temperature: float = 8.0


@dataclass
class Facility:
    """Entry of the facility directory."""

    id: str
    name: str
    state: Optional[str] = None
    lga: Optional[str] = None
    cold_chain_capacity: float = 0.0
    ambient_temperature: Optional[float] = None
    max_safe_temperature: float = 8.0
    avg_incoming_shipments: float = 0.0


@dataclass
class ProductStock:
    """Stock, expiry and history of one product held at one facility."""

    facility_id: str
    product_id: str
    product_name: str
    current_stock: float
    expiring_doses: float = 0.0
    days_until_expiry: int = 0
    history: List[HistoricalDataPoint] = field(default_factory=list)
    avg_daily_consumption: Optional[float] = None
