"""
Application Use Cases - Data Preprocessing

This module turns raw facility history into model inputs: regular daily
series for the forecaster, anomaly records for the isolation forest and
the eight-feature record consumed by the risk classifier.
"""

from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

import pandas as pd
import structlog

from src.domain.entities.anomaly import AnomalyRecord
from src.domain.entities.classification import ClassificationFeatures
from src.domain.entities.inventory import Facility, ProductStock
from src.domain.entities.time_series import HistoricalDataPoint, TimeSeriesPoint
from src.domain.services import rule_engine

logger = structlog.get_logger(__name__)

HISTORY_COLUMNS = ("consumption", "stock", "wastage")


class DataPreprocessingUseCase:
    """
    Prepares facility history for the models:
      - Converts history to a DataFrame indexed by day
      - Sums duplicate days and fills missing days with 0
      - Derives classification features from a product row
    """

    def to_dataframe(self, history: Sequence[HistoricalDataPoint]) -> pd.DataFrame:
        """Daily frame with one row per calendar day between first and last point."""
        if not history:
            return pd.DataFrame(columns=list(HISTORY_COLUMNS), dtype=float)

        df = pd.DataFrame(
            {
                "date": [pd.Timestamp(point.date) for point in history],
                "consumption": [point.consumption for point in history],
                "stock": [point.stock for point in history],
                "wastage": [point.wastage for point in history],
            }
        )
        df["date"] = df["date"].dt.normalize()
        daily = df.groupby("date").sum().sort_index()
        return daily.asfreq("D", fill_value=0.0)

    def execute(
        self,
        history: Sequence[HistoricalDataPoint],
        column: str = "consumption",
    ) -> List[TimeSeriesPoint]:
        """
        Build a regular daily series from one history column.

        Args:
            history: Points in any order, possibly with gaps or repeated days
            column: One of ``consumption``, ``stock`` or ``wastage``

        Returns:
            Chronological points, one per day

        Raises:
            ValueError: When the column is unknown
        """
        if column not in HISTORY_COLUMNS:
            raise ValueError(f"Column '{column}' not found in history")

        df = self.to_dataframe(history)
        series = [
            TimeSeriesPoint(date=timestamp.date(), value=float(value))
            for timestamp, value in df[column].items()
        ]

        logger.info(
            "preprocessing.series_built",
            input_points=len(history),
            output_points=len(series),
            column=column,
        )
        return series

    def to_anomaly_records(
        self, history: Sequence[HistoricalDataPoint]
    ) -> List[AnomalyRecord]:
        """One record per day carrying consumption as the scored value."""
        df = self.to_dataframe(history)
        return [
            AnomalyRecord(
                value=float(row.consumption),
                timestamp=timestamp.to_pydatetime().replace(tzinfo=timezone.utc),
                context={"stock": float(row.stock), "wastage": float(row.wastage)},
            )
            for timestamp, row in df.iterrows()
        ]

    def build_classification_features(
        self,
        item: ProductStock,
        facility: Facility,
        facility_stock: Optional[float] = None,
        today: Optional[date] = None,
    ) -> ClassificationFeatures:
        """
        Derive the classifier input for one product row.

        Args:
            item: Product row (stock, expiry and history)
            facility: Facility holding the product
            facility_stock: Total stock stored in the facility cold chain;
                the product stock alone when omitted
            today: Reference date for data recency and seasonality
        """
        today = today or date.today()
        now = datetime(today.year, today.month, today.day, tzinfo=timezone.utc)

        consumption = (
            item.avg_daily_consumption
            if item.avg_daily_consumption is not None
            else rule_engine.average_daily_consumption(item.history)
        )
        stored = item.current_stock if facility_stock is None else facility_stock
        temperature_deviation = (
            facility.ambient_temperature - facility.max_safe_temperature
            if facility.ambient_temperature is not None
            else 0.0
        )

        return ClassificationFeatures(
            current_stock=item.current_stock,
            avg_daily_consumption=consumption,
            days_until_stockout=rule_engine.days_until_stockout(
                item.current_stock, consumption
            ),
            expiry_risk=rule_engine.wastage_risk_percent(
                item.current_stock, item.expiring_doses
            ),
            capacity_utilization=rule_engine.capacity_utilization_percent(
                stored, facility.cold_chain_capacity
            ),
            temperature_deviation=temperature_deviation,
            data_quality=rule_engine.data_quality(item.history, now),
            seasonality_factor=rule_engine.seasonality_factor(today.month),
        )
