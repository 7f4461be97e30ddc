"""
Domain service - Rule Engine

Closed-form stockout, expiry and cold-chain risk rules plus the data quality
and confidence heuristics that feed them. Every function is pure: the only
implicit input is "today", which callers may pin through the ``today``/``now``
arguments.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

from src.domain.entities.inventory import ColdChainSnapshot, ExpirySnapshot, StockSnapshot
from src.domain.entities.risk import AggregatedPrediction, PredictionResult, RiskLevel
from src.domain.entities.time_series import HistoricalDataPoint
from src.shared.consts import EPSILON, MAX_CONFIDENCE, MIN_CONFIDENCE, MIN_DAILY_CONSUMPTION

STOCKOUT_CRITICAL_DAYS = 7
STOCKOUT_HIGH_DAYS = 14
EXPIRY_CRITICAL_DAYS = 7
EXPIRY_HIGH_DAYS = 14
EXPIRY_RISK_CRITICAL = 20.0
EXPIRY_RISK_HIGH = 10.0
EXPIRY_RISK_MEDIUM = 5.0
COLD_CHAIN_CAPACITY_CRITICAL = 90.0
COLD_CHAIN_CAPACITY_HIGH = 80.0
COLD_CHAIN_CAPACITY_MEDIUM = 70.0
COLD_CHAIN_PROJECTION_DAYS = 30
EXPIRY_CONFIDENCE = 90
COLD_CHAIN_CONFIDENCE = 85

# Vaccination demand by calendar month: campaign peaks Nov-Jan, rainy-season
# trough Apr-Jun.
SEASONAL_FACTORS = {
    1: 1.2,
    2: 1.1,
    3: 1.0,
    4: 0.9,
    5: 0.8,
    6: 0.8,
    7: 0.9,
    8: 1.0,
    9: 1.1,
    10: 1.2,
    11: 1.3,
    12: 1.2,
}


def clamp_confidence(value: float) -> int:
    return int(round(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, value))))


def safe_consumption(avg_daily_consumption: float) -> float:
    return avg_daily_consumption if avg_daily_consumption > 0 else MIN_DAILY_CONSUMPTION


def days_until_stockout(current_stock: float, avg_daily_consumption: float) -> int:
    days = math.floor(current_stock / safe_consumption(avg_daily_consumption))
    return max(0, days)


def stockout_risk_level(days: int) -> RiskLevel:
    if days <= STOCKOUT_CRITICAL_DAYS:
        return RiskLevel.CRITICAL
    if days <= STOCKOUT_HIGH_DAYS:
        return RiskLevel.HIGH
    return RiskLevel.MEDIUM


def _plural(days: int) -> str:
    return "" if days == 1 else "s"


def stockout_message(days: int, risk_level: RiskLevel) -> str:
    if risk_level is RiskLevel.CRITICAL:
        return (
            f"CRITICAL: Stock will be depleted in {days} day{_plural(days)}. "
            "Immediate replenishment required."
        )
    if risk_level is RiskLevel.HIGH:
        return (
            f"HIGH ALERT: Stock will be depleted in {days} days. "
            f"Plan replenishment within {math.ceil(days / 2)} days."
        )
    return (
        f"Monitor: Stock sufficient for {days} days. "
        f"Review consumption trends in {days - STOCKOUT_CRITICAL_DAYS} days."
    )


def stockout_prediction(
    snapshot: StockSnapshot, today: Optional[date] = None
) -> PredictionResult:
    """
    Predict when on-hand stock runs out at the current consumption rate.

    ``days = floor(stock / max(consumption, 0.1))``. Tiers: up to 7 days is
    CRITICAL, up to 14 is HIGH, anything longer is MEDIUM.
    """
    today = today or date.today()
    consumption = safe_consumption(snapshot.avg_daily_consumption)
    days = days_until_stockout(snapshot.current_stock, snapshot.avg_daily_consumption)
    risk_level = stockout_risk_level(days)
    confidence = clamp_confidence(
        MIN_CONFIDENCE + snapshot.historical_data_quality * 25
    )

    return PredictionResult(
        prediction=stockout_message(days, risk_level),
        expected_date=today + timedelta(days=days),
        confidence=confidence,
        risk_level=risk_level,
        days_until_event=days,
        metrics={
            "current_stock": snapshot.current_stock,
            "avg_daily_consumption": consumption,
            "days_until_stockout": days,
            "min_stock_threshold": snapshot.min_stock_threshold,
            "historical_data_quality": round(snapshot.historical_data_quality * 100),
        },
    )


def wastage_risk_percent(total_doses: float, expiring_doses: float) -> float:
    if total_doses <= 0:
        return 0.0
    return expiring_doses / total_doses * 100


def expiry_risk(
    snapshot: ExpirySnapshot, today: Optional[date] = None
) -> PredictionResult:
    """
    Estimate the share of doses likely to expire unused.

    CRITICAL when more than 20% of doses expire or expiry is at most 7 days
    away; HIGH above 10% or within 14 days; MEDIUM above 5%; LOW otherwise.
    """
    today = today or date.today()
    days = snapshot.days_until_expiry
    expiring = snapshot.expiring_doses
    wastage_risk = wastage_risk_percent(snapshot.total_doses, expiring)
    doses_usable = max(0.0, days * snapshot.avg_daily_consumption)
    potential_wastage = max(0.0, expiring - doses_usable)

    if wastage_risk > EXPIRY_RISK_CRITICAL or days <= EXPIRY_CRITICAL_DAYS:
        risk_level = RiskLevel.CRITICAL
        prediction = (
            f"CRITICAL: {expiring:g} doses ({wastage_risk:.1f}%) expire in {days} days. "
            f"Potential wastage: {potential_wastage:.0f} doses. "
            "Immediate redistribution required."
        )
    elif wastage_risk > EXPIRY_RISK_HIGH or days <= EXPIRY_HIGH_DAYS:
        risk_level = RiskLevel.HIGH
        prediction = (
            f"HIGH ALERT: {expiring:g} doses ({wastage_risk:.1f}%) expire in {days} days. "
            f"Potential wastage: {potential_wastage:.0f} doses. Accelerate consumption."
        )
    elif wastage_risk > EXPIRY_RISK_MEDIUM:
        risk_level = RiskLevel.MEDIUM
        prediction = (
            f"Monitor: {expiring:g} doses ({wastage_risk:.1f}%) expire in {days} days. "
            "Plan redistribution to higher-demand facilities."
        )
    else:
        risk_level = RiskLevel.LOW
        prediction = (
            f"Low risk: {expiring:g} doses expire in {days} days. "
            "Normal consumption should prevent wastage."
        )

    days_until_event = max(0, days)
    return PredictionResult(
        prediction=prediction,
        expected_date=today + timedelta(days=days_until_event),
        confidence=EXPIRY_CONFIDENCE,
        risk_level=risk_level,
        days_until_event=days_until_event,
        metrics={
            "total_doses": snapshot.total_doses,
            "expiring_doses": expiring,
            "wastage_risk": round(wastage_risk, 1),
            "days_until_expiry": days,
            "doses_usable_before_expiry": round(doses_usable),
            "potential_wastage": round(potential_wastage),
        },
    )


def capacity_utilization_percent(current_stock: float, max_capacity: float) -> float:
    return current_stock / max(max_capacity, EPSILON) * 100


def is_temperature_breach(
    current_temperature: Optional[float], max_safe_temperature: float
) -> bool:
    return current_temperature is not None and current_temperature > max_safe_temperature


def cold_chain_risk(
    snapshot: ColdChainSnapshot,
    today: Optional[date] = None,
    horizon_days: int = COLD_CHAIN_PROJECTION_DAYS,
) -> PredictionResult:
    """
    Project cold-chain storage pressure over the next ``horizon_days`` days.

    A temperature above the safe limit is always CRITICAL. Otherwise the
    projected utilisation (current plus seasonal influx) drives the tier:
    above 90% CRITICAL, above 80% HIGH; a current utilisation above 70% is
    MEDIUM and everything else LOW. The horizon is a fixed projection window,
    not a derived breach date.
    """
    today = today or date.today()
    capacity = max(snapshot.max_capacity, EPSILON)
    utilization = capacity_utilization_percent(snapshot.current_stock, capacity)
    influx = snapshot.avg_incoming_shipments * snapshot.seasonality_factor
    projected = utilization + influx / capacity * 100
    breach = is_temperature_breach(
        snapshot.current_temperature, snapshot.max_safe_temperature
    )

    if breach:
        risk_level = RiskLevel.CRITICAL
        prediction = (
            f"CRITICAL: TEMPERATURE BREACH! Current: {snapshot.current_temperature}°C "
            f"exceeds safe limit of {snapshot.max_safe_temperature}°C. "
            "Immediate action required."
        )
    elif projected > COLD_CHAIN_CAPACITY_CRITICAL:
        risk_level = RiskLevel.CRITICAL
        prediction = (
            f"CRITICAL: Capacity at {utilization:.1f}% is projected to reach "
            f"{projected:.1f}% within {horizon_days} days. "
            "Immediate expansion or redistribution required."
        )
    elif projected > COLD_CHAIN_CAPACITY_HIGH:
        risk_level = RiskLevel.HIGH
        prediction = (
            f"HIGH ALERT: Capacity at {utilization:.1f}%, projected to reach "
            f"{projected:.1f}%. Prepare for incoming {influx:.0f} doses. "
            "Plan secondary storage."
        )
    elif utilization > COLD_CHAIN_CAPACITY_MEDIUM:
        risk_level = RiskLevel.MEDIUM
        prediction = (
            f"Monitor: Capacity at {utilization:.1f}%. Projected influx of "
            f"{influx:.0f} doses may strain storage. Review upcoming deliveries."
        )
    else:
        risk_level = RiskLevel.LOW
        prediction = (
            f"Normal: Capacity at {utilization:.1f}%. Sufficient room for "
            f"{influx:.0f} projected incoming doses."
        )

    return PredictionResult(
        prediction=prediction,
        expected_date=today + timedelta(days=horizon_days),
        confidence=COLD_CHAIN_CONFIDENCE,
        risk_level=risk_level,
        days_until_event=horizon_days,
        metrics={
            "current_stock": snapshot.current_stock,
            "max_capacity": snapshot.max_capacity,
            "capacity_utilization": round(utilization, 1),
            "avg_incoming_shipments": snapshot.avg_incoming_shipments,
            "seasonality_factor": round(snapshot.seasonality_factor, 2),
            "projected_utilization": round(projected, 1),
            "current_temperature": (
                snapshot.current_temperature
                if snapshot.current_temperature is not None
                else "N/A"
            ),
            "temperature_breach": "YES" if breach else "NO",
        },
    )


def seasonality_factor(month: Optional[int] = None) -> float:
    """Demand multiplier for a calendar month (1-12); 1.0 when out of range."""
    if month is None:
        month = date.today().month
    return SEASONAL_FACTORS.get(month, 1.0)


def average_daily_consumption(history: Sequence[HistoricalDataPoint]) -> float:
    if not history:
        return 0.0
    return sum(point.consumption for point in history) / len(history)


def _as_utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def days_since(point_date: date, now: Optional[datetime] = None) -> int:
    now = _as_utc(now or datetime.now(timezone.utc))
    if isinstance(point_date, datetime):
        moment = _as_utc(point_date)
    else:
        moment = datetime(
            point_date.year, point_date.month, point_date.day, tzinfo=timezone.utc
        )
    return math.floor((now - moment).total_seconds() / 86400)


def data_quality(
    history: Sequence[HistoricalDataPoint], now: Optional[datetime] = None
) -> float:
    """
    Score a history between 0 and 1.

    Base 0.5; +0.2 when no field is negative; +0.15 from 30 points and
    another +0.15 from 90; +0.1 when the latest point is at most 7 days old.
    """
    if not history:
        return 0.0

    score = 0.5
    if all(
        point.consumption >= 0 and point.stock >= 0 and point.wastage >= 0
        for point in history
    ):
        score += 0.2
    if len(history) >= 30:
        score += 0.15
    if len(history) >= 90:
        score += 0.15
    if days_since(history[-1].date, now) <= 7:
        score += 0.1

    return min(1.0, score)


def confidence_score(
    historical_data_quality: float, data_points: int, recency_days: int
) -> int:
    """Confidence in [70, 95] from data quality, volume and staleness."""
    confidence = MIN_CONFIDENCE + historical_data_quality * 25

    if data_points >= 90:
        confidence += 10
    elif data_points >= 30:
        confidence += 5

    if recency_days > 60:
        confidence -= 10
    elif recency_days > 30:
        confidence -= 5

    return clamp_confidence(confidence)


def should_alert_stockout(days: int, threshold: int) -> bool:
    return days <= threshold


def should_alert_expiry(wastage_risk: float) -> bool:
    return wastage_risk > EXPIRY_RISK_CRITICAL


def should_alert_breach(capacity_utilization: float, predicted_influx_pct: float) -> bool:
    return capacity_utilization + predicted_influx_pct > COLD_CHAIN_CAPACITY_CRITICAL


def aggregate_predictions(
    stock: StockSnapshot,
    expiry: ExpirySnapshot,
    cold_chain: ColdChainSnapshot,
    today: Optional[date] = None,
    cold_chain_horizon_days: int = COLD_CHAIN_PROJECTION_DAYS,
) -> AggregatedPrediction:
    return AggregatedPrediction(
        stockout=stockout_prediction(stock, today),
        expiry=expiry_risk(expiry, today),
        cold_chain=cold_chain_risk(cold_chain, today, cold_chain_horizon_days),
    )
