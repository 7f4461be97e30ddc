"""
Application Use Cases - Insights

The orchestrator evaluates every facility/product pair of the inventory
feed, attaches model-backed predictions where models are registered and
caches the ranked result. Query use cases read from that snapshot.

Cycle: stale -> generating -> cached. Only one refresh runs at a time;
concurrent readers wait for it and receive the same snapshot.
"""

from __future__ import annotations

import dataclasses
import threading
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

import numpy as np
import structlog

from src.application.dtos.insight_dto import (
    AggregatedPredictionsDTO,
    InsightDTO,
    InsightQueryDTO,
    InsightsResponseDTO,
    PredictionResultDTO,
)
from src.application.use_cases.data_preprocessing_use_case import (
    DataPreprocessingUseCase,
)
from src.application.use_cases.model_use_cases import ClassifyRiskUseCase
from src.domain.entities.anomaly import AnomalyRecord
from src.domain.entities.insight import InsightRecord, InsightSnapshot
from src.domain.entities.inventory import (
    ColdChainSnapshot,
    ExpirySnapshot,
    Facility,
    ProductStock,
    StockSnapshot,
)
from src.domain.entities.model import ModelKind, scoped_model_name
from src.domain.entities.risk import PredictionResult, PredictionType
from src.domain.gateways.inventory_gateway import IInventoryGateway
from src.domain.repositories.insight_cache import IInsightCache
from src.domain.repositories.model_registry import IModelRegistry
from src.domain.services import rule_engine
from src.shared.consts import DEFAULT_CACHE_TTL_SECONDS

logger = structlog.get_logger(__name__)

COLD_CHAIN_PRODUCT_ID = "COLD_CHAIN"
COLD_CHAIN_PRODUCT_NAME = "Cold Chain Equipment"
ETS_STOCKOUT_CONFIDENCE = 85


def _utc_midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _consumption(product: ProductStock) -> float:
    if product.avg_daily_consumption is not None:
        return product.avg_daily_consumption
    return rule_engine.average_daily_consumption(product.history)


def _stock_snapshot(product: ProductStock, today: date) -> StockSnapshot:
    return StockSnapshot(
        current_stock=product.current_stock,
        avg_daily_consumption=_consumption(product),
        historical_data_quality=rule_engine.data_quality(
            product.history, _utc_midnight(today)
        ),
    )


def _expiry_snapshot(product: ProductStock) -> ExpirySnapshot:
    return ExpirySnapshot(
        total_doses=product.current_stock,
        expiring_doses=product.expiring_doses,
        days_until_expiry=product.days_until_expiry,
        avg_daily_consumption=_consumption(product),
    )


def _cold_chain_snapshot(
    facility: Facility, facility_stock: float, today: date
) -> ColdChainSnapshot:
    return ColdChainSnapshot(
        current_stock=facility_stock,
        max_capacity=facility.cold_chain_capacity,
        avg_incoming_shipments=facility.avg_incoming_shipments,
        seasonality_factor=rule_engine.seasonality_factor(today.month),
        current_temperature=facility.ambient_temperature,
        max_safe_temperature=facility.max_safe_temperature,
    )


class InsightOrchestrator:
    """Generates, caches and serves the insight snapshot."""

    def __init__(
        self,
        inventory_gateway: IInventoryGateway,
        insight_cache: IInsightCache,
        model_registry: IModelRegistry,
        preprocessing: Optional[DataPreprocessingUseCase] = None,
        classify_risk: Optional[ClassifyRiskUseCase] = None,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        forecast_horizon_days: int = 90,
        cold_chain_horizon_days: int = rule_engine.COLD_CHAIN_PROJECTION_DAYS,
        today: Callable[[], date] = date.today,
    ):
        self.inventory_gateway = inventory_gateway
        self.insight_cache = insight_cache
        self.model_registry = model_registry
        self.preprocessing = preprocessing or DataPreprocessingUseCase()
        self.classify_risk = classify_risk or ClassifyRiskUseCase(model_registry)
        self.cache_ttl_seconds = cache_ttl_seconds
        self.forecast_horizon_days = forecast_horizon_days
        self.cold_chain_horizon_days = cold_chain_horizon_days
        self._today = today
        self._refresh_lock = threading.Lock()

    def get_snapshot(self) -> InsightSnapshot:
        """Return the cached snapshot, regenerating it once it has expired."""
        snapshot = self.insight_cache.get()
        if snapshot is not None:
            return snapshot

        with self._refresh_lock:
            snapshot = self.insight_cache.get()
            if snapshot is not None:
                return snapshot

            snapshot = self.generate()
            self.insight_cache.set(snapshot, self.cache_ttl_seconds)
            return snapshot

    def invalidate(self) -> None:
        """Force the next read to regenerate."""
        self.insight_cache.clear()
        logger.info("insights.cache_invalidated")

    def generate(self) -> InsightSnapshot:
        """Evaluate every facility/product pair of the inventory feed."""
        today = self._today()
        generated_at = datetime.now(timezone.utc)
        records: List[InsightRecord] = []
        failed = 0

        logger.info("insights.refresh.start")
        for facility in self.inventory_gateway.list_facilities():
            products = self.inventory_gateway.list_products(facility.id)
            facility_stock = sum(product.current_stock for product in products)

            for product in products:
                try:
                    records.extend(
                        self._pair_insights(
                            facility, product, facility_stock, today, generated_at
                        )
                    )
                except Exception as exc:
                    failed += 1
                    logger.warning(
                        "insights.pair_failed",
                        facility_id=facility.id,
                        product_id=product.product_id,
                        error=str(exc),
                        exc_info=exc,
                    )

            try:
                records.append(
                    self._cold_chain_insight(facility, facility_stock, today, generated_at)
                )
            except Exception as exc:
                failed += 1
                logger.warning(
                    "insights.pair_failed",
                    facility_id=facility.id,
                    product_id=COLD_CHAIN_PRODUCT_ID,
                    error=str(exc),
                    exc_info=exc,
                )

        records.sort(key=InsightRecord.sort_key)
        logger.info(
            "insights.refresh.completed", insights=len(records), failed_pairs=failed
        )
        return InsightSnapshot(
            records=tuple(records), generated_at=generated_at, failed_pairs=failed
        )

    def _pair_insights(
        self,
        facility: Facility,
        product: ProductStock,
        facility_stock: float,
        today: date,
        generated_at: datetime,
    ) -> List[InsightRecord]:
        def record(result: PredictionResult, kind: PredictionType) -> InsightRecord:
            return InsightRecord.from_prediction(
                result,
                prediction_type=kind,
                facility_id=facility.id,
                facility_name=facility.name,
                product_id=product.product_id,
                product_name=product.product_name,
                state=facility.state,
                generated_at=generated_at,
            )

        stockout = rule_engine.stockout_prediction(
            _stock_snapshot(product, today), today
        )
        stockout = self._model_step(
            ModelKind.ETS,
            product,
            stockout,
            lambda: self._forecast_stockout(stockout, product, today),
        )
        stockout = self._model_step(
            ModelKind.ANOMALY_FOREST,
            product,
            stockout,
            lambda: self._with_anomaly_score(stockout, product),
        )
        insights = [record(stockout, PredictionType.STOCKOUT)]

        if product.expiring_doses > 0:
            expiry = rule_engine.expiry_risk(_expiry_snapshot(product), today)
            insights.append(record(expiry, PredictionType.EXPIRY))

        if self.model_registry.is_registered(scoped_model_name(ModelKind.RISK_FOREST)):
            classified = self._model_step(
                ModelKind.RISK_FOREST,
                product,
                None,
                lambda: self._classified_risk(facility, product, facility_stock, today),
            )
            if classified is not None:
                insights.append(record(classified, PredictionType.AGGREGATED))

        return insights

    @staticmethod
    def _model_step(
        kind: ModelKind,
        product: ProductStock,
        fallback: Optional[PredictionResult],
        step: Callable[[], PredictionResult],
    ) -> Optional[PredictionResult]:
        """Run one model add-on, keeping ``fallback`` when the model fails."""
        try:
            return step()
        except Exception as exc:
            logger.warning(
                "insights.model_fallback",
                model=kind.value,
                facility_id=product.facility_id,
                product_id=product.product_id,
                error=str(exc),
                exc_info=exc,
            )
            return fallback

    def _forecast_stockout(
        self, rule_result: PredictionResult, product: ProductStock, today: date
    ) -> PredictionResult:
        """Replace the rate-based stockout date with the forecast-based one."""
        entry = self.model_registry.find(
            scoped_model_name(ModelKind.ETS, product.facility_id, product.product_id)
        )
        if entry is None or product.current_stock <= 0:
            return rule_result

        cumulative = np.cumsum(entry.model.forecast(self.forecast_horizon_days))
        depleted = np.nonzero(cumulative >= product.current_stock)[0]
        if depleted.size == 0:
            return rule_result

        days = int(depleted[0]) + 1
        risk_level = rule_engine.stockout_risk_level(days)
        return PredictionResult(
            prediction=rule_engine.stockout_message(days, risk_level),
            expected_date=today + timedelta(days=days),
            confidence=rule_engine.clamp_confidence(ETS_STOCKOUT_CONFIDENCE),
            risk_level=risk_level,
            days_until_event=days,
            metrics={
                **rule_result.metrics,
                "days_until_stockout": days,
                "forecast_method": ModelKind.ETS.value,
                "model_version": entry.version,
            },
        )

    def _with_anomaly_score(
        self, result: PredictionResult, product: ProductStock
    ) -> PredictionResult:
        entry = self.model_registry.find(scoped_model_name(ModelKind.ANOMALY_FOREST))
        if entry is None or not product.history:
            return result

        latest = product.history[-1]
        score = entry.model.score(
            [AnomalyRecord(value=latest.consumption, timestamp=_utc_midnight(latest.date))]
        )[0]
        return dataclasses.replace(
            result, metrics={**result.metrics, "anomaly_score": round(score, 3)}
        )

    def _classified_risk(
        self,
        facility: Facility,
        product: ProductStock,
        facility_stock: float,
        today: date,
    ) -> PredictionResult:
        features = self.preprocessing.build_classification_features(
            product, facility, facility_stock=facility_stock, today=today
        )
        verdict = self.classify_risk.execute(features)
        days = int(features.days_until_stockout)
        return PredictionResult(
            prediction=(
                f"{verdict.risk_level.value}: Combined stock, expiry and cold-chain "
                f"indicators classify this product as {verdict.risk_level.value.lower()} risk."
            ),
            expected_date=today + timedelta(days=days),
            confidence=rule_engine.clamp_confidence(verdict.confidence),
            risk_level=verdict.risk_level,
            days_until_event=days,
            metrics={
                "method": verdict.method.value,
                **{
                    f"p_{level.value.lower()}": round(probability, 3)
                    for level, probability in verdict.probabilities.items()
                },
            },
        )

    def _cold_chain_insight(
        self,
        facility: Facility,
        facility_stock: float,
        today: date,
        generated_at: datetime,
    ) -> InsightRecord:
        result = rule_engine.cold_chain_risk(
            _cold_chain_snapshot(facility, facility_stock, today),
            today,
            horizon_days=self.cold_chain_horizon_days,
        )
        return InsightRecord.from_prediction(
            result,
            prediction_type=PredictionType.COLD_CHAIN,
            facility_id=facility.id,
            facility_name=facility.name,
            product_id=COLD_CHAIN_PRODUCT_ID,
            product_name=COLD_CHAIN_PRODUCT_NAME,
            state=facility.state,
            generated_at=generated_at,
        )


def _matches(record: InsightRecord, query: InsightQueryDTO) -> bool:
    if query.risk_level is not None and record.risk_level is not query.risk_level:
        return False
    if query.state is not None and (record.state or "").lower() != query.state.lower():
        return False
    if query.facility_id is not None and record.facility_id != query.facility_id:
        return False
    if query.product_id is not None and record.product_id != query.product_id:
        return False
    if (
        query.prediction_type is not None
        and record.prediction_type is not query.prediction_type
    ):
        return False
    return True


def filter_insights(
    records: Sequence[InsightRecord], query: InsightQueryDTO
) -> List[InsightRecord]:
    """Apply the query filters and rank by severity, urgency and confidence."""
    return sorted(
        (record for record in records if _matches(record, query)),
        key=InsightRecord.sort_key,
    )


class GetInsightsUseCase:
    """Use case for querying the ranked insight feed."""

    def __init__(self, orchestrator: InsightOrchestrator):
        self.orchestrator = orchestrator

    def execute(self, query: Optional[InsightQueryDTO] = None) -> InsightsResponseDTO:
        query = query or InsightQueryDTO()
        snapshot = self.orchestrator.get_snapshot()
        records = filter_insights(snapshot.records, query)

        logger.info(
            "insights.query",
            filters=query.model_dump(exclude_none=True, mode="json"),
            count=len(records),
        )
        return InsightsResponseDTO(
            data=[InsightDTO.from_entity(record) for record in records],
            count=len(records),
            generated_at=snapshot.generated_at,
        )


class GetAggregatedPredictionsUseCase:
    """Use case computing the three rule predictions fresh for one pair."""

    def __init__(
        self,
        inventory_gateway: IInventoryGateway,
        cold_chain_horizon_days: int = rule_engine.COLD_CHAIN_PROJECTION_DAYS,
        today: Callable[[], date] = date.today,
    ):
        self.inventory_gateway = inventory_gateway
        self.cold_chain_horizon_days = cold_chain_horizon_days
        self._today = today

    def execute(self, facility_id: str, product_id: str) -> AggregatedPredictionsDTO:
        """
        Raises:
            InventoryItemNotFoundError: When the facility or the pair is unknown
        """
        facility = self.inventory_gateway.get_facility(facility_id)
        product = self.inventory_gateway.get_product(facility_id, product_id)
        facility_stock = sum(
            item.current_stock
            for item in self.inventory_gateway.list_products(facility_id)
        )
        today = self._today()
        aggregated = rule_engine.aggregate_predictions(
            _stock_snapshot(product, today),
            _expiry_snapshot(product),
            _cold_chain_snapshot(facility, facility_stock, today),
            today,
            cold_chain_horizon_days=self.cold_chain_horizon_days,
        )
        return AggregatedPredictionsDTO(
            facility_id=facility_id,
            product_id=product_id,
            stockout=PredictionResultDTO.from_entity(aggregated.stockout),
            expiry=PredictionResultDTO.from_entity(aggregated.expiry),
            cold_chain=PredictionResultDTO.from_entity(aggregated.cold_chain),
            overall_risk_level=aggregated.overall_risk_level,
        )
