from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from src.application.dtos.insight_dto import InsightDTO, InsightQueryDTO
from src.domain.entities.insight import InsightRecord
from src.domain.entities.risk import PredictionType, RiskLevel


def test_query_accepts_enum_values() -> None:
    query = InsightQueryDTO(risk_level="CRITICAL", prediction_type="EXPIRY")

    assert query.risk_level is RiskLevel.CRITICAL
    assert query.prediction_type is PredictionType.EXPIRY


def test_query_rejects_unknown_tier() -> None:
    with pytest.raises(ValidationError):
        InsightQueryDTO(risk_level="SEVERE")


def test_insight_dto_from_record() -> None:
    record = InsightRecord(
        facility_id="F1",
        facility_name="Central",
        product_id="BCG",
        product_name="BCG Vaccine",
        prediction_type=PredictionType.STOCKOUT,
        prediction="CRITICAL: Stock will be depleted in 3 days.",
        expected_date=date(2024, 3, 18),
        confidence=95,
        risk_level=RiskLevel.CRITICAL,
        days_until_event=3,
        metrics={"current_stock": 150.0, "temperature_breach": "NO"},
        state="FCT",
    )

    dto = InsightDTO.from_entity(record)
    payload = dto.model_dump(mode="json")

    assert payload["id"] == record.id
    assert payload["risk_level"] == "CRITICAL"
    assert payload["expected_date"] == "2024-03-18"
    assert payload["metrics"]["temperature_breach"] == "NO"
