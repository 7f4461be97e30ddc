from __future__ import annotations

import json

import pytest

from src.main.cli import build_parser, main

SNAPSHOT = {
    "facilities": [
        {
            "id": "FAC-1",
            "name": "Central Hospital",
            "state": "FCT",
            "cold_chain_capacity": 1000,
            "ambient_temperature": 12.0,
        }
    ],
    "products": [
        {
            "facility_id": "FAC-1",
            "product_id": "BCG",
            "product_name": "BCG Vaccine",
            "current_stock": 150,
            "avg_daily_consumption": 50,
        }
    ],
}


@pytest.fixture()
def snapshot_file(tmp_path):
    path = tmp_path / "inventory.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return str(path)


def test_parser_normalises_enum_arguments() -> None:
    args = build_parser().parse_args(["--risk-level", "critical"])

    assert args.risk_level == "CRITICAL"


def test_parser_rejects_unknown_tier() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--risk-level", "severe"])


def test_main_prints_ranked_insights(snapshot_file, capsys) -> None:
    exit_code = main(["--snapshot", snapshot_file])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["count"] == 2
    assert {item["prediction_type"] for item in payload["data"]} == {
        "STOCKOUT",
        "COLD_CHAIN",
    }
    assert all(item["risk_level"] == "CRITICAL" for item in payload["data"])


def test_main_applies_filters(snapshot_file, capsys) -> None:
    exit_code = main(["--snapshot", snapshot_file, "--prediction-type", "cold_chain"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["count"] == 1
    assert payload["data"][0]["product_id"] == "COLD_CHAIN"


def test_main_reports_unreadable_snapshot(tmp_path, capsys) -> None:
    exit_code = main(["--snapshot", str(tmp_path / "missing.json")])

    assert exit_code == 1
    assert capsys.readouterr().out == ""
