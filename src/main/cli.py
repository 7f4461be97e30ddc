"""
Command-line Entry Point - Main Layer

Loads an inventory snapshot, generates the ranked insights and prints them
as JSON on stdout. Logs go to stderr so the output stays machine-readable.

    python -m src.main --snapshot inventory.json --risk-level CRITICAL
"""

import argparse
import sys
from typing import List, Optional

from src.application.dtos.insight_dto import InsightQueryDTO
from src.domain.entities.errors import DomainError
from src.domain.entities.risk import PredictionType, RiskLevel
from src.main.config import get_settings
from src.main.container import init_container
from src.shared import configure_logging, get_logger, update_logging_from_settings

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.main",
        description="Generate ranked vaccine supply-chain risk insights.",
    )
    parser.add_argument(
        "--snapshot",
        help="JSON inventory snapshot (defaults to DATA_SNAPSHOT_PATH)",
    )
    parser.add_argument(
        "--risk-level",
        type=str.upper,
        choices=[level.value for level in RiskLevel],
    )
    parser.add_argument("--state", help="Only facilities located in this state")
    parser.add_argument("--facility-id")
    parser.add_argument("--product-id")
    parser.add_argument(
        "--prediction-type",
        type=str.upper,
        choices=[kind.value for kind in PredictionType],
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the insight pipeline once; returns the process exit code."""
    args = build_parser().parse_args(argv)

    configure_logging(stream=sys.stderr)
    settings = get_settings()
    if args.snapshot:
        settings.data.snapshot_path = args.snapshot
    update_logging_from_settings(settings, stream=sys.stderr)

    query = InsightQueryDTO(
        risk_level=args.risk_level,
        state=args.state,
        facility_id=args.facility_id,
        product_id=args.product_id,
        prediction_type=args.prediction_type,
    )

    try:
        container = init_container(settings)
        response = container.get_insights_use_case().execute(query)
    except DomainError as exc:
        logger.error("cli.failed", error=exc.message, details=exc.details)
        return 1

    sys.stdout.write(response.model_dump_json(indent=2))
    sys.stdout.write("\n")
    return 0
