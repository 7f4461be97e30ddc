"""
Domain Entities - Model

Tagged model kinds and the registry entry that owns a fitted model instance.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ModelKind(str, Enum):
    """Kind of predictor that produced (or can produce) a result."""

    RULE_BASED = "rule-based"
    ETS = "ets"
    ANOMALY_FOREST = "isolation-forest"
    RISK_FOREST = "random-forest"
    # Reserved for sequence networks / ensembles; nothing implements it yet.
    NOT_IMPLEMENTED = "not-implemented"


def scoped_model_name(
    kind: ModelKind, facility_id: Optional[str] = None, product_id: Optional[str] = None
) -> str:
    """Registry name of a model, optionally scoped to a facility/product pair."""
    parts = [kind.value]
    if facility_id:
        parts.append(facility_id)
    if product_id:
        parts.append(product_id)
    return "/".join(parts)


@dataclass
class RegisteredModel:
    """A fitted model instance stored in the registry under name:version."""

    name: str
    version: str
    kind: ModelKind
    model: Any
    metrics: Dict[str, Union[int, float, str]] = field(default_factory=dict)
    registered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
