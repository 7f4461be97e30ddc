"""Domain entities for anomaly detection over stock movements."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional, Union


@dataclass(frozen=True)
class AnomalyRecord:
    value: float
    timestamp: datetime
    context: Optional[Mapping[str, Union[int, float, str]]] = None
