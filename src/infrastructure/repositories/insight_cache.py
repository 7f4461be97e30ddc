"""
In-Memory Insight Cache - Infrastructure Layer

Single-slot cache for the latest ``InsightSnapshot`` with a time-to-live.
"""

import threading
import time
from typing import Callable, Optional

from src.domain.entities.insight import InsightSnapshot
from src.domain.repositories.insight_cache import IInsightCache
from src.shared.consts import DEFAULT_CACHE_TTL_SECONDS


class InMemoryInsightCache(IInsightCache):
    """Snapshot cache that expires ``ttl_seconds`` after each write."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[InsightSnapshot] = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def get(self) -> Optional[InsightSnapshot]:
        with self._lock:
            if self._snapshot is None or self._clock() >= self._expires_at:
                return None
            return self._snapshot

    def set(self, snapshot: InsightSnapshot, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._snapshot = snapshot
            self._expires_at = self._clock() + ttl

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None
            self._expires_at = 0.0
