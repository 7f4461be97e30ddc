"""
Insight Cache Interface

Key-value store with expiry that holds the latest ``InsightSnapshot``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities.insight import InsightSnapshot


class IInsightCache(ABC):
    """Interface for insight cache implementations."""

    @abstractmethod
    def get(self) -> Optional[InsightSnapshot]:
        """
        Return the cached snapshot.

        Returns:
            The snapshot while it is still live, None once it expired or
            when nothing was stored
        """
        pass

    @abstractmethod
    def set(self, snapshot: InsightSnapshot, ttl_seconds: Optional[float] = None) -> None:
        """Replace the cached snapshot."""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass
