"""
Domain service - Isolation Forest

Anomaly detector for stock movements. Points that random splits isolate in
few steps get a short average path length and therefore a score close to 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from src.domain.entities.anomaly import AnomalyRecord
from src.domain.entities.errors import (
    InsufficientDataError,
    ModelConfigurationError,
    ModelNotTrainedError,
)

EULER_GAMMA = 0.5772156649

RandomState = Union[np.random.Generator, int, None]


def average_path_length(n: int) -> float:
    """Expected path length of an unsuccessful BST search over ``n`` points."""
    if n <= 1:
        return 0.0
    return 2 * (math.log(n - 1) + EULER_GAMMA) - 2 * (n - 1) / n


@dataclass
class _IsolationNode:
    size: int = 0
    split_value: float = 0.0
    left: Optional["_IsolationNode"] = None
    right: Optional["_IsolationNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None


class IsolationTree:
    def __init__(self, max_depth: int, rng: np.random.Generator):
        self.max_depth = max_depth
        self._rng = rng
        self.root: Optional[_IsolationNode] = None

    def build(self, values: np.ndarray) -> "IsolationTree":
        self.root = self._grow(values, 0)
        return self

    def _grow(self, values: np.ndarray, depth: int) -> _IsolationNode:
        if values.size <= 1 or depth >= self.max_depth:
            return _IsolationNode(size=int(values.size))

        low, high = float(values.min()), float(values.max())
        if low == high:
            return _IsolationNode(size=int(values.size))

        split_value = float(self._rng.uniform(low, high))
        mask = values < split_value
        return _IsolationNode(
            size=int(values.size),
            split_value=split_value,
            left=self._grow(values[mask], depth + 1),
            right=self._grow(values[~mask], depth + 1),
        )

    def path_length(self, value: float) -> float:
        node = self.root
        depth = 0
        while node is not None and not node.is_leaf:
            node = node.left if value < node.split_value else node.right
            depth += 1
        return depth + average_path_length(node.size if node else 0)


class IsolationForest:
    """Ensemble of isolation trees over the scalar ``value`` of each record."""

    name = "isolation-forest"

    def __init__(
        self,
        num_trees: int = 100,
        sub_sampling_size: int = 256,
        max_depth: int = 8,
        rng: RandomState = None,
    ):
        if num_trees < 1 or sub_sampling_size < 2 or max_depth < 1:
            raise ModelConfigurationError(
                "Invalid isolation forest configuration",
                {
                    "num_trees": num_trees,
                    "sub_sampling_size": sub_sampling_size,
                    "max_depth": max_depth,
                },
            )
        self.num_trees = num_trees
        self.sub_sampling_size = sub_sampling_size
        self.max_depth = max_depth
        self._rng = np.random.default_rng(rng)
        self.trees: List[IsolationTree] = []
        self.sample_size = 0
        self.fitted = False

    @staticmethod
    def _values(records: Sequence[AnomalyRecord]) -> np.ndarray:
        return np.array([record.value for record in records], dtype=float)

    def fit(self, records: Sequence[AnomalyRecord]) -> "IsolationForest":
        """
        Build ``num_trees`` trees, each on its own subsample drawn without
        replacement.

        Raises:
            InsufficientDataError: If fewer than two records are given.
        """
        values = self._values(records)
        if values.size < 2:
            raise InsufficientDataError(required=2, received=int(values.size))

        self.sample_size = min(self.sub_sampling_size, int(values.size))
        self.trees = [
            IsolationTree(self.max_depth, self._rng).build(
                self._rng.choice(values, size=self.sample_size, replace=False)
            )
            for _ in range(self.num_trees)
        ]
        self.fitted = True
        return self

    def path_length(self, value: float) -> float:
        """Average path length of ``value`` across the forest."""
        if not self.fitted:
            raise ModelNotTrainedError(self.name)
        return float(np.mean([tree.path_length(value) for tree in self.trees]))

    def score(self, records: Sequence[AnomalyRecord]) -> List[float]:
        """Anomaly scores in [0, 1]; higher means more anomalous."""
        if not self.fitted:
            raise ModelNotTrainedError(self.name)
        normaliser = average_path_length(self.sample_size)
        return [
            float(2 ** (-self.path_length(record.value) / normaliser))
            for record in records
        ]

    def detect_anomalies(
        self, records: Sequence[AnomalyRecord], threshold: float = 0.5
    ) -> List[AnomalyRecord]:
        scores = self.score(records)
        return [record for record, value in zip(records, scores) if value > threshold]
