"""
Domain service - Random Forest risk classifier

Bagged CART trees over the eight ``ClassificationFeatures`` fields plus the
weighted-score rule classifier used when no forest has been trained.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence, Tuple, Union

import numpy as np

from src.domain.entities.classification import (
    FEATURE_NAMES,
    ClassificationFeatures,
    ClassificationResult,
)
from src.domain.entities.errors import (
    InsufficientDataError,
    ModelConfigurationError,
    ModelNotTrainedError,
)
from src.domain.entities.risk import RiskLevel

RandomState = Union[np.random.Generator, int, None]
Label = Hashable


def gini_impurity(labels: Sequence[Label]) -> float:
    """``1 - sum(p_k^2)`` over the label distribution; 0 for no labels."""
    total = len(labels)
    if total == 0:
        return 0.0
    return 1.0 - sum((count / total) ** 2 for count in Counter(labels).values())


def _majority(labels: Sequence[Label]) -> Label:
    return Counter(labels).most_common(1)[0][0]


@dataclass
class _DecisionNode:
    label: Optional[Label] = None
    feature_index: int = 0
    threshold: float = 0.0
    left: Optional["_DecisionNode"] = None
    right: Optional["_DecisionNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None


class DecisionTree:
    def __init__(
        self,
        max_depth: int,
        min_samples_split: int,
        max_features: int,
        rng: np.random.Generator,
    ):
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.max_features = max_features
        self._rng = rng
        self.root: Optional[_DecisionNode] = None
        self.split_counts = np.zeros(len(FEATURE_NAMES), dtype=int)

    def fit(self, X: np.ndarray, y: List[Label]) -> "DecisionTree":
        self.split_counts = np.zeros(X.shape[1], dtype=int)
        self.root = self._grow(X, y, 0)
        return self

    def _grow(self, X: np.ndarray, y: List[Label], depth: int) -> _DecisionNode:
        if (
            depth >= self.max_depth
            or len(y) < self.min_samples_split
            or len(set(y)) == 1
        ):
            return _DecisionNode(label=_majority(y))

        feature_index, threshold, gain = self._best_split(X, y)
        if gain <= 0:
            return _DecisionNode(label=_majority(y))

        mask = X[:, feature_index] < threshold
        left_labels = [label for label, go_left in zip(y, mask) if go_left]
        right_labels = [label for label, go_left in zip(y, mask) if not go_left]
        self.split_counts[feature_index] += 1
        return _DecisionNode(
            feature_index=feature_index,
            threshold=threshold,
            left=self._grow(X[mask], left_labels, depth + 1),
            right=self._grow(X[~mask], right_labels, depth + 1),
        )

    def _best_split(self, X: np.ndarray, y: List[Label]) -> Tuple[int, float, float]:
        parent = gini_impurity(y)
        total = len(y)
        labels = np.array(y, dtype=object)
        candidates = self._rng.permutation(X.shape[1])[: self.max_features]

        best_feature, best_threshold, best_gain = 0, 0.0, 0.0
        for feature_index in candidates:
            column = X[:, feature_index]
            for threshold in np.unique(column):
                mask = column < threshold
                left, right = labels[mask], labels[~mask]
                weighted = (
                    len(left) / total * gini_impurity(list(left))
                    + len(right) / total * gini_impurity(list(right))
                )
                gain = parent - weighted
                if gain > best_gain:
                    best_feature = int(feature_index)
                    best_threshold = float(threshold)
                    best_gain = gain
        return best_feature, best_threshold, best_gain

    def predict(self, x: np.ndarray) -> Label:
        node = self.root
        while node is not None and not node.is_leaf:
            node = node.left if x[node.feature_index] < node.threshold else node.right
        return node.label if node else None


class RandomForestClassifier:
    """Majority-vote forest of bootstrapped decision trees."""

    name = "random-forest"

    def __init__(
        self,
        num_trees: int = 50,
        max_depth: int = 10,
        min_samples_split: int = 2,
        max_features: Optional[int] = None,
        rng: RandomState = None,
    ):
        if num_trees < 1 or max_depth < 1 or min_samples_split < 2:
            raise ModelConfigurationError(
                "Invalid random forest configuration",
                {
                    "num_trees": num_trees,
                    "max_depth": max_depth,
                    "min_samples_split": min_samples_split,
                },
            )
        if max_features is not None and not 1 <= max_features <= len(FEATURE_NAMES):
            raise ModelConfigurationError(
                f"max_features must be between 1 and {len(FEATURE_NAMES)}",
                {"max_features": max_features},
            )

        self.num_trees = num_trees
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.max_features = max_features or int(math.floor(math.sqrt(len(FEATURE_NAMES))))
        self._rng = np.random.default_rng(rng)
        self.trees: List[DecisionTree] = []
        self.classes: List[Label] = []
        self.fitted = False

    def fit(
        self, features: Sequence[ClassificationFeatures], labels: Sequence[Label]
    ) -> "RandomForestClassifier":
        """
        Train every tree on a bootstrap sample of the training set.

        Raises:
            ModelConfigurationError: If features and labels differ in length.
            InsufficientDataError: If the training set is empty.
        """
        if len(features) != len(labels):
            raise ModelConfigurationError(
                "Features and labels must have the same length",
                {"features": len(features), "labels": len(labels)},
            )
        if not features:
            raise InsufficientDataError(required=1, received=0)

        X = np.array([item.as_vector() for item in features], dtype=float)
        y = list(labels)
        self.classes = list(dict.fromkeys(y))

        n = len(y)
        self.trees = []
        for _ in range(self.num_trees):
            sample = self._rng.integers(0, n, size=n)
            tree = DecisionTree(
                self.max_depth, self.min_samples_split, self.max_features, self._rng
            )
            self.trees.append(tree.fit(X[sample], [y[i] for i in sample]))

        self.fitted = True
        return self

    def predict_proba(self, features: ClassificationFeatures) -> Dict[Label, float]:
        if not self.fitted:
            raise ModelNotTrainedError(self.name)
        x = np.array(features.as_vector(), dtype=float)
        votes = Counter(tree.predict(x) for tree in self.trees)
        return {label: votes.get(label, 0) / self.num_trees for label in self.classes}

    def predict(self, features: ClassificationFeatures) -> Label:
        """Majority-vote label; a tie goes to the class seen first in training."""
        probabilities = self.predict_proba(features)
        return max(probabilities, key=probabilities.__getitem__)

    def feature_importances(self) -> Dict[str, float]:
        """Share of all splits made on each feature."""
        if not self.fitted:
            raise ModelNotTrainedError(self.name)
        counts = np.sum([tree.split_counts for tree in self.trees], axis=0)
        total = counts.sum()
        if total == 0:
            return {name: 0.0 for name in FEATURE_NAMES}
        return {
            name: float(count / total) for name, count in zip(FEATURE_NAMES, counts)
        }


def rule_based_classification(features: ClassificationFeatures) -> ClassificationResult:
    """Weighted tier scores from stockout, expiry and capacity pressure."""
    scores = {level: 0.0 for level in RiskLevel}

    days = features.days_until_stockout
    if days <= 7:
        scores[RiskLevel.CRITICAL] += 0.4
    elif days <= 14:
        scores[RiskLevel.HIGH] += 0.3
    elif days <= 30:
        scores[RiskLevel.MEDIUM] += 0.2
    else:
        scores[RiskLevel.LOW] += 0.1

    if features.expiry_risk > 20:
        scores[RiskLevel.CRITICAL] += 0.3
    elif features.expiry_risk > 10:
        scores[RiskLevel.HIGH] += 0.2
    elif features.expiry_risk > 5:
        scores[RiskLevel.MEDIUM] += 0.1
    else:
        scores[RiskLevel.LOW] += 0.05

    if features.capacity_utilization > 90:
        scores[RiskLevel.CRITICAL] += 0.3
    elif features.capacity_utilization > 80:
        scores[RiskLevel.HIGH] += 0.2
    elif features.capacity_utilization > 70:
        scores[RiskLevel.MEDIUM] += 0.1
    else:
        scores[RiskLevel.LOW] += 0.05

    # Sums such as 0.1 + 0.05 + 0.05 must compare equal to 0.2.
    scores = {level: round(score, 6) for level, score in scores.items()}
    max_score = max(scores.values())
    risk_level = min(
        (level for level, score in scores.items() if score == max_score),
        key=lambda level: level.severity,
    )
    total = sum(scores.values())

    return ClassificationResult(
        risk_level=risk_level,
        confidence=int(round(max_score * 100)),
        probabilities={level: score / total for level, score in scores.items()},
    )
