"""
Stress scorer for normalized facial features.

Combines normalized features into a single weighted score and maps it to
a discrete label.
"""

import time
from enum import Enum
from typing import Optional
from dataclasses import dataclass, asdict, field

from .normalizer import NormalizedFeatures, clamp_unit


class StressLabel(Enum):
    """Discrete stress level."""
    LOW = "Low Stress"
    MODERATE = "Moderate Stress"
    HIGH = "High Stress"

    def __str__(self) -> str:
        return self.value


@dataclass
class ScorerConfig:
    """Configuration for stress scoring."""
    eye_weight: float = 0.3
    mouth_weight: float = 0.3
    brow_weight: float = 0.4
    moderate_threshold: float = 0.3  # score >= this is Moderate
    high_threshold: float = 0.6  # score >= this is High

    def __post_init__(self):
        total = self.eye_weight + self.mouth_weight + self.brow_weight
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Feature weights must sum to 1, got {total}")
        if not 0.0 <= self.moderate_threshold <= self.high_threshold <= 1.0:
            raise ValueError(
                "Thresholds must satisfy 0 <= moderate_threshold <= high_threshold <= 1"
            )


@dataclass(frozen=True)
class StressReading:
    """Published stress estimate for one analyzed frame."""
    score: float  # In [0, 1]
    label: StressLabel
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["label"] = self.label.value
        return data


class StressScorer:
    """
    Weighted stress scorer.

    Formula: score = 0.3 * eye + 0.3 * mouth + 0.4 * brow

    Labels are half-open at the lower bound: score < 0.3 is Low,
    0.3 <= score < 0.6 is Moderate, score >= 0.6 is High.
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        """
        Initialize the scorer.

        Args:
            config: Scoring configuration, uses defaults if None
        """
        self.config = config or ScorerConfig()

    def compute_score(self, features: NormalizedFeatures) -> float:
        """Weighted sum of the normalized features, clipped to [0, 1]."""
        score = (
            self.config.eye_weight * features.eye_openness
            + self.config.mouth_weight * features.mouth_tension
            + self.config.brow_weight * features.brow_furrow
        )
        return clamp_unit(score)

    def label_for(self, score: float) -> StressLabel:
        """Map a score to its label."""
        if score >= self.config.high_threshold:
            return StressLabel.HIGH
        if score >= self.config.moderate_threshold:
            return StressLabel.MODERATE
        return StressLabel.LOW

    def score(self, features: NormalizedFeatures, timestamp: Optional[float] = None) -> StressReading:
        """
        Score normalized features.

        Args:
            features: NormalizedFeatures in [0, 1]
            timestamp: Optional timestamp, uses current time if None

        Returns:
            StressReading with score and label
        """
        value = self.compute_score(features)
        return StressReading(
            score=value,
            label=self.label_for(value),
            timestamp=time.time() if timestamp is None else timestamp,
        )

    __call__ = score
