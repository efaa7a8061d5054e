"""
Scoring module for stress estimation.

Provides feature extraction, normalization and the weighted stress scorer.
"""

from .features import FeatureExtractor, RawFeatures
from .normalizer import NormalizedFeatures, NormalizerConfig, ScoreNormalizer
from .scorer import ScorerConfig, StressLabel, StressReading, StressScorer

__all__ = [
    # Features
    "FeatureExtractor",
    "RawFeatures",
    # Normalizer
    "NormalizedFeatures",
    "NormalizerConfig",
    "ScoreNormalizer",
    # Scorer
    "ScorerConfig",
    "StressLabel",
    "StressReading",
    "StressScorer",
]
