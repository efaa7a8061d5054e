"""
Normalization of raw features into [0, 1].
"""

import math
from dataclasses import dataclass, asdict
from typing import Optional

from .features import RawFeatures


@dataclass
class NormalizerConfig:
    """Scale constants, in the landmark coordinate space (pixels)."""
    eye_scale: float = 30.0
    mouth_scale: float = 20.0
    brow_scale: float = 10.0


@dataclass(frozen=True)
class NormalizedFeatures:
    """Raw features mapped into [0, 1]."""
    eye_openness: float
    mouth_tension: float
    brow_furrow: float

    def to_dict(self) -> dict:
        return asdict(self)


def clamp_unit(value: float) -> float:
    """Clamp to [0, 1]; NaN maps to 0."""
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


class ScoreNormalizer:
    """Divides each raw feature by its scale and clamps. Never fails."""

    def __init__(self, config: Optional[NormalizerConfig] = None):
        self.config = config or NormalizerConfig()

    def normalize(self, raw: RawFeatures) -> NormalizedFeatures:
        return NormalizedFeatures(
            eye_openness=clamp_unit(raw.eye_openness / self.config.eye_scale),
            mouth_tension=clamp_unit(raw.mouth_tension / self.config.mouth_scale),
            brow_furrow=clamp_unit(raw.brow_furrow / self.config.brow_scale),
        )

    __call__ = normalize
