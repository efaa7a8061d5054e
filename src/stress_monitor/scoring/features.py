"""
Geometric feature extraction from facial landmarks.

Turns one LandmarkSet into three raw measurements in source-pixel units.
"""

from dataclasses import dataclass, asdict

from ..vision.landmarks import LandmarkSet

# Contour points used by each feature
EYE_UPPER_INDEX = 3
EYE_LOWER_INDEX = 7
LIP_MID_INDEX = 5
BROW_INDEX = 2


@dataclass(frozen=True)
class RawFeatures:
    """Raw geometric measurements of one face, in pixels."""
    eye_openness: float
    mouth_tension: float
    brow_furrow: float

    def to_dict(self) -> dict:
        return asdict(self)


def _vertical_gap(a, b) -> float:
    return abs(float(a[1]) - float(b[1]))


class FeatureExtractor:
    """
    Computes RawFeatures from a LandmarkSet.

    - eye_openness: mean vertical aperture of both eyes (contour points 3/7)
    - mouth_tension: vertical gap between the outer lip mid points (index 5)
    - brow_furrow: height difference between left and right brow (index 2)
      (an asymmetry measure, not furrow depth)

    Stateless; extract() raises MalformedLandmarks when a referenced region
    or point is absent.
    """

    def extract(self, landmarks: LandmarkSet) -> RawFeatures:
        left_eye = _vertical_gap(
            landmarks.point("left_eye_upper", EYE_UPPER_INDEX),
            landmarks.point("left_eye_upper", EYE_LOWER_INDEX),
        )
        right_eye = _vertical_gap(
            landmarks.point("right_eye_upper", EYE_UPPER_INDEX),
            landmarks.point("right_eye_upper", EYE_LOWER_INDEX),
        )
        mouth = _vertical_gap(
            landmarks.point("lips_upper_outer", LIP_MID_INDEX),
            landmarks.point("lips_lower_outer", LIP_MID_INDEX),
        )
        brow = _vertical_gap(
            landmarks.point("left_eyebrow_upper", BROW_INDEX),
            landmarks.point("right_eyebrow_upper", BROW_INDEX),
        )

        return RawFeatures(
            eye_openness=(left_eye + right_eye) / 2.0,
            mouth_tension=mouth,
            brow_furrow=brow,
        )

    __call__ = extract
