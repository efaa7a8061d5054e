"""
Synthetic landmark generator for scoring tests.

Creates MediaPipe-style 478x3 face meshes in pixel space (640x480 frame)
with exact control over the three measured quantities: eye aperture,
mid-mouth gap and left/right brow height difference.
"""

import numpy as np

from stress_monitor.vision.landmarks import LandmarkSet

FRAME_SHAPE = (480, 640, 3)

# Face Mesh indices of the points the features read
LEFT_EYE_TOP, LEFT_EYE_BOTTOM = 386, 374
RIGHT_EYE_TOP, RIGHT_EYE_BOTTOM = 159, 145
UPPER_LIP_MID, LOWER_LIP_MID = 0, 17
LEFT_BROW, RIGHT_BROW = 293, 63

EYE_Y, MOUTH_Y, BROW_Y = 200.0, 300.0, 170.0


def make_mesh(
    eye_height: float = 15.0,
    mouth_gap: float = 10.0,
    brow_diff: float = 5.0,
    right_eye_height: float = None,
    num_points: int = 478,
) -> np.ndarray:
    """Build a mesh with the given geometry; other points sit at the face center."""
    right_eye_height = eye_height if right_eye_height is None else right_eye_height

    mesh = np.zeros((num_points, 3), dtype=np.float32)
    mesh[:, 0] = 320.0
    mesh[:, 1] = 240.0

    mesh[LEFT_EYE_TOP, :2] = (360.0, EYE_Y - eye_height / 2)
    mesh[LEFT_EYE_BOTTOM, :2] = (360.0, EYE_Y + eye_height / 2)
    mesh[RIGHT_EYE_TOP, :2] = (280.0, EYE_Y - right_eye_height / 2)
    mesh[RIGHT_EYE_BOTTOM, :2] = (280.0, EYE_Y + right_eye_height / 2)

    mesh[UPPER_LIP_MID, :2] = (320.0, MOUTH_Y - mouth_gap / 2)
    mesh[LOWER_LIP_MID, :2] = (320.0, MOUTH_Y + mouth_gap / 2)

    mesh[LEFT_BROW, :2] = (360.0, BROW_Y - brow_diff)
    mesh[RIGHT_BROW, :2] = (280.0, BROW_Y)
    return mesh


def make_landmark_set(**kwargs) -> LandmarkSet:
    """LandmarkSet built through the model boundary (from_mesh)."""
    return LandmarkSet.from_mesh(make_mesh(**kwargs))


def make_partial_landmark_set(drop_region: str, **kwargs) -> LandmarkSet:
    """LandmarkSet with one region removed, as an incomplete model output."""
    full = make_landmark_set(**kwargs)
    regions = {name: points for name, points in full.regions.items() if name != drop_region}
    return LandmarkSet(regions=regions, mesh=full.mesh)


def make_frame() -> np.ndarray:
    return np.zeros(FRAME_SHAPE, dtype=np.uint8)
