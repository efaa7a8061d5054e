"""
Typed facial landmark snapshots.

A LandmarkSet holds one frame's landmarks for the first detected face:
named fixed-arity contours plus the dense Face Mesh. The arrays are
read-only; a snapshot is built once per inference and dropped after
feature extraction.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

import numpy as np

from ..errors import MalformedLandmarks


# MediaPipe Face Mesh indices per region. "left"/"right" are the subject's.
# Eye contours run corner -> upper lid -> opposite corner -> lower lid, so
# points 3 and 7 bracket the vertical aperture.
REGION_INDICES: Dict[str, Tuple[int, ...]] = {
    "left_eye_upper": (263, 466, 388, 386, 384, 398, 362, 374, 390),
    "right_eye_upper": (33, 246, 161, 159, 157, 173, 133, 145, 163),
    "lips_upper_outer": (61, 185, 40, 39, 37, 0, 267, 269, 270, 409, 291),
    "lips_lower_outer": (61, 146, 91, 181, 84, 17, 314, 405, 321, 375, 291),
    "left_eyebrow_upper": (383, 300, 293, 334, 296, 336, 285, 417),
    "right_eyebrow_upper": (156, 70, 63, 105, 66, 107, 55, 193),
}

# 468 without iris refinement, 478 with it
MIN_MESH_POINTS = 468


def _freeze(points) -> np.ndarray:
    """Copy points into a read-only float32 array of shape (k, 2|3)."""
    arr = np.array(points, dtype=np.float32)
    if arr.size == 0:
        arr = arr.reshape(0, 2)
    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise MalformedLandmarks(f"Expected (k, 2) or (k, 3) points, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class LandmarkSet:
    """Landmarks of one detected face in one frame."""
    regions: Mapping[str, np.ndarray]
    mesh: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=np.float32))

    def __post_init__(self):
        regions = {name: _freeze(points) for name, points in dict(self.regions).items()}
        object.__setattr__(self, "regions", MappingProxyType(regions))
        object.__setattr__(self, "mesh", _freeze(self.mesh))

    @classmethod
    def from_mesh(cls, mesh) -> "LandmarkSet":
        """
        Build a LandmarkSet from a dense Face Mesh.

        Args:
            mesh: (N, 2) or (N, 3) landmark array in pixel coordinates

        Returns:
            LandmarkSet with every region in REGION_INDICES populated

        Raises:
            MalformedLandmarks: If the mesh is empty, wrongly shaped or
                has fewer than MIN_MESH_POINTS points
        """
        mesh = np.asarray(mesh, dtype=np.float32)
        if mesh.ndim != 2 or mesh.shape[1] not in (2, 3):
            raise MalformedLandmarks(f"Expected (N, 2) or (N, 3) mesh, got shape {mesh.shape}")
        if mesh.shape[0] < MIN_MESH_POINTS:
            raise MalformedLandmarks(
                f"Incomplete face mesh: {mesh.shape[0]} points, need {MIN_MESH_POINTS}"
            )

        regions = {name: mesh[list(indices)] for name, indices in REGION_INDICES.items()}
        return cls(regions=regions, mesh=mesh)

    def region(self, name: str) -> np.ndarray:
        """Get a region's points, raising MalformedLandmarks if absent."""
        points = self.regions.get(name)
        if points is None:
            raise MalformedLandmarks(f"Missing landmark region '{name}'", region=name)
        return points

    def point(self, name: str, index: int) -> np.ndarray:
        """Get one point of a region, raising MalformedLandmarks if absent."""
        points = self.region(name)
        if not 0 <= index < len(points):
            raise MalformedLandmarks(
                f"Region '{name}' has {len(points)} points, index {index} is absent",
                region=name,
                index=index,
            )
        return points[index]

    def mesh_2d(self) -> np.ndarray:
        """Dense mesh as (N, 2) x/y points for overlays."""
        return self.mesh[:, :2]
