"""
Vision module for face landmark acquisition.

Provides the camera stream, the MediaPipe landmark model and the typed
landmark snapshots they produce.
"""

from .camera import Camera, CameraConfig
from .landmark_model import FaceMeshModel, ModelConfig
from .landmarks import LandmarkSet, REGION_INDICES, MIN_MESH_POINTS

__all__ = [
    "Camera",
    "CameraConfig",
    "FaceMeshModel",
    "ModelConfig",
    "LandmarkSet",
    "REGION_INDICES",
    "MIN_MESH_POINTS",
]
