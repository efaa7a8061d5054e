"""
Face landmark model backed by MediaPipe Face Mesh.

Wraps MediaPipe with lazy loading, error translation and conversion of
its normalized landmarks into typed LandmarkSet snapshots.
"""

from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np
from loguru import logger

from ..errors import InferenceError, LoadError
from .landmarks import LandmarkSet

# Lazy import for MediaPipe (heavy dependency)
_face_mesh_module = None


def _get_face_mesh_module():
    """Lazy load the MediaPipe Face Mesh solution."""
    global _face_mesh_module
    if _face_mesh_module is None:
        logger.info("Loading MediaPipe (this may take a moment)...")
        import mediapipe as mp
        _face_mesh_module = mp.solutions.face_mesh
        logger.info("MediaPipe loaded")
    return _face_mesh_module


@dataclass
class ModelConfig:
    """Configuration for the landmark model."""
    max_num_faces: int = 1  # Only the first face is scored
    refine_landmarks: bool = True  # Adds iris points (478 instead of 468)
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    static_image_mode: bool = False  # Tracking mode for continuous video


class FaceMeshModel:
    """
    MediaPipe Face Mesh wrapper.

    Use FaceMeshModel.load() to construct; it raises LoadError instead of
    leaking MediaPipe's own exceptions.
    """

    def __init__(self, face_mesh, config: ModelConfig):
        self._face_mesh = face_mesh
        self.config = config
        self._closed = False

    @classmethod
    def load(cls, config: Optional[ModelConfig] = None) -> "FaceMeshModel":
        """
        Load the Face Mesh model.

        Args:
            config: Model configuration, uses defaults if None

        Returns:
            Ready-to-use FaceMeshModel

        Raises:
            LoadError: If MediaPipe is unavailable or the graph fails to build
        """
        config = config or ModelConfig()
        try:
            face_mesh_module = _get_face_mesh_module()
            face_mesh = face_mesh_module.FaceMesh(
                static_image_mode=config.static_image_mode,
                max_num_faces=config.max_num_faces,
                refine_landmarks=config.refine_landmarks,
                min_detection_confidence=config.min_detection_confidence,
                min_tracking_confidence=config.min_tracking_confidence,
            )
        except Exception as e:
            raise LoadError(f"Failed to load face landmark model: {e}") from e

        logger.info(f"Face landmark model ready (max_num_faces={config.max_num_faces})")
        return cls(face_mesh, config)

    def detect(self, frame: np.ndarray) -> List[LandmarkSet]:
        """
        Detect face landmarks in a frame.

        Args:
            frame: BGR image as numpy array (OpenCV format)

        Returns:
            One LandmarkSet per detected face, possibly empty

        Raises:
            InferenceError: If the model fails on this frame
            MalformedLandmarks: If the model returns an incomplete mesh
        """
        if frame is None or frame.size == 0:
            return []
        if self._closed:
            raise InferenceError("Landmark model is closed")

        height, width = frame.shape[:2]
        try:
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            results = self._face_mesh.process(rgb)
        except Exception as e:
            raise InferenceError(f"Landmark inference failed: {e}") from e

        if not results.multi_face_landmarks:
            return []

        faces = []
        for face_landmarks in results.multi_face_landmarks:
            mesh = np.array(
                [(lm.x * width, lm.y * height, lm.z) for lm in face_landmarks.landmark],
                dtype=np.float32,
            )
            faces.append(LandmarkSet.from_mesh(mesh))
        return faces

    def close(self) -> None:
        """Release the MediaPipe graph."""
        if self._closed:
            return
        self._closed = True
        self._face_mesh.close()
        logger.info("Face landmark model closed")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
