"""
Camera stream with threaded frame buffer.

Provides non-blocking access to the newest camera frame for the
detection loop, with acquire/release lifecycle and a video file fallback.
"""

import time
import threading
from typing import Iterator, Optional, Tuple, Dict, Union
from collections import deque
from pathlib import Path
from dataclasses import dataclass

import cv2
import numpy as np
from loguru import logger

from ..errors import AcquireError


@dataclass
class CameraConfig:
    """Configuration for camera acquisition."""
    device_id: int = 0  # Camera device index
    width: int = 640
    height: int = 480
    fps: int = 30
    buffer_size: int = 10  # Max frames in buffer
    warmup_frames: int = 5  # Frames to discard on startup
    first_frame_timeout: float = 2.0  # Seconds to wait for the first frame
    fallback_video: Optional[str] = None  # Video file used when no camera opens

    def constraints(self) -> Dict[str, int]:
        """Frame constraints requested from the device."""
        return {"width": self.width, "height": self.height, "fps": self.fps}


class Camera:
    """
    Camera stream with a background capture thread.

    acquire() opens the device (or the fallback video) and raises
    AcquireError when neither is available. release() is idempotent and
    safe to call from any thread; only the first call touches the device.
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        """
        Initialize the camera.

        Args:
            config: Camera configuration, uses defaults if None
        """
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_buffer: deque = deque(maxlen=self.config.buffer_size)
        self._lock = threading.Lock()
        self._release_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_error: Optional[str] = None
        self._using_fallback = False

    def _candidate_sources(self) -> Iterator[Tuple[Union[int, str], bool]]:
        """Yield (source, is_fallback) in the order they should be tried."""
        yield self.config.device_id, False

        if self.config.fallback_video:
            path = Path(self.config.fallback_video)
            if path.exists():
                yield str(path), True
            else:
                logger.warning(f"Fallback video not found: {path}")

    def _apply_constraints(self, cap: cv2.VideoCapture) -> None:
        constraints = self.config.constraints()
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints["width"])
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints["height"])
        cap.set(cv2.CAP_PROP_FPS, constraints["fps"])

    def _open_capture(self) -> Optional[cv2.VideoCapture]:
        """Open the first source that works, or None."""
        for source, is_fallback in self._candidate_sources():
            cap = cv2.VideoCapture(source)
            if not cap.isOpened():
                cap.release()
                logger.warning(f"Capture source {source!r} not available")
                continue

            self._using_fallback = is_fallback
            if is_fallback:
                logger.info(f"Using fallback video: {source}")
            else:
                self._apply_constraints(cap)
            return cap

        self._last_error = "No camera or fallback video available"
        return None

    def _read(self, cap: cv2.VideoCapture) -> Optional[np.ndarray]:
        """Read one frame; rewinds a fallback video at its end."""
        ok, frame = cap.read()
        if ok:
            return frame
        if self._using_fallback:
            cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
        return None

    def _capture_loop(self) -> None:
        """Background thread capture loop."""
        pause = 1.0 / (self.config.fps * 2)
        warmup_left = self.config.warmup_frames
        failing = False

        while not self._stop_event.is_set():
            cap = self._cap
            if cap is None:
                break

            frame = self._read(cap)
            if frame is None:
                if not self._using_fallback:
                    if not failing:
                        logger.warning("Failed to read frame from camera")
                    failing = True
                    self._stop_event.wait(0.1)
                continue

            if failing:
                logger.info("Camera frames recovered")
                failing = False

            if warmup_left > 0:
                warmup_left -= 1
                continue

            with self._lock:
                self._frame_buffer.append((time.time(), frame.copy()))

            self._stop_event.wait(pause)

    def acquire(self) -> "Camera":
        """
        Open the camera and start the capture thread.

        Returns:
            self, for chaining

        Raises:
            AcquireError: If no camera or fallback video can be opened
        """
        if self.is_running():
            logger.warning("Camera already acquired")
            return self

        try:
            self._cap = self._open_capture()
        except cv2.error as e:
            self._last_error = str(e)
            self._cap = None

        if self._cap is None:
            raise AcquireError(self._last_error or "Camera unavailable")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._capture_loop, name="camera-capture", daemon=True)
        self._thread.start()

        deadline = time.time() + self.config.first_frame_timeout
        while time.time() < deadline:
            with self._lock:
                if self._frame_buffer:
                    logger.info("Camera stream started")
                    return self
            time.sleep(0.05)

        logger.warning("Timeout waiting for first frame")
        return self  # Still running, just no frames yet

    def release(self) -> None:
        """Stop the capture thread and release the device."""
        with self._release_lock:
            if self._thread is None and self._cap is None:
                return

            self._stop_event.set()

            if self._thread is not None:
                self._thread.join(timeout=2.0)
                self._thread = None

            if self._cap is not None:
                self._cap.release()
                self._cap = None

            with self._lock:
                self._frame_buffer.clear()

        logger.info("Camera stream released")

    def get_frame(self, timeout: float = 1.0) -> Optional[Tuple[float, np.ndarray]]:
        """
        Get the most recent frame from buffer.

        Args:
            timeout: Max seconds to wait for a frame

        Returns:
            Tuple of (timestamp, frame) or None if no frame available
        """
        start = time.time()

        while True:
            with self._lock:
                if self._frame_buffer:
                    return self._frame_buffer[-1]
            if not self.is_running() or time.time() - start >= timeout:
                return None
            time.sleep(0.01)

    def is_running(self) -> bool:
        """Check if the capture thread is active."""
        return self._thread is not None and not self._stop_event.is_set()

    @property
    def last_error(self) -> Optional[str]:
        """Get the last error message."""
        return self._last_error

    @property
    def using_fallback(self) -> bool:
        """Check if using fallback video instead of camera."""
        return self._using_fallback

    def __enter__(self):
        return self.acquire()

    def __exit__(self, *args):
        self.release()
