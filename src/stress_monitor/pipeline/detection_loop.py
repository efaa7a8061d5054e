"""
Continuous detection loop.

Runs one inference-and-score cycle per tick on a worker thread while the
readiness controller reports Ready, and publishes the newest StressReading
together with the face mesh for overlays.
"""

import time
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np
from loguru import logger

from ..errors import InferenceError, MalformedLandmarks
from ..scoring.features import FeatureExtractor
from ..scoring.normalizer import ScoreNormalizer
from ..scoring.scorer import StressReading, StressScorer
from .readiness import ReadinessController


@dataclass
class LoopConfig:
    """Configuration for the detection loop."""
    target_fps: float = 15.0  # Upper bound on ticks per second, 0 = unpaced
    frame_timeout: float = 1.0  # Seconds to wait for a camera frame per tick
    stop_timeout: float = 2.0  # Seconds stop() waits for the worker to exit


@dataclass(frozen=True, eq=False)
class Publication:
    """Latest result handed to the presentation layer. Replaced, never mutated."""
    reading: StressReading
    mesh: np.ndarray  # (N, 2) face mesh points
    timestamp: float


@dataclass
class LoopStats:
    """Counters for a detection session."""
    ticks: int = 0
    frames_missing: int = 0
    faces_detected: int = 0
    no_face_ticks: int = 0
    malformed_ticks: int = 0
    inference_errors: int = 0
    readings_published: int = 0
    start_time: float = field(default_factory=time.time)

    @property
    def face_ratio(self) -> float:
        """Ratio of analyzed frames that contained a face."""
        analyzed = self.faces_detected + self.no_face_ticks
        return self.faces_detected / analyzed if analyzed else 0.0

    @property
    def session_duration(self) -> float:
        return time.time() - self.start_time

    def to_dict(self) -> dict:
        return {
            "ticks": self.ticks,
            "frames_missing": self.frames_missing,
            "faces_detected": self.faces_detected,
            "no_face_ticks": self.no_face_ticks,
            "malformed_ticks": self.malformed_ticks,
            "inference_errors": self.inference_errors,
            "readings_published": self.readings_published,
            "face_ratio": self.face_ratio,
            "session_duration": self.session_duration,
        }


class DetectionLoop:
    """
    Scheduled detection task with a start/stop handle.

    Each tick:
    1. Pull the newest frame from the frame source
    2. Run the landmark model (blocks; one inference in flight at most)
    3. No face: keep the previous publication
    4. Otherwise score the first face and publish a new Publication

    MalformedLandmarks and InferenceError skip the tick; the loop keeps
    running until stop() or until readiness leaves Ready.

    Ticks are serialized, whether they come from the worker or from a
    direct tick() call. Use run_when_idle() to release the model or the
    camera; it waits for an inference that outlived stop().

    The frame source needs get_frame(timeout) -> (timestamp, frame) | None
    and the model needs detect(frame) -> list of LandmarkSet.
    """

    def __init__(
        self,
        model,
        frame_source,
        readiness: ReadinessController,
        config: Optional[LoopConfig] = None,
        extractor: Optional[FeatureExtractor] = None,
        normalizer: Optional[ScoreNormalizer] = None,
        scorer: Optional[StressScorer] = None,
        on_publish: Optional[Callable[[Publication], None]] = None,
    ):
        self.config = config or LoopConfig()
        self.extractor = extractor or FeatureExtractor()
        self.normalizer = normalizer or ScoreNormalizer()
        self.scorer = scorer or StressScorer()
        self.stats = LoopStats()

        self._model = model
        self._frame_source = frame_source
        self._readiness = readiness
        self._on_publish = on_publish

        self._publication: Optional[Publication] = None
        self._publish_lock = threading.Lock()
        self._control_lock = threading.Lock()
        self._tick_lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._worker_active = False
        self._exit_callbacks: List[Callable[[], None]] = []

    @property
    def publication(self) -> Optional[Publication]:
        """Most recent publication, None until the first face is scored."""
        with self._publish_lock:
            return self._publication

    @property
    def reading(self) -> Optional[StressReading]:
        publication = self.publication
        return publication.reading if publication else None

    def is_running(self) -> bool:
        """Check if the worker thread is active and not stopping."""
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> bool:
        """
        Start the worker thread.

        Returns:
            True if the loop is running, False if readiness is not Ready
            or a previous worker is still finishing its last tick
        """
        with self._control_lock:
            if self.is_running():
                logger.warning("Detection loop already running")
                return True

            if not self._readiness.is_ready:
                logger.warning(
                    f"Cannot start detection loop in state {self._readiness.state.value}"
                )
                return False

            previous = self._thread
            if previous is not None and previous.is_alive():
                previous.join(timeout=self.config.stop_timeout)
                if previous.is_alive():
                    logger.warning("Previous detection worker still busy, not restarting")
                    return False

            self._stop_event.clear()
            self._worker_active = True
            self._thread = threading.Thread(target=self._run, name="detection-loop", daemon=True)
            self._thread.start()
            return True

    def stop(self) -> bool:
        """
        Stop the loop. Idempotent.

        No tick starts after this returns. A tick whose inference is still
        in flight drops its result instead of publishing.

        Returns:
            True if the worker has exited, False if it is still inside an
            inference after stop_timeout
        """
        with self._control_lock:
            self._stop_event.set()
            thread = self._thread

        if thread is None:
            return True
        if thread is threading.current_thread():
            return False

        thread.join(timeout=self.config.stop_timeout)
        if thread.is_alive():
            logger.warning("Detection worker still in inference; its result will be discarded")
            return False
        return True

    def run_when_idle(self, callback: Callable[[], None]) -> bool:
        """
        Run a callback once no worker tick can touch the model or the frame source.

        Runs immediately when the worker has exited, otherwise on the
        worker's way out.

        Args:
            callback: Called with no arguments, exactly once

        Returns:
            True if the callback ran immediately, False if it was deferred
        """
        with self._control_lock:
            if self._worker_active:
                self._exit_callbacks.append(callback)
                return False

        with self._tick_lock:
            callback()
        return True

    def _run(self) -> None:
        """Worker thread body."""
        interval = 1.0 / self.config.target_fps if self.config.target_fps > 0 else 0.0
        logger.info(f"Detection loop started (target {self.config.target_fps:g} fps)")

        try:
            while not self._stop_event.is_set():
                if not self._readiness.is_ready:
                    logger.warning(
                        f"Readiness is {self._readiness.state.value}, stopping detection loop"
                    )
                    break

                tick_start = time.time()
                self.tick()

                remaining = interval - (time.time() - tick_start)
                if remaining > 0:
                    self._stop_event.wait(remaining)
        finally:
            with self._control_lock:
                self._worker_active = False
                callbacks, self._exit_callbacks = self._exit_callbacks, []

            logger.info(f"Detection loop stopped: {self.stats.to_dict()}")
            with self._tick_lock:
                for callback in callbacks:
                    callback()

    def tick(self) -> bool:
        """
        Run one detection cycle.

        Blocks while another tick is running, so at most one inference is
        in flight across the worker and direct callers.

        Returns:
            True if a new reading was published
        """
        with self._tick_lock:
            return self._tick()

    def _tick(self) -> bool:
        if not self._readiness.is_ready:
            return False

        self.stats.ticks += 1

        frame_data = self._frame_source.get_frame(timeout=self.config.frame_timeout)
        if frame_data is None:
            self.stats.frames_missing += 1
            return False

        timestamp, frame = frame_data

        try:
            faces = self._model.detect(frame)
            if not faces:
                self.stats.no_face_ticks += 1
                return False

            self.stats.faces_detected += 1
            landmarks = faces[0]
            raw = self.extractor.extract(landmarks)
        except MalformedLandmarks as e:
            self.stats.malformed_ticks += 1
            logger.warning(f"Skipping frame with malformed landmarks: {e}")
            return False
        except InferenceError as e:
            self.stats.inference_errors += 1
            logger.warning(f"Skipping frame: {e}")
            return False

        if self._stop_event.is_set():
            return False

        reading = self.scorer.score(self.normalizer.normalize(raw), timestamp=timestamp)
        self._publish(Publication(reading=reading, mesh=landmarks.mesh_2d(), timestamp=timestamp))
        return True

    def _publish(self, publication: Publication) -> None:
        with self._publish_lock:
            self._publication = publication
        self.stats.readings_published += 1

        logger.debug(
            f"Stress: {publication.reading.score:.3f} ({publication.reading.label.value})"
        )

        if self._on_publish:
            self._on_publish(publication)
