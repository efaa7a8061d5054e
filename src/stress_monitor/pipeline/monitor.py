"""
Main orchestrator for the stress monitor.

Connects the landmark model, the camera, the readiness controller and the
detection loop into one start/teardown lifecycle.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional

from loguru import logger

from ..errors import AcquireError, LoadError
from ..scoring.normalizer import NormalizerConfig, ScoreNormalizer
from ..scoring.scorer import ScorerConfig, StressReading, StressScorer
from ..vision.camera import Camera, CameraConfig
from ..vision.landmark_model import FaceMeshModel, ModelConfig
from .detection_loop import DetectionLoop, LoopConfig, LoopStats, Publication
from .readiness import ReadinessController, ReadinessState


@dataclass
class MonitorConfig:
    """Configuration for the stress monitor."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    scorer: ScorerConfig = field(default_factory=ScorerConfig)
    parallel_init: bool = True  # Load model and acquire camera concurrently


class StressMonitor:
    """
    Stress monitor orchestrator.

    Lifecycle:
    1. initialize(): load the model and acquire the camera, reporting each
       outcome to the readiness controller
    2. On Ready, the detection loop starts and publishes readings
    3. teardown(): stop the loop, then release the camera and the model

    Model and camera factories can be replaced, which is how tests run the
    orchestrator without MediaPipe or a camera device.
    """

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        model_loader: Optional[Callable[[ModelConfig], object]] = None,
        camera_factory: Optional[Callable[[CameraConfig], object]] = None,
        on_publish: Optional[Callable[[Publication], None]] = None,
    ):
        """
        Initialize the monitor.

        Args:
            config: Monitor configuration
            model_loader: Returns a loaded model or raises LoadError,
                defaults to FaceMeshModel.load
            camera_factory: Builds a camera with acquire()/release()/get_frame(),
                defaults to Camera
            on_publish: Called with each new Publication
        """
        self.config = config or MonitorConfig()
        self.readiness = ReadinessController()

        self._model_loader = model_loader or FaceMeshModel.load
        self._camera_factory = camera_factory or Camera
        self._on_publish = on_publish

        self._model = None
        self._camera = None
        self._loop: Optional[DetectionLoop] = None
        self._torn_down = False
        self._teardown_lock = threading.Lock()

        self.readiness.add_listener(self._on_readiness_change)

    @property
    def state(self) -> ReadinessState:
        return self.readiness.state

    @property
    def status_message(self) -> str:
        return self.readiness.status_message

    @property
    def publication(self) -> Optional[Publication]:
        return self._loop.publication if self._loop else None

    @property
    def reading(self) -> Optional[StressReading]:
        return self._loop.reading if self._loop else None

    @property
    def stats(self) -> Optional[LoopStats]:
        return self._loop.stats if self._loop else None

    @property
    def camera(self):
        return self._camera

    def _load_model(self) -> None:
        try:
            model = self._model_loader(self.config.model)
        except LoadError as e:
            self.readiness.model_failed(e)
            return

        with self._teardown_lock:
            late = self._torn_down
            if not late:
                self._model = model

        if late:
            logger.info("Model finished loading after teardown, closing it")
            if hasattr(model, "close"):
                model.close()
            return
        self.readiness.model_loaded()

    def _acquire_camera(self) -> None:
        with self._teardown_lock:
            if self._torn_down:
                return

        camera = self._camera_factory(self.config.camera)
        try:
            camera.acquire()
        except AcquireError as e:
            self.readiness.camera_failed(e)
            return

        with self._teardown_lock:
            late = self._torn_down
            if not late:
                self._camera = camera

        if late:
            logger.info("Camera acquired after teardown, releasing it")
            camera.release()
            return
        self.readiness.camera_acquired()

    def initialize(self) -> bool:
        """
        Load the model and acquire the camera.

        Returns:
            True if the monitor reached Ready, False on failure or when
            teardown() ran first
        """
        with self._teardown_lock:
            if self._torn_down:
                logger.warning("StressMonitor already torn down, not initializing")
                return False

        if self.readiness.state is not ReadinessState.INITIALIZING:
            return self.readiness.is_ready

        logger.info("Initializing StressMonitor...")

        if self.config.parallel_init:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="monitor-init") as executor:
                futures = [executor.submit(self._load_model), executor.submit(self._acquire_camera)]
                for future in futures:
                    future.result()
        else:
            self._load_model()
            if self.readiness.state is ReadinessState.INITIALIZING:
                self._acquire_camera()

        if self.readiness.is_terminal:
            logger.error(self.readiness.status_message)
            self._release_resources()
            return False

        if self._torn_down:
            logger.info("Teardown ran during initialization")
            return False

        logger.info("StressMonitor initialized successfully")
        return self.readiness.is_ready

    def _on_readiness_change(self, old: ReadinessState, new: ReadinessState) -> None:
        if new is not ReadinessState.READY:
            return

        # Built under the lock so teardown() either sees the loop or prevents it
        with self._teardown_lock:
            if self._torn_down:
                return
            self._loop = DetectionLoop(
                model=self._model,
                frame_source=self._camera,
                readiness=self.readiness,
                config=self.config.loop,
                normalizer=ScoreNormalizer(self.config.normalizer),
                scorer=StressScorer(self.config.scorer),
                on_publish=self._on_publish,
            )
            self._loop.start()

    def _release_resources(self) -> None:
        with self._teardown_lock:
            camera, self._camera = self._camera, None
            model, self._model = self._model, None

        if camera is not None:
            camera.release()
        if model is not None and hasattr(model, "close"):
            model.close()

    def teardown(self) -> None:
        """Stop detection and release resources. Idempotent."""
        with self._teardown_lock:
            if self._torn_down:
                return
            self._torn_down = True
            loop = self._loop

        logger.info("Tearing down StressMonitor...")

        if loop is None:
            self._release_resources()
            return

        # Camera and model stay open until the last tick has left them
        if not loop.stop():
            logger.warning("Deferring camera and model release until inference completes")
        loop.run_when_idle(self._release_resources)

    def __enter__(self) -> "StressMonitor":
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.teardown()
