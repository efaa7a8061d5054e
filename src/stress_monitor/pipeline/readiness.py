"""
Readiness state machine gating the detection loop.

Initializing -> Ready once both the model and the camera report success.
Initializing -> ModelFailed / CameraFailed on the first failure (terminal).
"""

import threading
from enum import Enum
from typing import Callable, List, Optional

from loguru import logger


class ReadinessState(Enum):
    """Lifecycle state of the monitor."""
    INITIALIZING = "Initializing"
    MODEL_FAILED = "ModelFailed"
    CAMERA_FAILED = "CameraFailed"
    READY = "Ready"


TERMINAL_STATES = (ReadinessState.MODEL_FAILED, ReadinessState.CAMERA_FAILED)

Listener = Callable[[ReadinessState, ReadinessState], None]


class ReadinessController:
    """
    Four-state readiness machine.

    Model and camera signals may arrive from different threads and in any
    order; whichever success arrives last triggers Ready. Signals received
    after leaving Initializing are ignored. Listeners are called with
    (old_state, new_state) after each transition.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = ReadinessState.INITIALIZING
        self._model_ready = False
        self._camera_ready = False
        self._error: Optional[str] = None
        self._listeners: List[Listener] = []

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ReadinessState.READY

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def error(self) -> Optional[str]:
        """Failure reason for terminal states."""
        return self._error

    @property
    def status_message(self) -> str:
        """Readable status for display."""
        state = self._state
        if state is ReadinessState.READY:
            return "Ready: monitoring stress"
        if state is ReadinessState.MODEL_FAILED:
            return f"Face model failed to load: {self._error}"
        if state is ReadinessState.CAMERA_FAILED:
            return f"Camera unavailable: {self._error}"

        waiting = []
        if not self._model_ready:
            waiting.append("face model")
        if not self._camera_ready:
            waiting.append("camera")
        return f"Initializing: waiting for {' and '.join(waiting)}"

    def add_listener(self, listener: Listener) -> None:
        """Register a callback for state transitions."""
        self._listeners.append(listener)

    def model_loaded(self) -> None:
        self._signal("model", success=True)

    def model_failed(self, error) -> None:
        self._signal("model", success=False, error=error)

    def camera_acquired(self) -> None:
        self._signal("camera", success=True)

    def camera_failed(self, error) -> None:
        self._signal("camera", success=False, error=error)

    def _signal(self, source: str, success: bool, error=None) -> None:
        with self._lock:
            old = self._state
            if old is not ReadinessState.INITIALIZING:
                logger.debug(f"Ignoring {source} signal in state {old.value}")
                return

            if success:
                if source == "model":
                    self._model_ready = True
                else:
                    self._camera_ready = True
                if self._model_ready and self._camera_ready:
                    self._state = ReadinessState.READY
            else:
                self._error = str(error) if error is not None else "unknown error"
                if source == "model":
                    self._state = ReadinessState.MODEL_FAILED
                else:
                    self._state = ReadinessState.CAMERA_FAILED

            new = self._state

        if new is old:
            logger.debug(f"{source} ready, waiting for the other collaborator")
            return

        if new in TERMINAL_STATES:
            logger.error(f"Readiness: {old.value} -> {new.value} ({self._error})")
        else:
            logger.info(f"Readiness: {old.value} -> {new.value}")

        for listener in list(self._listeners):
            listener(old, new)
