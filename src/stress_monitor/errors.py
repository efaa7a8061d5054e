"""
Error taxonomy for the stress monitor.

Terminal errors (LoadError, AcquireError) end up as readiness states.
Per-tick errors (MalformedLandmarks, InferenceError) are recovered inside
the detection loop and never propagate past it.
"""


class StressMonitorError(Exception):
    """Base class for all stress monitor errors."""


class LoadError(StressMonitorError):
    """Landmark model could not be loaded."""


class AcquireError(StressMonitorError):
    """Camera stream could not be acquired."""


class MalformedLandmarks(StressMonitorError):
    """A detected face is missing a region or point the features need."""

    def __init__(self, message: str, region: str = None, index: int = None):
        super().__init__(message)
        self.region = region
        self.index = index


class InferenceError(StressMonitorError):
    """The landmark model failed on a single frame."""
