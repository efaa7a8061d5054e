"""
Stress monitor: live stress estimation from facial landmarks.
"""

from .errors import (
    StressMonitorError,
    LoadError,
    AcquireError,
    MalformedLandmarks,
    InferenceError,
)
from .scoring import StressLabel, StressReading
from .pipeline import MonitorConfig, ReadinessState, StressMonitor

__version__ = "0.1.0"

__all__ = [
    "StressMonitorError",
    "LoadError",
    "AcquireError",
    "MalformedLandmarks",
    "InferenceError",
    "StressLabel",
    "StressReading",
    "MonitorConfig",
    "ReadinessState",
    "StressMonitor",
]
