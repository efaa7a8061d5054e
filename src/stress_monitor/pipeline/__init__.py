"""
Pipeline module for continuous stress monitoring.

This module provides the pieces that drive detection over time:
- Readiness controller (model + camera gating)
- Detection loop (per-tick inference and scoring)
- Stress monitor (orchestrates both with the vision collaborators)
"""

from .readiness import ReadinessController, ReadinessState
from .detection_loop import DetectionLoop, LoopConfig, LoopStats, Publication
from .monitor import MonitorConfig, StressMonitor

__all__ = [
    "ReadinessController",
    "ReadinessState",
    "DetectionLoop",
    "LoopConfig",
    "LoopStats",
    "Publication",
    "MonitorConfig",
    "StressMonitor",
]
