"""
Fall monitoring core: streaming fall detection over pose landmarks.

This package provides the following components:
- Calibration, ground classification and velocity estimation
- A fall decision engine with false-positive suppression
- A cancellable alert countdown
- A monitor that serializes frames and ticks, plus event delivery
"""

from .alerts.countdown import AlertCountdownController, AlertState, ControlResult
from .alerts.scheduler import AsyncioScheduler, TickHandle
from .config import Settings, get_settings
from .detectors.calibration import CalibrationBaseline, CalibrationTracker
from .detectors.fall_detector import (
    DetectionResult,
    FallDecisionEngine,
    FallDecisionState,
)
from .detectors.ground import is_on_ground
from .detectors.pose import PoseFrame
from .detectors.velocity import VelocityEstimator, VelocitySample
from .events.history import FallEventLog
from .events.manager import EventDispatcher
from .events.models import (
    AlertCancelled,
    AlertConfirmed,
    FallDetected,
    FallEvent,
    FallEventStatus,
)
from .monitor import FallMonitor, MonitorUpdate
from .utils.constants import DEFAULT_COUNTDOWN_CONFIG, DEFAULT_FALL_DETECTOR_CONFIG

__version__ = "1.0.0"

__all__ = [
    "AlertCancelled",
    "AlertConfirmed",
    "AlertCountdownController",
    "AlertState",
    "AsyncioScheduler",
    "CalibrationBaseline",
    "CalibrationTracker",
    "ControlResult",
    "DEFAULT_COUNTDOWN_CONFIG",
    "DEFAULT_FALL_DETECTOR_CONFIG",
    "DetectionResult",
    "EventDispatcher",
    "FallDecisionEngine",
    "FallDecisionState",
    "FallDetected",
    "FallEvent",
    "FallEventLog",
    "FallEventStatus",
    "FallMonitor",
    "MonitorUpdate",
    "PoseFrame",
    "Settings",
    "TickHandle",
    "VelocityEstimator",
    "VelocitySample",
    "get_settings",
    "is_on_ground",
]
