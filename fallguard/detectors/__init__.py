"""Pose-based detectors: calibration, ground state, velocity and the decision engine."""

from .calibration import CalibrationBaseline, CalibrationTracker
from .fall_detector import DetectionResult, FallDecisionEngine, FallDecisionState
from .ground import is_on_ground
from .pose import PoseFrame, body_height, has_valid_confidence, hip_height
from .velocity import VelocityEstimator, VelocitySample, landmark_velocity

__all__ = [
    "CalibrationBaseline",
    "CalibrationTracker",
    "DetectionResult",
    "FallDecisionEngine",
    "FallDecisionState",
    "PoseFrame",
    "VelocityEstimator",
    "VelocitySample",
    "body_height",
    "has_valid_confidence",
    "hip_height",
    "is_on_ground",
    "landmark_velocity",
]
