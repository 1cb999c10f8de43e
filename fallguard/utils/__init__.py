"""
Utility modules for the fall monitoring core.
"""

from .constants import (
    DEFAULT_COUNTDOWN_CONFIG,
    DEFAULT_FALL_DETECTOR_CONFIG,
    NUM_LANDMARKS,
    REQUIRED_KEYPOINTS,
    ConfidenceRamp,
    PoseLandmarks,
)

__all__ = [
    "PoseLandmarks",
    "NUM_LANDMARKS",
    "REQUIRED_KEYPOINTS",
    "DEFAULT_FALL_DETECTOR_CONFIG",
    "DEFAULT_COUNTDOWN_CONFIG",
    "ConfidenceRamp",
]
