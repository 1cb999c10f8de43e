"""
Constants and default configurations for the fall monitoring core.
"""


# MediaPipe Pose landmark indices of the tracked keypoints
class PoseLandmarks:
    """Indices into the 33-landmark MediaPipe Pose output."""

    NOSE = 0
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28


NUM_LANDMARKS = 33

# Columns of a landmark array: [x, y, z, visibility]
LANDMARK_COLUMNS = 4

# Keypoints that must be visible for calibration and for a frame to count
REQUIRED_KEYPOINTS = (
    PoseLandmarks.NOSE,
    PoseLandmarks.LEFT_HIP,
    PoseLandmarks.RIGHT_HIP,
    PoseLandmarks.LEFT_ANKLE,
    PoseLandmarks.RIGHT_ANKLE,
)


# Default Configuration for Fall Detection
DEFAULT_FALL_DETECTOR_CONFIG = {
    "height_drop_threshold": 0.5,  # ratio of calibrated height
    "hip_ground_level": 0.6,  # normalized y, image y grows downward
    "velocity_threshold": 0.3,  # normalized units per second
    "confirmation_window_ms": 2000,
    "false_positive_window_ms": 5000,
    "stale_episode_ms": 3000,
    "min_keypoint_confidence": 0.5,  # visibility score (0-1)
    "min_calibration_height": 0.3,  # normalized units
    "history_window_frames": 30,
}


# Default Configuration for the alert countdown
DEFAULT_COUNTDOWN_CONFIG = {
    "duration": 10,  # ticks
    "tick_interval": 1.0,  # seconds
}


# Confidence score shaping. These are tuning knobs for a monotonic
# indicator of sustained ground contact, not validated probabilities.
class ConfidenceRamp:
    """Confidence score constants used by the decision engine."""

    MIN = 0.0
    MAX = 100.0
    EPISODE_START_CAP = 90.0
    RAMP_CEILING = 80.0
    CONFIRMED_BASE = 95.0
    CONFIRMED_PER_SECOND = 2.0
    CONFIRMED_CAP = 99.0
    MANUAL = 100.0
