"""
Ground-state classification from current geometry and the calibrated baseline.
"""

from .calibration import CalibrationBaseline
from .pose import PoseFrame, body_height, hip_height


def is_on_ground(
    frame: PoseFrame,
    baseline: CalibrationBaseline,
    height_drop_threshold: float = 0.5,
    hip_ground_level: float = 0.6,
) -> bool:
    """
    Decide whether the subject is currently on the ground.

    The subject is on the ground when their nose-to-ankle height has dropped
    below ``height_drop_threshold`` of the standing baseline AND the hip
    center sits low in the image (y grows downward).

    Args:
        frame: Current pose
        baseline: Calibrated standing height
        height_drop_threshold: Maximum height ratio that still counts as down
        hip_ground_level: Minimum hip y that counts as near the floor

    Returns:
        True if both conditions hold
    """
    height_ratio = body_height(frame) / baseline.height
    return height_ratio < height_drop_threshold and hip_height(frame) > hip_ground_level
