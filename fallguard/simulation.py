"""
Synthetic pose sequences for demos and tests.

Frames follow the MediaPipe convention: normalized coordinates with y
growing downward, so a subject lying on the floor has every keypoint near
the bottom of the image.
"""

import numpy as np
import numpy.typing as npt

from .detectors.pose import PoseFrame
from .utils.constants import LANDMARK_COLUMNS, NUM_LANDMARKS, PoseLandmarks

# (x, y) of the tracked keypoints for an upright subject, nose-to-ankle 0.6
_STANDING = {
    PoseLandmarks.NOSE: (0.50, 0.20),
    PoseLandmarks.LEFT_SHOULDER: (0.45, 0.30),
    PoseLandmarks.RIGHT_SHOULDER: (0.55, 0.30),
    PoseLandmarks.LEFT_HIP: (0.47, 0.50),
    PoseLandmarks.RIGHT_HIP: (0.53, 0.50),
    PoseLandmarks.LEFT_KNEE: (0.47, 0.65),
    PoseLandmarks.RIGHT_KNEE: (0.53, 0.65),
    PoseLandmarks.LEFT_ANKLE: (0.47, 0.80),
    PoseLandmarks.RIGHT_ANKLE: (0.53, 0.80),
}

# Lying on the floor, head to the left
_FALLEN = {
    PoseLandmarks.NOSE: (0.20, 0.80),
    PoseLandmarks.LEFT_SHOULDER: (0.30, 0.82),
    PoseLandmarks.RIGHT_SHOULDER: (0.30, 0.86),
    PoseLandmarks.LEFT_HIP: (0.50, 0.82),
    PoseLandmarks.RIGHT_HIP: (0.50, 0.86),
    PoseLandmarks.LEFT_KNEE: (0.65, 0.83),
    PoseLandmarks.RIGHT_KNEE: (0.65, 0.87),
    PoseLandmarks.LEFT_ANKLE: (0.80, 0.84),
    PoseLandmarks.RIGHT_ANKLE: (0.80, 0.88),
}


def _landmarks(points: dict, visibility: float) -> npt.NDArray[np.float64]:
    landmarks = np.zeros((NUM_LANDMARKS, LANDMARK_COLUMNS), dtype=np.float64)
    for index, (x, y) in points.items():
        landmarks[index] = (x, y, 0.0, visibility)
    return landmarks


def standing_landmarks(visibility: float = 0.99) -> npt.NDArray[np.float64]:
    return _landmarks(_STANDING, visibility)


def fallen_landmarks(visibility: float = 0.99) -> npt.NDArray[np.float64]:
    return _landmarks(_FALLEN, visibility)


def standing_frame(timestamp: float, visibility: float = 0.99) -> PoseFrame:
    return PoseFrame(standing_landmarks(visibility), timestamp)


def fallen_frame(timestamp: float, visibility: float = 0.99) -> PoseFrame:
    return PoseFrame(fallen_landmarks(visibility), timestamp)


def interpolate_frames(
    start: npt.NDArray[np.float64],
    end: npt.NDArray[np.float64],
    start_time: float,
    duration: float,
    fps: float,
) -> list[PoseFrame]:
    """
    Linear motion between two poses.

    Args:
        start: Landmark array at ``start_time`` (not included in the output)
        end: Landmark array reached at ``start_time + duration``
        start_time: Time of the starting pose
        duration: Seconds the motion takes
        fps: Frame rate

    Returns:
        Frames after ``start_time`` up to and including the end pose
    """
    steps = max(int(round(duration * fps)), 1)
    frames = []
    for step in range(1, steps + 1):
        alpha = step / steps
        frames.append(
            PoseFrame((1 - alpha) * start + alpha * end, start_time + step / fps)
        )
    return frames


def hold(
    landmarks: npt.NDArray[np.float64],
    start_time: float,
    duration: float,
    fps: float,
    noise: float = 0.0,
    rng: np.random.Generator | None = None,
) -> list[PoseFrame]:
    """
    Frames of a held pose, optionally with positional jitter.

    Args:
        landmarks: Pose to hold
        start_time: Time of the first frame
        duration: Seconds to hold
        fps: Frame rate
        noise: Standard deviation of x/y jitter
        rng: Random generator used for jitter

    Returns:
        Frames at ``start_time, start_time + 1/fps, ...``
    """
    if noise and rng is None:
        rng = np.random.default_rng()
    frames = []
    for step in range(int(round(duration * fps))):
        current = landmarks.copy()
        if noise:
            current[:, :2] += rng.normal(0.0, noise, size=(NUM_LANDMARKS, 2))
        frames.append(PoseFrame(current, start_time + step / fps))
    return frames


def fall_scenario(
    fps: float = 30.0,
    standing_seconds: float = 1.0,
    fall_seconds: float = 0.3,
    lying_seconds: float = 3.0,
    start_time: float = 0.0,
) -> list[PoseFrame]:
    """Stand, drop to the floor, stay down."""
    standing = standing_landmarks()
    fallen = fallen_landmarks()

    frames = hold(standing, start_time, standing_seconds, fps)
    t = frames[-1].timestamp if frames else start_time
    frames += interpolate_frames(standing, fallen, t, fall_seconds, fps)
    t = frames[-1].timestamp
    frames += hold(fallen, t + 1 / fps, lying_seconds, fps)
    return frames


def stumble_scenario(
    fps: float = 30.0,
    standing_seconds: float = 1.0,
    fall_seconds: float = 0.3,
    lying_seconds: float = 0.8,
    rise_seconds: float = 0.5,
    recovered_seconds: float = 1.0,
    start_time: float = 0.0,
) -> list[PoseFrame]:
    """Stand, drop to the floor, get back up before the fall is confirmed."""
    standing = standing_landmarks()
    fallen = fallen_landmarks()

    frames = fall_scenario(fps, standing_seconds, fall_seconds, lying_seconds, start_time)
    t = frames[-1].timestamp
    frames += interpolate_frames(fallen, standing, t, rise_seconds, fps)
    t = frames[-1].timestamp
    frames += hold(standing, t + 1 / fps, recovered_seconds, fps)
    return frames
