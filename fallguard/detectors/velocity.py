"""
Per-keypoint motion speed over a bounded window of recent frames.
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from ..buffers.ring_buffer import RingBuffer
from ..utils.constants import LANDMARK_COLUMNS, NUM_LANDMARKS, PoseLandmarks
from .pose import PoseFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VelocitySample:
    """Speeds in normalized image units per second (always >= 0)."""

    nose_velocity: float
    hip_velocity: float
    ankle_velocity: float
    timestamp: float

    def as_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.nose_velocity, self.hip_velocity, self.ankle_velocity])


def landmark_velocity(
    current: npt.NDArray[np.float64],
    previous: npt.NDArray[np.float64],
    delta_time: float,
) -> float:
    """
    Planar speed of a landmark between two samples.

    Args:
        current: Landmark row [x, y, ...] in the newer frame
        previous: Landmark row [x, y, ...] in the older frame
        delta_time: Seconds between the two frames

    Returns:
        Euclidean (x, y) distance divided by ``delta_time``; 0.0 when no
        time has elapsed
    """
    if delta_time <= 0:
        return 0.0
    distance = np.linalg.norm(current[:2] - previous[:2])
    return float(distance / delta_time)


class VelocityEstimator:
    """
    Sliding window of recent frames and the speeds derived from them.

    Frames and velocity samples live in two fixed-capacity ring buffers,
    so memory stays constant no matter how long the stream runs.
    """

    def __init__(self, history_window_frames: int = 30):
        """
        Initialize velocity estimator.

        Args:
            history_window_frames: Capacity of the frame and velocity buffers
        """
        self.frames = RingBuffer(
            history_window_frames, (NUM_LANDMARKS, LANDMARK_COLUMNS)
        )
        self.samples = RingBuffer(history_window_frames, (3,))

    def push(self, frame: PoseFrame) -> VelocitySample | None:
        """
        Add a frame and compute the velocity against the previous one.

        Args:
            frame: Newest pose

        Returns:
            VelocitySample, or None while fewer than two frames are buffered
        """
        self.frames.append(frame.landmarks, frame.timestamp)
        sample = self.latest_sample()
        if sample is not None:
            self.samples.append(sample.as_array(), sample.timestamp)
        return sample

    def latest_sample(self) -> VelocitySample | None:
        """Velocities between the two most recent frames, or None if insufficient data."""
        if len(self.frames) < 2:
            return None

        current, current_time = self.frames.latest(0)
        previous, previous_time = self.frames.latest(1)
        delta_time = current_time - previous_time

        def speed(index: int) -> float:
            return landmark_velocity(current[index], previous[index], delta_time)

        return VelocitySample(
            nose_velocity=speed(PoseLandmarks.NOSE),
            hip_velocity=(
                speed(PoseLandmarks.LEFT_HIP) + speed(PoseLandmarks.RIGHT_HIP)
            )
            / 2.0,
            ankle_velocity=(
                speed(PoseLandmarks.LEFT_ANKLE) + speed(PoseLandmarks.RIGHT_ANKLE)
            )
            / 2.0,
            timestamp=current_time,
        )

    def reset(self):
        """Empty both history buffers."""
        self.frames.clear()
        self.samples.clear()

    def __len__(self) -> int:
        return len(self.frames)
