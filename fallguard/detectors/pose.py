"""
Pose frame container and keypoint geometry helpers.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from ..utils.constants import (
    LANDMARK_COLUMNS,
    NUM_LANDMARKS,
    REQUIRED_KEYPOINTS,
    PoseLandmarks,
)

logger = logging.getLogger(__name__)

X, Y, Z, VISIBILITY = range(LANDMARK_COLUMNS)


@dataclass(frozen=True, eq=False)
class PoseFrame:
    """
    One pose-estimation result.

    Attributes:
        landmarks: (33, 4) array of landmarks [x, y, z, visibility]. x and y
            are normalized to the image, y grows downward.
        timestamp: Capture time in seconds on the monitor's clock
    """

    landmarks: npt.NDArray[np.float64] = field(repr=False)
    timestamp: float

    def __post_init__(self):
        landmarks = np.array(self.landmarks, dtype=np.float64)
        if landmarks.shape != (NUM_LANDMARKS, LANDMARK_COLUMNS):
            raise ValueError(
                f"landmarks must have shape ({NUM_LANDMARKS}, {LANDMARK_COLUMNS}), "
                f"got {landmarks.shape}"
            )
        landmarks.setflags(write=False)
        object.__setattr__(self, "landmarks", landmarks)

    @classmethod
    def from_array(cls, array: npt.ArrayLike, timestamp: float) -> "PoseFrame":
        """
        Build a frame from an (N, 3) or (N, 4) array.

        Rows beyond the ones supplied are zero-filled and a missing visibility
        column reads as 0.0, so absent keypoints never pass a confidence check.

        Args:
            array: Landmark rows [x, y, z] or [x, y, z, visibility], N <= 33
            timestamp: Capture time in seconds

        Returns:
            PoseFrame with a full (33, 4) landmark array
        """
        array = np.asarray(array, dtype=np.float64)
        if array.ndim != 2 or array.shape[1] not in (3, 4):
            raise ValueError(
                f"Expected landmark array of shape (N, 3) or (N, 4), got {array.shape}"
            )
        if array.shape[0] > NUM_LANDMARKS:
            raise ValueError(
                f"Expected at most {NUM_LANDMARKS} landmarks, got {array.shape[0]}"
            )

        landmarks = np.zeros((NUM_LANDMARKS, LANDMARK_COLUMNS), dtype=np.float64)
        landmarks[: array.shape[0], : array.shape[1]] = array
        return cls(landmarks=landmarks, timestamp=timestamp)

    @classmethod
    def from_landmarks(cls, landmarks: Iterable, timestamp: float) -> "PoseFrame":
        """
        Build a frame from landmark objects such as MediaPipe's NormalizedLandmark.

        Args:
            landmarks: Objects exposing ``x``, ``y``, ``z`` and optionally
                ``visibility``
            timestamp: Capture time in seconds

        Returns:
            PoseFrame
        """
        rows = []
        for lm in landmarks:
            visibility = getattr(lm, "visibility", None)
            rows.append([lm.x, lm.y, lm.z, 0.0 if visibility is None else visibility])
        if not rows:
            return cls.from_array(np.zeros((0, LANDMARK_COLUMNS)), timestamp)
        return cls.from_array(np.array(rows), timestamp)

    def point(self, index: int) -> npt.NDArray[np.float64]:
        """Planar (x, y) position of a landmark."""
        return self.landmarks[index, X : Y + 1]

    def visibility(self, index: int) -> float:
        return float(self.landmarks[index, VISIBILITY])


def has_valid_confidence(
    frame: PoseFrame,
    min_confidence: float,
    keypoints: Sequence[int] = REQUIRED_KEYPOINTS,
) -> bool:
    """
    Check that every keypoint is detected with visibility above the threshold.

    The comparison is strict: a visibility equal to ``min_confidence`` fails.
    """
    return bool(np.all(frame.landmarks[list(keypoints), VISIBILITY] > min_confidence))


def body_height(frame: PoseFrame) -> float:
    """
    Calculate vertical extent of the body (normalized height).

    Uses the distance from the nose to the ankle midpoint along the y-axis.
    """
    ankle_y = (
        frame.landmarks[PoseLandmarks.LEFT_ANKLE, Y]
        + frame.landmarks[PoseLandmarks.RIGHT_ANKLE, Y]
    ) / 2.0
    return float(abs(frame.landmarks[PoseLandmarks.NOSE, Y] - ankle_y))


def hip_height(frame: PoseFrame) -> float:
    """Y-coordinate of the hip center (larger is closer to the floor)."""
    return float(
        (
            frame.landmarks[PoseLandmarks.LEFT_HIP, Y]
            + frame.landmarks[PoseLandmarks.RIGHT_HIP, Y]
        )
        / 2.0
    )
