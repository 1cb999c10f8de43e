import numpy as np
import pytest

from fallguard.detectors.fall_detector import FallDecisionEngine
from fallguard.detectors.pose import PoseFrame
from fallguard.utils.constants import LANDMARK_COLUMNS, NUM_LANDMARKS, PoseLandmarks


def make_frame(
    timestamp,
    nose_y=0.2,
    hip_y=0.5,
    ankle_y=0.8,
    x=0.5,
    visibility=0.99,
    overrides=None,
):
    """
    Pose frame with the tracked keypoints at the given heights.

    Args:
        timestamp: Frame time in seconds
        nose_y, hip_y, ankle_y: Vertical positions (image y grows downward)
        x: Horizontal position of the body center
        visibility: Visibility for every tracked keypoint
        overrides: {landmark index: visibility} for individual keypoints
    """
    landmarks = np.zeros((NUM_LANDMARKS, LANDMARK_COLUMNS))
    rows = {
        PoseLandmarks.NOSE: (x, nose_y),
        PoseLandmarks.LEFT_SHOULDER: (x - 0.05, nose_y + 0.1),
        PoseLandmarks.RIGHT_SHOULDER: (x + 0.05, nose_y + 0.1),
        PoseLandmarks.LEFT_HIP: (x - 0.03, hip_y),
        PoseLandmarks.RIGHT_HIP: (x + 0.03, hip_y),
        PoseLandmarks.LEFT_KNEE: (x - 0.03, (hip_y + ankle_y) / 2),
        PoseLandmarks.RIGHT_KNEE: (x + 0.03, (hip_y + ankle_y) / 2),
        PoseLandmarks.LEFT_ANKLE: (x - 0.03, ankle_y),
        PoseLandmarks.RIGHT_ANKLE: (x + 0.03, ankle_y),
    }
    for index, (px, py) in rows.items():
        landmarks[index] = (px, py, 0.0, visibility)
    for index, vis in (overrides or {}).items():
        landmarks[index, 3] = vis
    return PoseFrame(landmarks, timestamp)


def standing(t):
    """Upright, nose-to-ankle height 0.6."""
    return make_frame(t, nose_y=0.2, hip_y=0.5, ankle_y=0.8)


def crouching(t):
    """Low but not on the ground: height ratio ~0.58, hips at 0.55."""
    return make_frame(t, nose_y=0.5, hip_y=0.55, ankle_y=0.85)


def lying(t):
    """On the ground: height ratio ~0.17, hips at 0.675."""
    return make_frame(t, nose_y=0.75, hip_y=0.675, ankle_y=0.85)


def fall_frames(lying_until, step=0.25):
    """
    Calibrate, crouch, drop, then lie still until ``lying_until``.

    Timestamps are multiples of 0.25s so elapsed times are exact. The drop
    at t=0.75 moves the hips 0.125 in 0.25s: hip velocity 0.5/s.
    """
    frames = [standing(0.0), standing(0.25), crouching(0.5), lying(0.75)]
    t = 0.75 + step
    while t <= lying_until:
        frames.append(lying(t))
        t += step
    return frames


class FakeHandle:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


class FakeScheduler:
    """Records scheduled ticks; tests fire them by hand."""

    def __init__(self):
        self.handles = []

    def call_every(self, interval, callback):
        handle = FakeHandle(interval, callback)
        self.handles.append(handle)
        return handle

    @property
    def current(self):
        return self.handles[-1]


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def engine():
    return FallDecisionEngine()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def clock():
    return FakeClock(100.0)
