import numpy as np
import pytest

from fallguard.detectors.velocity import VelocityEstimator, landmark_velocity

from .conftest import make_frame


def test_landmark_velocity_is_planar_distance_over_time():
    current = np.array([0.3, 0.4, 5.0, 1.0])
    previous = np.array([0.0, 0.0, -5.0, 1.0])
    assert landmark_velocity(current, previous, 0.5) == pytest.approx(1.0)


def test_landmark_velocity_zero_elapsed_time():
    current = np.array([0.9, 0.9, 0.0, 1.0])
    previous = np.array([0.1, 0.1, 0.0, 1.0])
    assert landmark_velocity(current, previous, 0.0) == 0.0


def test_insufficient_data_with_one_frame():
    estimator = VelocityEstimator()
    assert estimator.push(make_frame(0.0)) is None
    assert estimator.latest_sample() is None
    assert len(estimator.samples) == 0


def test_sample_from_two_latest_frames():
    estimator = VelocityEstimator()
    estimator.push(make_frame(0.0, nose_y=0.2, hip_y=0.5, ankle_y=0.8))
    estimator.push(make_frame(1.0, nose_y=0.2, hip_y=0.5, ankle_y=0.8))
    sample = estimator.push(make_frame(1.5, nose_y=0.4, hip_y=0.6, ankle_y=0.8))

    assert sample.nose_velocity == pytest.approx(0.4)
    assert sample.hip_velocity == pytest.approx(0.2)
    assert sample.ankle_velocity == pytest.approx(0.0)
    assert sample.timestamp == 1.5
    assert len(estimator.samples) == 2


def test_hip_velocity_averages_left_and_right():
    estimator = VelocityEstimator()
    first = make_frame(0.0)
    moved = first.landmarks.copy()
    moved[23, 1] += 0.3  # left hip only
    estimator.push(first)
    sample = estimator.push(type(first)(moved, 1.0))

    assert sample.hip_velocity == pytest.approx(0.15)


def test_duplicate_timestamps_report_zero():
    estimator = VelocityEstimator()
    estimator.push(make_frame(2.0, nose_y=0.2))
    sample = estimator.push(make_frame(2.0, nose_y=0.7))

    assert sample.nose_velocity == 0.0
    assert sample.hip_velocity == 0.0


def test_buffers_stay_bounded():
    estimator = VelocityEstimator(history_window_frames=30)
    for i in range(1000):
        estimator.push(make_frame(i / 30, nose_y=0.2 + (i % 2) * 0.01))
        assert len(estimator.frames) <= 30
        assert len(estimator.samples) <= 30

    assert len(estimator.frames) == 30
    assert len(estimator.samples) == 30


def test_reset_empties_history():
    estimator = VelocityEstimator()
    for i in range(5):
        estimator.push(make_frame(float(i)))
    estimator.reset()

    assert len(estimator) == 0
    assert len(estimator.samples) == 0
    assert estimator.latest_sample() is None
