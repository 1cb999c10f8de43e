import pytest

from fallguard.detectors.calibration import CalibrationTracker
from fallguard.utils.constants import REQUIRED_KEYPOINTS, PoseLandmarks

from .conftest import make_frame


def test_calibrates_on_tall_confident_frame():
    tracker = CalibrationTracker()
    frame = make_frame(1.5, nose_y=0.3, ankle_y=0.7)

    assert tracker.calibrate(frame) is True
    assert tracker.is_calibrated
    assert tracker.baseline.height == pytest.approx(0.4)
    assert tracker.baseline.established_at == 1.5


@pytest.mark.parametrize("keypoint", REQUIRED_KEYPOINTS)
def test_fails_when_required_keypoint_not_confident(keypoint):
    tracker = CalibrationTracker()
    frame = make_frame(0.0, nose_y=0.3, ankle_y=0.7, overrides={keypoint: 0.5})

    assert tracker.calibrate(frame) is False
    assert not tracker.is_calibrated
    assert tracker.baseline is None


def test_unused_keypoints_do_not_matter():
    tracker = CalibrationTracker()
    frame = make_frame(
        0.0,
        nose_y=0.3,
        ankle_y=0.7,
        overrides={PoseLandmarks.LEFT_SHOULDER: 0.0, PoseLandmarks.RIGHT_KNEE: 0.0},
    )
    assert tracker.calibrate(frame) is True


def test_fails_when_subject_too_short():
    tracker = CalibrationTracker()
    assert tracker.calibrate(make_frame(0.0, nose_y=0.55, ankle_y=0.8)) is False
    assert tracker.calibrate(make_frame(0.1, nose_y=0.6, ankle_y=0.8)) is False
    assert tracker.failed_attempts == 2

    # Retried every frame with no cap
    assert tracker.calibrate(make_frame(0.2, nose_y=0.2, ankle_y=0.8)) is True
    assert tracker.failed_attempts == 0


def test_baseline_not_overwritten():
    tracker = CalibrationTracker()
    tracker.calibrate(make_frame(0.0, nose_y=0.3, ankle_y=0.7))
    tracker.calibrate(make_frame(1.0, nose_y=0.1, ankle_y=0.9))

    assert tracker.baseline.height == pytest.approx(0.4)
    assert tracker.baseline.established_at == 0.0


def test_reset_allows_recalibration():
    tracker = CalibrationTracker()
    tracker.calibrate(make_frame(0.0, nose_y=0.3, ankle_y=0.7))
    tracker.reset()
    assert not tracker.is_calibrated

    tracker.calibrate(make_frame(2.0, nose_y=0.1, ankle_y=0.9))
    assert tracker.baseline.height == pytest.approx(0.8)


def test_warns_after_repeated_failures(caplog):
    tracker = CalibrationTracker(warn_after=3)
    with caplog.at_level("WARNING", logger="fallguard.detectors.calibration"):
        for i in range(5):
            tracker.calibrate(make_frame(float(i), visibility=0.1))

    warnings = [r for r in caplog.records if r.levelname == "WARNING"]
    assert len(warnings) == 1
