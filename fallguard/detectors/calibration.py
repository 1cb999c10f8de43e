"""
Standing-height calibration from early high-confidence frames.
"""

import logging
from dataclasses import dataclass

from .pose import PoseFrame, body_height, has_valid_confidence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationBaseline:
    """Standing height (normalized) and the frame time it was measured at."""

    height: float
    established_at: float


class CalibrationTracker:
    """
    Establishes the subject's standing height once per monitoring session.

    Each call to ``calibrate`` tests a single frame; there is no history.
    A frame that fails the confidence or height check leaves the tracker
    uncalibrated and the next frame is tried. Once a baseline is recorded
    it is kept until ``reset()``.
    """

    def __init__(
        self,
        min_keypoint_confidence: float = 0.5,
        min_calibration_height: float = 0.3,
        warn_after: int = 90,
    ):
        """
        Initialize calibration tracker.

        Args:
            min_keypoint_confidence: Visibility every required keypoint must exceed
            min_calibration_height: Smallest nose-to-ankle height accepted
            warn_after: Log a diagnostic after this many consecutive failures
        """
        self.min_keypoint_confidence = min_keypoint_confidence
        self.min_calibration_height = min_calibration_height
        self.warn_after = warn_after

        self.baseline: CalibrationBaseline | None = None
        self.failed_attempts = 0

    @property
    def is_calibrated(self) -> bool:
        return self.baseline is not None

    def calibrate(self, frame: PoseFrame) -> bool:
        """
        Try to establish the baseline from one frame.

        Args:
            frame: Candidate standing pose

        Returns:
            True if a baseline exists after this call, False otherwise
        """
        if self.baseline is not None:
            return True

        if not has_valid_confidence(frame, self.min_keypoint_confidence):
            self._record_failure("low keypoint confidence")
            return False

        height = body_height(frame)
        if height <= self.min_calibration_height:
            self._record_failure(f"height {height:.3f} too small")
            return False

        self.baseline = CalibrationBaseline(height=height, established_at=frame.timestamp)
        logger.info(
            f"Calibrated standing height {height:.3f} "
            f"after {self.failed_attempts} rejected frames"
        )
        self.failed_attempts = 0
        return True

    def _record_failure(self, reason: str):
        self.failed_attempts += 1
        logger.debug(f"Calibration frame rejected: {reason}")
        if self.failed_attempts == self.warn_after:
            logger.warning(
                f"Still uncalibrated after {self.failed_attempts} frames "
                f"(last reason: {reason}); subject should stand fully in view"
            )

    def reset(self):
        """Forget the baseline so the next qualifying frame recalibrates."""
        if self.baseline is not None:
            logger.info("Calibration baseline cleared")
        self.baseline = None
        self.failed_attempts = 0
