import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..utils.constants import ConfidenceRamp
from .calibration import CalibrationBaseline, CalibrationTracker
from .ground import is_on_ground
from .pose import PoseFrame, has_valid_confidence
from .velocity import VelocityEstimator, VelocitySample

logger = logging.getLogger(__name__)


class FallDecisionState(enum.Enum):
    UNCALIBRATED = "uncalibrated"
    MONITORING = "monitoring"


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of one frame.

    ``detected`` is True only on the single frame where an episode is first
    confirmed. ``confidence`` is an indicator of sustained ground contact and
    must not be read as an ongoing-fall flag. ``reason`` names why no decision
    was made (``"uncalibrated"``, ``"low_confidence"``, ``"insufficient_data"``)
    and is None for frames that went through the full decision path.
    """

    detected: bool
    confidence: float
    on_ground: bool
    velocities: VelocitySample | None = None
    reason: str | None = None


class FallDecisionEngine:
    """
    Streaming fall decision state machine over MediaPipe pose landmarks.

    Combines calibration, ground classification and keypoint velocities
    across time:

    1. Episode start: the subject reaches the ground (rising edge) while the
       nose or hips move faster than ``velocity_threshold``.
    2. Confirmation: the subject stays down for ``confirmation_window_ms``;
       the fall is reported once on the frame this first holds.
    3. False-positive suppression: getting up within
       ``false_positive_window_ms`` of the episode start discards it.
    4. Stale reset: an episode left over while the subject has been up for
       more than ``stale_episode_ms`` is cleared.

    All timing uses frame timestamps, so a recorded sequence replays
    deterministically. Per-frame work is O(1).
    """

    def __init__(
        self,
        height_drop_threshold: float = 0.5,
        hip_ground_level: float = 0.6,
        velocity_threshold: float = 0.3,
        confirmation_window_ms: float = 2000,
        false_positive_window_ms: float = 5000,
        stale_episode_ms: float = 3000,
        min_keypoint_confidence: float = 0.5,
        min_calibration_height: float = 0.3,
        history_window_frames: int = 30,
        calibration_warn_after: int = 90,
    ):
        """
        Initialize fall decision engine.

        Args:
            height_drop_threshold: Height ratio below which the subject may be down
            hip_ground_level: Hip y above which the subject may be down
            velocity_threshold: Nose or hip speed (units/s) that marks a rapid descent
            confirmation_window_ms: Time on the ground before a fall is reported
            false_positive_window_ms: Recovery within this time discards the episode
            stale_episode_ms: Time standing after which a lingering episode is cleared
            min_keypoint_confidence: Visibility every required keypoint must exceed
            min_calibration_height: Smallest standing height accepted
            history_window_frames: Capacity of the frame and velocity buffers
            calibration_warn_after: Failed calibration frames before a warning
        """
        self.height_drop_threshold = height_drop_threshold
        self.hip_ground_level = hip_ground_level
        self.velocity_threshold = velocity_threshold
        self.confirmation_window_ms = confirmation_window_ms
        self.false_positive_window_ms = false_positive_window_ms
        self.stale_episode_ms = stale_episode_ms
        self.min_keypoint_confidence = min_keypoint_confidence

        self.calibration = CalibrationTracker(
            min_keypoint_confidence=min_keypoint_confidence,
            min_calibration_height=min_calibration_height,
            warn_after=calibration_warn_after,
        )
        self.velocity = VelocityEstimator(history_window_frames)

        # Episode tracking
        self.on_ground = False
        self.fall_episode_start: float | None = None
        self.episode_confirmed = False
        self.last_standing_time = 0.0
        self.confidence = 0.0

        logger.info("FallDecisionEngine initialized")
        logger.info(f"  Height drop threshold: {height_drop_threshold}")
        logger.info(f"  Velocity threshold: {velocity_threshold}/s")
        logger.info(f"  Confirmation window: {confirmation_window_ms}ms")
        logger.info(f"  False positive window: {false_positive_window_ms}ms")

    @property
    def state(self) -> FallDecisionState:
        if self.calibration.is_calibrated:
            return FallDecisionState.MONITORING
        return FallDecisionState.UNCALIBRATED

    @property
    def baseline(self) -> CalibrationBaseline | None:
        return self.calibration.baseline

    @property
    def episode_active(self) -> bool:
        return self.fall_episode_start is not None

    def process_frame(self, frame: PoseFrame) -> DetectionResult:
        """
        Advance the state machine by one frame.

        Args:
            frame: Pose for the current instant

        Returns:
            DetectionResult for this frame
        """
        if not self.calibration.is_calibrated:
            if self.calibration.calibrate(frame):
                self.last_standing_time = frame.timestamp
            return DetectionResult(False, 0.0, False, reason="uncalibrated")

        if not has_valid_confidence(frame, self.min_keypoint_confidence):
            return DetectionResult(
                False, 0.0, self.on_ground, reason="low_confidence"
            )

        velocities = self.velocity.push(frame)
        if velocities is None:
            return DetectionResult(
                False, 0.0, self.on_ground, reason="insufficient_data"
            )

        now = frame.timestamp
        was_on_ground = self.on_ground
        self.on_ground = is_on_ground(
            frame,
            self.calibration.baseline,
            self.height_drop_threshold,
            self.hip_ground_level,
        )

        rapid_descent = (
            velocities.nose_velocity > self.velocity_threshold
            or velocities.hip_velocity > self.velocity_threshold
        )

        detected = False
        confidence = 0.0

        if self.on_ground and not was_on_ground and rapid_descent:
            if self.fall_episode_start is not None:
                logger.debug("New descent replaces the open fall episode")
            self.fall_episode_start = now
            self.episode_confirmed = False
            confidence = min(
                velocities.hip_velocity * 100, ConfidenceRamp.EPISODE_START_CAP
            )
            logger.info(
                f"Fall episode started: nose {velocities.nose_velocity:.2f}/s, "
                f"hip {velocities.hip_velocity:.2f}/s"
            )
        elif self.on_ground and self.fall_episode_start is not None:
            elapsed_ms = (now - self.fall_episode_start) * 1000
            if elapsed_ms >= self.confirmation_window_ms:
                confidence = min(
                    ConfidenceRamp.CONFIRMED_BASE
                    + (elapsed_ms / 1000) * ConfidenceRamp.CONFIRMED_PER_SECOND,
                    ConfidenceRamp.CONFIRMED_CAP,
                )
                if not self.episode_confirmed:
                    self.episode_confirmed = True
                    detected = True
                    logger.warning(
                        f"Fall confirmed after {elapsed_ms:.0f}ms on the ground "
                        f"(confidence {confidence:.1f})"
                    )
            else:
                confidence = (
                    elapsed_ms / self.confirmation_window_ms
                ) * ConfidenceRamp.RAMP_CEILING

        if not self.on_ground and was_on_ground:
            if self.fall_episode_start is not None:
                elapsed_ms = (now - self.fall_episode_start) * 1000
                if elapsed_ms < self.false_positive_window_ms:
                    logger.info(
                        f"Subject recovered after {elapsed_ms:.0f}ms, "
                        f"discarding fall episode"
                    )
                    self._clear_episode()
                    confidence = 0.0
            self.last_standing_time = now

        if (
            not self.on_ground
            and self.fall_episode_start is not None
            and (now - self.last_standing_time) * 1000 > self.stale_episode_ms
        ):
            logger.debug("Clearing stale fall episode")
            self._clear_episode()

        self.confidence = max(ConfidenceRamp.MIN, min(confidence, ConfidenceRamp.MAX))
        return DetectionResult(
            detected=detected,
            confidence=self.confidence,
            on_ground=self.on_ground,
            velocities=velocities,
        )

    def process_sequence(self, frames: Iterable[PoseFrame]) -> list[DetectionResult]:
        """
        Run a recorded sequence of frames through the engine.

        Args:
            frames: Frames in capture order

        Returns:
            One DetectionResult per frame
        """
        return [self.process_frame(frame) for frame in frames]

    def _clear_episode(self):
        self.fall_episode_start = None
        self.episode_confirmed = False

    def reset(self, recalibrate: bool = False):
        """
        Clear episode markers, ground state and both history buffers.

        Args:
            recalibrate: Also drop the calibration baseline
        """
        self._clear_episode()
        self.on_ground = False
        self.confidence = 0.0
        self.velocity.reset()
        if recalibrate:
            self.calibration.reset()
        logger.debug(f"Engine reset (recalibrate={recalibrate})")

    def get_stats(self) -> dict:
        """
        Get detection statistics.

        Returns:
            Dictionary with calibration and history information
        """
        baseline = self.calibration.baseline
        return {
            "state": self.state.value,
            "is_calibrated": baseline is not None,
            "initial_height": baseline.height if baseline else 0.0,
            "is_on_ground": self.on_ground,
            "episode_active": self.episode_active,
            "history_length": len(self.velocity.frames),
            "velocity_history_length": len(self.velocity.samples),
            "confidence": self.confidence,
        }
