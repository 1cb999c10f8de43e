"""
Configuration management for the fall monitoring core.
Loads settings from environment variables with the documented defaults.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class Settings:
    """
    Centralized configuration management.
    All settings can be overridden via environment variables.
    """

    def __init__(self):
        # Ground classification
        self.HEIGHT_DROP_THRESHOLD: float = self._get_float(
            "HEIGHT_DROP_THRESHOLD", 0.5
        )  # ratio of standing height
        self.HIP_GROUND_LEVEL: float = self._get_float("HIP_GROUND_LEVEL", 0.6)

        # Motion
        self.VELOCITY_THRESHOLD: float = self._get_float(
            "VELOCITY_THRESHOLD", 0.3
        )  # normalized units per second
        self.HISTORY_WINDOW_FRAMES: int = self._get_int("HISTORY_WINDOW_FRAMES", 30)

        # Episode timing (milliseconds)
        self.CONFIRMATION_WINDOW_MS: int = self._get_int(
            "CONFIRMATION_WINDOW_MS", 2000
        )
        self.FALSE_POSITIVE_WINDOW_MS: int = self._get_int(
            "FALSE_POSITIVE_WINDOW_MS", 5000
        )
        self.STALE_EPISODE_MS: int = self._get_int("STALE_EPISODE_MS", 3000)

        # Keypoint quality and calibration
        self.MIN_KEYPOINT_CONFIDENCE: float = self._get_float(
            "MIN_KEYPOINT_CONFIDENCE", 0.5
        )
        self.MIN_CALIBRATION_HEIGHT: float = self._get_float(
            "MIN_CALIBRATION_HEIGHT", 0.3
        )
        self.CALIBRATION_WARN_AFTER: int = self._get_int(
            "CALIBRATION_WARN_AFTER", 90
        )  # frames, ~3s at 30fps

        # Countdown
        self.COUNTDOWN_DURATION: int = self._get_int("COUNTDOWN_DURATION", 10)
        self.TICK_INTERVAL: float = self._get_float("TICK_INTERVAL", 1.0)  # seconds

        # Event delivery
        self.EVENT_QUEUE_SIZE: int = self._get_int("EVENT_QUEUE_SIZE", 100)
        self.EVENT_LOG_SIZE: int = self._get_int("EVENT_LOG_SIZE", 100)
        self.NOTIFY_TIMEOUT: float = self._get_float("NOTIFY_TIMEOUT", 10.0)

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_DIR: Path = Path(os.getenv("LOG_DIR", "./logs"))

        # Validate critical settings
        self._validate()

    def _get_float(self, name: str, default: float) -> float:
        """
        Read a float environment variable.

        Args:
            name: Environment variable name
            default: Value used when unset or unparsable

        Returns:
            Parsed float value
        """
        raw = os.getenv(name)
        if raw is None or raw == "":
            return default
        try:
            return float(raw)
        except ValueError:
            logger.warning(f"Invalid {name}: {raw!r}, using default {default}")
            return default

    def _get_int(self, name: str, default: int) -> int:
        """Read an integer environment variable, falling back to the default."""
        raw = os.getenv(name)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Invalid {name}: {raw!r}, using default {default}")
            return default

    def _validate(self):
        """Validate configuration settings, resetting bad values to defaults."""
        for name, default in (
            ("HEIGHT_DROP_THRESHOLD", 0.5),
            ("HIP_GROUND_LEVEL", 0.6),
            ("MIN_KEYPOINT_CONFIDENCE", 0.5),
            ("MIN_CALIBRATION_HEIGHT", 0.3),
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                logger.warning(f"Invalid {name}: {value}, using {default}")
                setattr(self, name, default)

        if self.VELOCITY_THRESHOLD <= 0:
            logger.warning(
                f"Invalid VELOCITY_THRESHOLD: {self.VELOCITY_THRESHOLD}, using 0.3"
            )
            self.VELOCITY_THRESHOLD = 0.3

        for name, default in (
            ("HISTORY_WINDOW_FRAMES", 30),
            ("CONFIRMATION_WINDOW_MS", 2000),
            ("FALSE_POSITIVE_WINDOW_MS", 5000),
            ("STALE_EPISODE_MS", 3000),
            ("COUNTDOWN_DURATION", 10),
            ("EVENT_QUEUE_SIZE", 100),
            ("EVENT_LOG_SIZE", 100),
        ):
            value = getattr(self, name)
            if value <= 0:
                logger.warning(f"Invalid {name}: {value}, using {default}")
                setattr(self, name, default)

        if self.HISTORY_WINDOW_FRAMES < 2:
            logger.warning(
                f"HISTORY_WINDOW_FRAMES ({self.HISTORY_WINDOW_FRAMES}) cannot hold "
                f"two frames for velocity, using 30"
            )
            self.HISTORY_WINDOW_FRAMES = 30

        if self.TICK_INTERVAL <= 0:
            logger.warning(f"Invalid TICK_INTERVAL: {self.TICK_INTERVAL}, using 1.0")
            self.TICK_INTERVAL = 1.0

        if self.FALSE_POSITIVE_WINDOW_MS < self.CONFIRMATION_WINDOW_MS:
            logger.warning(
                f"FALSE_POSITIVE_WINDOW_MS ({self.FALSE_POSITIVE_WINDOW_MS}) < "
                f"CONFIRMATION_WINDOW_MS ({self.CONFIRMATION_WINDOW_MS}): confirmed "
                f"falls can be discarded on recovery"
            )

        if self.LOG_LEVEL not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logger.warning(f"Invalid LOG_LEVEL: {self.LOG_LEVEL}, using INFO")
            self.LOG_LEVEL = "INFO"

        logger.info("Configuration validated successfully")

    def detector_config(self) -> dict:
        """Keyword arguments for FallDecisionEngine."""
        return {
            "height_drop_threshold": self.HEIGHT_DROP_THRESHOLD,
            "hip_ground_level": self.HIP_GROUND_LEVEL,
            "velocity_threshold": self.VELOCITY_THRESHOLD,
            "confirmation_window_ms": self.CONFIRMATION_WINDOW_MS,
            "false_positive_window_ms": self.FALSE_POSITIVE_WINDOW_MS,
            "stale_episode_ms": self.STALE_EPISODE_MS,
            "min_keypoint_confidence": self.MIN_KEYPOINT_CONFIDENCE,
            "min_calibration_height": self.MIN_CALIBRATION_HEIGHT,
            "history_window_frames": self.HISTORY_WINDOW_FRAMES,
            "calibration_warn_after": self.CALIBRATION_WARN_AFTER,
        }

    def countdown_config(self) -> dict:
        """Keyword arguments for AlertCountdownController."""
        return {
            "duration": self.COUNTDOWN_DURATION,
            "tick_interval": self.TICK_INTERVAL,
        }

    def log_config(self):
        """Log current configuration (for debugging)."""
        logger.info("=" * 60)
        logger.info("Fall Monitor Configuration")
        logger.info("=" * 60)
        logger.info(f"Height Drop Threshold: {self.HEIGHT_DROP_THRESHOLD}")
        logger.info(f"Hip Ground Level: {self.HIP_GROUND_LEVEL}")
        logger.info(f"Velocity Threshold: {self.VELOCITY_THRESHOLD}/s")
        logger.info(f"History Window: {self.HISTORY_WINDOW_FRAMES} frames")
        logger.info(f"Confirmation Window: {self.CONFIRMATION_WINDOW_MS}ms")
        logger.info(f"False Positive Window: {self.FALSE_POSITIVE_WINDOW_MS}ms")
        logger.info(f"Stale Episode Timeout: {self.STALE_EPISODE_MS}ms")
        logger.info(f"Min Keypoint Confidence: {self.MIN_KEYPOINT_CONFIDENCE}")
        logger.info(f"Min Calibration Height: {self.MIN_CALIBRATION_HEIGHT}")
        logger.info(
            f"Countdown: {self.COUNTDOWN_DURATION} ticks every {self.TICK_INTERVAL}s"
        )
        logger.info(f"Event Queue Size: {self.EVENT_QUEUE_SIZE}")
        logger.info(f"Notify Timeout: {self.NOTIFY_TIMEOUT}s")
        logger.info(f"Log Level: {self.LOG_LEVEL}")
        logger.info("=" * 60)


# Process-wide instance, built on first use
_settings_instance = None


def get_settings() -> Settings:
    """
    Get the shared Settings instance.

    Returns:
        Settings instance with current configuration
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
