"""
Monitoring session: wires the decision engine to the alert countdown.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .alerts.countdown import AlertCountdownController, AlertState, ControlResult
from .alerts.scheduler import Scheduler
from .detectors.fall_detector import DetectionResult, FallDecisionEngine
from .detectors.pose import PoseFrame
from .events.history import FallEventLog
from .events.manager import EventDispatcher
from .events.models import (
    AlertCancelled,
    AlertConfirmed,
    FallDetected,
    MonitorEvent,
    generate_event_id,
)
from .utils.constants import ConfidenceRamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitorUpdate:
    """
    What one incoming frame produced.

    ``result`` is None when the frame was not processed (monitoring stopped
    or no pose in the frame); ``events`` lists the events emitted while
    handling it.
    """

    result: DetectionResult | None
    events: tuple[MonitorEvent, ...] = ()

    @property
    def ignored(self) -> bool:
        return self.result is None


class FallMonitor:
    """
    Owns one monitoring session for one subject.

    Frames and countdown ticks are the only things that mutate state and
    both go through a single re-entrant lock, so they are applied one at a
    time whichever thread they arrive on. Events are returned to the caller
    and, when a dispatcher is attached, queued for notifiers without
    waiting on them.
    """

    def __init__(
        self,
        engine: FallDecisionEngine | None = None,
        scheduler: Scheduler | None = None,
        dispatcher: EventDispatcher | None = None,
        event_log: FallEventLog | None = None,
        countdown_duration: int = 10,
        tick_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize fall monitor.

        Args:
            engine: Decision engine (a default-configured one if None)
            scheduler: Tick source for the countdown; None means the caller
                drives ticks through ``countdown.tick()``
            dispatcher: Background event delivery (optional)
            event_log: Fall history (a new one if None)
            countdown_duration: Ticks before an alert is confirmed
            tick_interval: Seconds between ticks
            clock: Time source, same base as frame timestamps
        """
        self._lock = threading.RLock()
        self.clock = clock
        self.engine = engine if engine is not None else FallDecisionEngine()
        self.event_log = event_log if event_log is not None else FallEventLog()
        self.dispatcher = dispatcher
        self.countdown = AlertCountdownController(
            scheduler=scheduler,
            duration=countdown_duration,
            tick_interval=tick_interval,
            engine=self.engine,
            outbox=self._emit,
            clock=clock,
            lock=self._lock,
        )
        self.monitoring = False

    @classmethod
    def from_settings(
        cls,
        settings,
        scheduler: Scheduler | None = None,
        dispatcher: EventDispatcher | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "FallMonitor":
        """
        Build a monitor from a Settings instance.

        Args:
            settings: fallguard.config.Settings
            scheduler: Tick source for the countdown
            dispatcher: Background event delivery (optional)
            clock: Time source

        Returns:
            Configured FallMonitor
        """
        countdown = settings.countdown_config()
        return cls(
            engine=FallDecisionEngine(**settings.detector_config()),
            scheduler=scheduler,
            dispatcher=dispatcher,
            event_log=FallEventLog(max_events=settings.EVENT_LOG_SIZE),
            countdown_duration=countdown["duration"],
            tick_interval=countdown["tick_interval"],
            clock=clock,
        )

    # Lifecycle

    def start_monitoring(self):
        """Begin a fresh session; the next qualifying frame recalibrates."""
        with self._lock:
            self.countdown.halt()
            self.engine.reset(recalibrate=True)
            self.monitoring = True
            logger.info("Monitoring started, waiting for calibration")

    def stop_monitoring(self):
        """
        End the session.

        Any countdown is halted and all engine state dropped before this
        returns; frames and ticks arriving afterwards change nothing.
        """
        with self._lock:
            self.monitoring = False
            self.countdown.halt()
            self.engine.reset(recalibrate=True)
            logger.info("Monitoring stopped")

    def reset(self):
        """Clear detection history and any countdown, keeping calibration."""
        with self._lock:
            self.countdown.halt()
            self.engine.reset()
            logger.info("Monitor reset")

    def rearm(self) -> ControlResult:
        """Return a finished countdown to IDLE and start detection afresh."""
        with self._lock:
            result = self.countdown.rearm()
            if result.accepted:
                self.engine.reset()
            return result

    def cancel_fall(self) -> ControlResult:
        """The subject is fine: cancel the countdown."""
        return self.countdown.cancel()

    def confirm_fall(self) -> ControlResult:
        """Send the alert now instead of waiting for the countdown."""
        return self.countdown.confirm_now()

    def trigger_emergency(self) -> ControlResult:
        """
        Raise an alert by hand, independent of the detection engine.

        Confirms the running countdown if there is one; otherwise emits a
        manual FallDetected and confirms it immediately, re-arming after an
        earlier confirmed alert.
        """
        with self._lock:
            if self.countdown.active:
                return self.countdown.confirm_now()
            if self.countdown.state is AlertState.CONFIRMED:
                self.countdown.rearm()

            event = FallDetected(
                event_id=generate_event_id(),
                timestamp=self.clock(),
                confidence=ConfidenceRamp.MANUAL,
                manual=True,
            )
            logger.warning(f"Manual emergency raised: {event.event_id}")
            self._emit(event)
            self.countdown.start(event)
            return self.countdown.confirm_now()

    # Frame ingestion

    def process_frame(self, frame: PoseFrame) -> MonitorUpdate:
        """
        Feed one pose frame.

        Args:
            frame: Latest pose from the pose-estimation collaborator

        Returns:
            MonitorUpdate with the engine result and any emitted events
        """
        with self._lock:
            if not self.monitoring:
                return MonitorUpdate(None)

            result = self.engine.process_frame(frame)
            if not result.detected:
                return MonitorUpdate(result)

            if self.countdown.active:
                logger.warning(
                    "Fall detected while a countdown is active, not starting another"
                )
                return MonitorUpdate(result)

            if self.countdown.state is AlertState.CONFIRMED:
                logger.warning(
                    "Fall detected after a confirmed alert, waiting for rearm"
                )
                return MonitorUpdate(result)

            event = FallDetected(
                event_id=generate_event_id(),
                timestamp=frame.timestamp,
                confidence=result.confidence,
                skeleton_snapshot=frame.landmarks.copy(),
            )
            self._emit(event)
            self.countdown.start(event)
            return MonitorUpdate(result, (event,))

    def process_landmarks(self, landmarks: Iterable | None, timestamp: float) -> MonitorUpdate:
        """
        Feed landmark objects straight from a pose-estimation result.

        Args:
            landmarks: Landmark objects (``.x .y .z .visibility``), or None
                when no pose was found
            timestamp: Capture time in seconds

        Returns:
            MonitorUpdate (ignored when no pose was found)
        """
        if not landmarks:
            return MonitorUpdate(None)
        return self.process_frame(PoseFrame.from_landmarks(landmarks, timestamp))

    # Events

    def _emit(self, event: MonitorEvent):
        with self._lock:
            if isinstance(event, FallDetected):
                self.event_log.record_detection(event)
            elif isinstance(event, AlertCancelled):
                self.event_log.mark_cancelled(event.event_id, event.timestamp)
            elif isinstance(event, AlertConfirmed):
                self.event_log.mark_alert_sent(event.event_id, event.timestamp)

            if self.dispatcher is not None:
                self.dispatcher.publish(event)

    def get_status(self) -> dict:
        """
        Snapshot of the session for display.

        Returns:
            Dictionary with monitoring flag, countdown and engine state
        """
        with self._lock:
            return {
                "is_monitoring": self.monitoring,
                "countdown": self.countdown.get_status(),
                "confidence": self.engine.confidence,
                "engine": self.engine.get_stats(),
                "history": self.event_log.get_statistics(),
            }
