"""
Cancellable countdown between fall detection and caregiver alert.
"""

import enum
import functools
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..events.models import AlertCancelled, AlertConfirmed, FallDetected, MonitorEvent
from .scheduler import Cancellable, Scheduler

logger = logging.getLogger(__name__)


class AlertState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    COUNTING_DOWN = "counting_down"
    CANCELLED = "cancelled"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class ControlResult:
    """
    Outcome of a countdown command.

    ``accepted`` is False for caller misuse (e.g. cancelling when no
    countdown runs); ``reason`` then says why and the state is unchanged.
    """

    accepted: bool
    state: AlertState
    event: MonitorEvent | None = None
    reason: str | None = None


class AlertCountdownController:
    """
    Countdown state machine armed by a fall detection.

    States: IDLE -> ARMED -> COUNTING_DOWN -> CANCELLED | CONFIRMED.
    CONFIRMED stays until the controller is re-armed with ``rearm()``.
    CANCELLED is re-armed implicitly by the next ``start()``.

    Every command takes the shared lock, so scheduled ticks and caller
    commands never interleave. Each countdown gets a generation number;
    ticks scheduled for an earlier countdown are ignored, so a cancelled
    countdown can never confirm late.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        duration: int = 10,
        tick_interval: float = 1.0,
        engine=None,
        outbox: Callable[[MonitorEvent], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        lock=None,
    ):
        """
        Initialize countdown controller.

        Args:
            scheduler: Source of periodic ticks; None means ticks are driven
                by calling tick() directly
            duration: Ticks from start to confirmation
            tick_interval: Seconds between ticks
            engine: FallDecisionEngine reset after a cancellation (optional)
            outbox: Receives every event this controller emits
            clock: Time source for event timestamps
            lock: RLock shared with the owner of the detection engine
        """
        self.scheduler = scheduler
        self.duration = duration
        self.tick_interval = tick_interval
        self.engine = engine
        self.outbox = outbox
        self.clock = clock
        self._lock = lock if lock is not None else threading.RLock()

        self.state = AlertState.IDLE
        self.remaining = duration
        self.trigger: FallDetected | None = None
        self._handle: Cancellable | None = None
        self._generation = 0

        logger.info(
            f"Initialized AlertCountdownController: {duration} ticks "
            f"every {tick_interval}s"
        )

    @property
    def active(self) -> bool:
        return self.state in (AlertState.ARMED, AlertState.COUNTING_DOWN)

    def start(self, trigger: FallDetected) -> ControlResult:
        """
        Arm the countdown for a detected fall and start ticking.

        Args:
            trigger: The detection that caused the countdown

        Returns:
            ControlResult; rejected if a countdown is already active or an
            alert was confirmed and not re-armed
        """
        with self._lock:
            if self.active:
                logger.warning(
                    f"Countdown already active for {self.trigger.event_id}, "
                    f"ignoring start for {trigger.event_id}"
                )
                return self._reject("countdown_active")

            if self.state is AlertState.CONFIRMED:
                logger.warning(
                    f"Alert for {self.trigger.event_id} already confirmed, "
                    f"ignoring start for {trigger.event_id} until re-armed"
                )
                return self._reject("alert_confirmed")

            if self.state is AlertState.CANCELLED:
                logger.info("Re-arming countdown after cancellation")

            self.state = AlertState.ARMED
            self.trigger = trigger
            self.remaining = self.duration
            self._generation += 1

            if self.scheduler is not None:
                self._handle = self.scheduler.call_every(
                    self.tick_interval,
                    functools.partial(self._scheduled_tick, self._generation),
                )

            self.state = AlertState.COUNTING_DOWN
            logger.warning(
                f"Countdown started for fall {trigger.event_id}: "
                f"{self.remaining} ticks until alert"
            )
            return ControlResult(True, self.state)

    def _scheduled_tick(self, generation: int):
        with self._lock:
            if generation != self._generation:
                logger.debug("Ignoring tick from a finished countdown")
                return
            self.tick()

    def tick(self) -> ControlResult:
        """
        Count down by one; confirm the alert when the count reaches zero.

        Returns:
            ControlResult carrying AlertConfirmed on the final tick
        """
        with self._lock:
            if self.state is not AlertState.COUNTING_DOWN:
                return self._reject("not_counting_down")

            self.remaining = max(self.remaining - 1, 0)
            logger.info(f"Countdown: {self.remaining}")
            if self.remaining == 0:
                return self._confirm()
            return ControlResult(True, self.state)

    def cancel(self) -> ControlResult:
        """
        Cancel the running countdown (the subject reported they are fine).

        Pending ticks are stopped before this returns and the detection
        engine is reset so a new episode starts cleanly.

        Returns:
            ControlResult carrying AlertCancelled, or a rejection
        """
        with self._lock:
            if self.state is not AlertState.COUNTING_DOWN:
                logger.warning(f"Cannot cancel countdown in state {self.state.value}")
                return self._reject("not_counting_down")

            self._stop_ticks()
            self.state = AlertState.CANCELLED
            self.remaining = self.duration
            event = AlertCancelled(event_id=self.trigger.event_id, timestamp=self.clock())
            if self.engine is not None:
                self.engine.reset()
            logger.info(f"Countdown cancelled for fall {event.event_id}")
            self._emit(event)
            return ControlResult(True, self.state, event)

    def confirm_now(self) -> ControlResult:
        """
        Confirm the alert immediately, skipping the remaining ticks.

        Returns:
            ControlResult carrying AlertConfirmed, or a rejection
        """
        with self._lock:
            if self.state is not AlertState.COUNTING_DOWN:
                logger.warning(f"Cannot confirm countdown in state {self.state.value}")
                return self._reject("not_counting_down")
            return self._confirm()

    def rearm(self) -> ControlResult:
        """Return from a terminal state to IDLE so a new countdown can start."""
        with self._lock:
            if self.active:
                return self._reject("countdown_active")
            self.state = AlertState.IDLE
            self.remaining = self.duration
            self.trigger = None
            return ControlResult(True, self.state)

    def halt(self):
        """Stop any countdown without emitting events and return to IDLE."""
        with self._lock:
            if self.active:
                logger.info(
                    f"Countdown halted with {self.remaining} ticks left "
                    f"for fall {self.trigger.event_id}"
                )
            self._stop_ticks()
            self._generation += 1
            self.state = AlertState.IDLE
            self.remaining = self.duration
            self.trigger = None

    def _confirm(self) -> ControlResult:
        self._stop_ticks()
        self.state = AlertState.CONFIRMED
        self.remaining = 0
        event = AlertConfirmed(event_id=self.trigger.event_id, timestamp=self.clock())
        logger.warning(f"Alert confirmed for fall {event.event_id}")
        self._emit(event)
        return ControlResult(True, self.state, event)

    def _stop_ticks(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _emit(self, event: MonitorEvent):
        if self.outbox is not None:
            self.outbox(event)

    def _reject(self, reason: str) -> ControlResult:
        return ControlResult(False, self.state, reason=reason)

    def get_status(self) -> dict:
        with self._lock:
            return {
                "state": self.state.value,
                "remaining": self.remaining,
                "duration": self.duration,
                "event_id": self.trigger.event_id if self.trigger else None,
            }
