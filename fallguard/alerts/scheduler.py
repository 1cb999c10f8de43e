"""
Cancellable periodic ticks on an asyncio event loop.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_every(self, interval: float, callback: Callable[[], None]) -> Cancellable: ...


class TickHandle:
    """
    Handle for a periodic callback scheduled by AsyncioScheduler.

    ``cancel()`` is synchronous and idempotent. The flag is checked right
    before every invocation, so a timer that already expired but has not
    run yet fires as a no-op.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback):
        self._loop = loop
        self.interval = interval
        self._callback = callback
        self._timer: asyncio.TimerHandle | None = None
        self._next_deadline = 0.0
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _arm(self):
        if self._cancelled:
            return
        self._next_deadline = self._loop.time() + self.interval
        self._timer = self._loop.call_at(self._next_deadline, self._fire)

    def _fire(self):
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Tick callback failed: {e}", exc_info=True)
        if self._cancelled:
            return
        # Deadlines advance from the previous one so ticks do not drift
        self._next_deadline += self.interval
        self._timer = self._loop.call_at(self._next_deadline, self._fire)

    def cancel(self):
        if self._cancelled:
            return
        self._cancelled = True
        timer = self._timer
        if timer is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            timer.cancel()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(timer.cancel)


class AsyncioScheduler:
    """
    Periodic scheduling on a given event loop.

    Safe to call from threads other than the loop's own: arming the first
    timer is handed to the loop with ``call_soon_threadsafe``.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> TickHandle:
        """
        Invoke ``callback`` every ``interval`` seconds until cancelled.

        Args:
            interval: Seconds between calls; the first call is one interval away
            callback: Zero-argument callable run on the loop thread

        Returns:
            TickHandle used to stop the ticks
        """
        handle = TickHandle(self._loop, interval, callback)
        self._loop.call_soon_threadsafe(handle._arm)
        logger.debug(f"Scheduled ticks every {interval}s")
        return handle
