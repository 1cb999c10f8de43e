"""
Fire-and-forget delivery of monitor events to notification collaborators.
Runs notifiers in the background so detection and countdown ticks never wait on them.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .models import MonitorEvent

logger = logging.getLogger(__name__)

Notifier = Callable[[MonitorEvent], Awaitable[Any] | Any]


class EventDispatcher:
    """
    Hands monitor events to notifiers without blocking the caller.

    Architecture:
    - The monitor calls publish() under its lock (from any thread, non-blocking)
    - A background task on the event loop drains the queue
    - Each notifier is awaited with a timeout; sync notifiers run in a worker
      thread so a slow one cannot stall the loop that drives countdown ticks

    A failing notifier is logged and counted, never re-raised.
    """

    def __init__(
        self,
        notifiers: list[Notifier] | None = None,
        queue_size: int = 100,
        notify_timeout: float = 10.0,
    ):
        """
        Initialize event dispatcher.

        Args:
            notifiers: Callables receiving each event (sync or async)
            queue_size: Maximum number of undelivered events
            notify_timeout: Seconds a single notifier call may take
        """
        self.notifiers: list[Notifier] = list(notifiers or [])
        self.queue_size = queue_size
        self.notify_timeout = notify_timeout

        self.queue: asyncio.Queue | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None

        # Statistics
        self.total_published = 0
        self.total_delivered = 0
        self.total_failed = 0
        self.total_dropped = 0

        # Running flag
        self.running = False

        logger.info(
            f"Initialized EventDispatcher: {len(self.notifiers)} notifiers, "
            f"queue size {queue_size}"
        )

    def start(self) -> asyncio.Task:
        """
        Bind to the running event loop and start the background processor.

        Must be called from a coroutine running on the loop that will
        deliver events.

        Returns:
            The processor task
        """
        self._loop = asyncio.get_running_loop()
        self.queue = asyncio.Queue(maxsize=self.queue_size)
        self.running = True
        self._task = self._loop.create_task(self.process_events())
        return self._task

    def publish(self, event: MonitorEvent) -> bool:
        """
        Queue an event for delivery (safe to call from any thread).

        Args:
            event: Event to deliver

        Returns:
            True if the event was handed to the loop, False if the dispatcher
            is not running or the queue is full
        """
        if not self.running or self._loop is None or self.queue is None:
            logger.warning(f"Dispatcher not running, dropping {type(event).__name__}")
            self.total_dropped += 1
            return False

        if self.queue.full():
            logger.error("Event queue is full, cannot queue event")
            self.total_dropped += 1
            return False

        try:
            self._loop.call_soon_threadsafe(self._enqueue, event)
        except RuntimeError:
            logger.error("Event loop closed, cannot queue event")
            self.total_dropped += 1
            return False
        return True

    def _enqueue(self, event: MonitorEvent):
        try:
            self.queue.put_nowait(event)
            self.total_published += 1
            logger.debug(
                f"Queued {type(event).__name__} (total: {self.total_published})"
            )
        except asyncio.QueueFull:
            logger.error("Event queue is full, dropping event")
            self.total_dropped += 1

    async def process_events(self):
        """
        Background task: deliver events from the queue.

        Started by start(); runs until stop() or cancellation.
        """
        logger.info("Event processor started")

        try:
            while self.running:
                # Wait for event (with timeout to allow graceful shutdown)
                try:
                    event = await asyncio.wait_for(self.queue.get(), timeout=1.0)
                except TimeoutError:
                    continue

                try:
                    await self._deliver(event)
                finally:
                    self.queue.task_done()

        except asyncio.CancelledError:
            logger.info("Event processor cancelled")
            raise

        finally:
            logger.info("Event processor stopped")

    async def _deliver(self, event: MonitorEvent):
        """
        Pass one event to every notifier.

        Args:
            event: Event to deliver
        """
        for notifier in self.notifiers:
            name = getattr(notifier, "__name__", type(notifier).__name__)
            try:
                if inspect.iscoroutinefunction(notifier) or inspect.iscoroutinefunction(
                    getattr(notifier, "__call__", None)
                ):
                    await asyncio.wait_for(notifier(event), timeout=self.notify_timeout)
                else:
                    await asyncio.wait_for(
                        asyncio.to_thread(notifier, event), timeout=self.notify_timeout
                    )
                self.total_delivered += 1

            except TimeoutError:
                self.total_failed += 1
                logger.warning(
                    f"Notifier {name} timed out after {self.notify_timeout}s "
                    f"delivering {type(event).__name__}"
                )

            except Exception as e:
                self.total_failed += 1
                logger.error(
                    f"Notifier {name} failed delivering {type(event).__name__}: {e}",
                    exc_info=True,
                )

    async def stop(self, timeout: float = 30.0):
        """
        Stop event processor gracefully.

        Waits for queued events to be delivered before stopping.

        Args:
            timeout: Seconds to wait for the queue to drain
        """
        logger.info("Stopping event dispatcher...")

        # Let enqueue callbacks already handed to the loop run first
        await asyncio.sleep(0)

        if self.queue is not None:
            remaining = self.queue.qsize()
            if remaining > 0:
                logger.info(f"Waiting for {remaining} events to be delivered...")
            try:
                await asyncio.wait_for(self.queue.join(), timeout=timeout)
            except TimeoutError:
                logger.warning(
                    f"Timeout waiting for queue to empty, "
                    f"{self.queue.qsize()} events remain"
                )

        self.running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    def get_statistics(self) -> dict:
        """
        Get event delivery statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "total_published": self.total_published,
            "total_delivered": self.total_delivered,
            "total_failed": self.total_failed,
            "total_dropped": self.total_dropped,
            "queue_size": self.queue.qsize() if self.queue is not None else 0,
            "notifiers": len(self.notifiers),
        }

    def log_statistics(self):
        """Log current statistics."""
        stats = self.get_statistics()
        logger.info("=" * 60)
        logger.info("Event Delivery Statistics")
        logger.info("=" * 60)
        logger.info(f"Events Published: {stats['total_published']}")
        logger.info(f"Notifier Calls Succeeded: {stats['total_delivered']}")
        logger.info(f"Notifier Calls Failed: {stats['total_failed']}")
        logger.info(f"Events Dropped: {stats['total_dropped']}")
        logger.info(f"Queue Size: {stats['queue_size']}")
        logger.info("=" * 60)

    def __repr__(self) -> str:
        """String representation."""
        stats = self.get_statistics()
        return (
            f"EventDispatcher("
            f"published={stats['total_published']}, "
            f"delivered={stats['total_delivered']}, "
            f"queue={stats['queue_size']})"
        )
