"""
In-memory audit trail of fall episodes for caregiver review and replay.
"""

import logging
from collections import deque

from .models import FallDetected, FallEvent, FallEventStatus

logger = logging.getLogger(__name__)


class FallEventLog:
    """
    Bounded history of FallEvent records, newest first.

    Each detected fall gets a record that later moves to ``cancelled`` or
    ``alert_sent``. Nothing is written to disk; callers that need
    persistence export ``to_dicts()``.
    """

    def __init__(self, max_events: int = 100):
        self.max_events = max_events
        self._events: deque[FallEvent] = deque(maxlen=max_events)

    def record_detection(self, event: FallDetected) -> FallEvent:
        """
        Add a record for a newly detected fall.

        Args:
            event: The emitted FallDetected event

        Returns:
            The stored FallEvent record
        """
        record = FallEvent.from_detection(event)
        self._events.appendleft(record)
        logger.info(
            f"Recorded fall event {record.event_id} "
            f"(confidence {record.confidence:.0f}%, total: {len(self._events)})"
        )
        return record

    def get(self, event_id: str) -> FallEvent | None:
        for record in self._events:
            if record.event_id == event_id:
                return record
        return None

    def latest(self) -> FallEvent | None:
        return self._events[0] if self._events else None

    def mark_cancelled(self, event_id: str, timestamp: float) -> FallEvent | None:
        return self._resolve(event_id, FallEventStatus.CANCELLED, timestamp)

    def mark_alert_sent(self, event_id: str, timestamp: float) -> FallEvent | None:
        return self._resolve(event_id, FallEventStatus.ALERT_SENT, timestamp)

    def _resolve(
        self, event_id: str, status: FallEventStatus, timestamp: float
    ) -> FallEvent | None:
        record = self.get(event_id)
        if record is None:
            logger.warning(f"Unknown fall event {event_id}, cannot mark {status.value}")
            return None
        if record.status is not FallEventStatus.DETECTED:
            logger.warning(
                f"Fall event {event_id} already {record.status.value}, "
                f"ignoring {status.value}"
            )
            return record
        record.status = status
        record.resolved_at = timestamp
        logger.info(f"Fall event {event_id} marked {status.value}")
        return record

    def attach_location(
        self, event_id: str, latitude: float, longitude: float
    ) -> FallEvent | None:
        """Store a geolocation supplied by an external collaborator."""
        record = self.get(event_id)
        if record is None:
            logger.warning(f"Unknown fall event {event_id}, cannot attach location")
            return None
        record.location = (latitude, longitude)
        return record

    def get_statistics(self) -> dict:
        """
        Get fall history statistics.

        Returns:
            Dictionary with counts per status
        """
        alerts_sent = sum(
            1 for e in self._events if e.status is FallEventStatus.ALERT_SENT
        )
        cancelled = sum(1 for e in self._events if e.status is FallEventStatus.CANCELLED)
        return {
            "total_falls": len(self._events),
            "alerts_sent": alerts_sent,
            "cancelled": cancelled,
            "pending": len(self._events) - alerts_sent - cancelled,
        }

    def to_dicts(self) -> list[dict]:
        return [record.to_dict() for record in self._events]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))
