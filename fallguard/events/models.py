"""
Event types emitted by the monitor and the fall event audit record.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np
import numpy.typing as npt

from ..utils.constants import ConfidenceRamp


def generate_event_id() -> str:
    """
    Generate unique event ID.

    Returns:
        ID formatted as YYYYMMDD_HHMMSS_<8 hex chars>
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{uuid.uuid4().hex[:8]}"


def clamp_confidence(value: float) -> float:
    return float(max(ConfidenceRamp.MIN, min(value, ConfidenceRamp.MAX)))


def skeleton_to_dict(skeleton: npt.NDArray[np.float64] | None) -> dict | None:
    """JSON-safe form of a landmark snapshot."""
    if skeleton is None:
        return None
    return {"shape": list(skeleton.shape), "data": skeleton.tolist()}


class FallEventStatus(str, enum.Enum):
    DETECTED = "detected"
    CANCELLED = "cancelled"
    ALERT_SENT = "alert_sent"


@dataclass(frozen=True, eq=False)
class FallDetected:
    """A fall episode was confirmed (or an emergency was raised by hand)."""

    event_id: str
    timestamp: float
    confidence: float
    skeleton_snapshot: npt.NDArray[np.float64] | None = field(
        default=None, repr=False
    )
    manual: bool = False

    def __post_init__(self):
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "fall_detected",
            "event_id": self.event_id,
            "timestamp": self.timestamp,
            "confidence": self.confidence,
            "manual": self.manual,
            "skeleton": skeleton_to_dict(self.skeleton_snapshot),
        }


@dataclass(frozen=True)
class AlertConfirmed:
    """The countdown ran out or was confirmed; the caregiver must be alerted."""

    event_id: str
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "alert_confirmed",
            "event_id": self.event_id,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class AlertCancelled:
    """The subject cancelled the countdown."""

    event_id: str
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "alert_cancelled",
            "event_id": self.event_id,
            "timestamp": self.timestamp,
        }


MonitorEvent = FallDetected | AlertConfirmed | AlertCancelled


@dataclass(eq=False)
class FallEvent:
    """
    Audit record for one fall episode, updated as the alert resolves.

    ``location`` is filled in by an external collaborator (e.g. a phone's
    geolocation service); the core never sets it.
    """

    event_id: str
    timestamp: float
    confidence: float
    status: FallEventStatus = FallEventStatus.DETECTED
    skeleton: npt.NDArray[np.float64] | None = field(default=None, repr=False)
    location: tuple[float, float] | None = None
    manual: bool = False
    resolved_at: float | None = None

    def __post_init__(self):
        self.confidence = clamp_confidence(self.confidence)

    @classmethod
    def from_detection(cls, event: FallDetected) -> "FallEvent":
        return cls(
            event_id=event.event_id,
            timestamp=event.timestamp,
            confidence=event.confidence,
            skeleton=event.skeleton_snapshot,
            manual=event.manual,
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "event_id": self.event_id,
            "timestamp": self.timestamp,
            "confidence": self.confidence,
            "status": self.status.value,
            "manual": self.manual,
            "resolved_at": self.resolved_at,
            "skeleton": skeleton_to_dict(self.skeleton),
        }
        if self.location is not None:
            data["location"] = {
                "latitude": self.location[0],
                "longitude": self.location[1],
            }
        return data
