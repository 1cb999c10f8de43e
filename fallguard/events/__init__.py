"""Event types, fall history and background event delivery."""

from .history import FallEventLog
from .manager import EventDispatcher
from .models import (
    AlertCancelled,
    AlertConfirmed,
    FallDetected,
    FallEvent,
    FallEventStatus,
    MonitorEvent,
)

__all__ = [
    "AlertCancelled",
    "AlertConfirmed",
    "EventDispatcher",
    "FallDetected",
    "FallEvent",
    "FallEventLog",
    "FallEventStatus",
    "MonitorEvent",
]
