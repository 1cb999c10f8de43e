"""Alert countdown and its tick scheduling."""

from .countdown import AlertCountdownController, AlertState, ControlResult
from .scheduler import AsyncioScheduler, TickHandle

__all__ = [
    "AlertCountdownController",
    "AlertState",
    "AsyncioScheduler",
    "ControlResult",
    "TickHandle",
]
