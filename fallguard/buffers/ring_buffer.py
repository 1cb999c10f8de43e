"""
Fixed-capacity ring buffer for pose history.
Preallocates a numpy arena so the buffer never grows or reallocates.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


class RingBuffer:
    """
    Bounded history of fixed-shape numeric samples with timestamps.

    Storage is a single preallocated array of shape ``(capacity, *item_shape)``
    plus a parallel timestamp array. A write index walks the arena; once the
    buffer is full each append overwrites the oldest slot. Appends and reads
    of recent entries are O(1).

    Example memory usage for 33 pose landmarks x 4 columns (float64):
    - 30 frames: 30 * 33 * 4 * 8 bytes = ~31KB

    Attributes:
        capacity: Maximum number of entries to keep
        item_shape: Shape of a single stored sample
        total_appended: Total entries appended since last clear (for statistics)
    """

    def __init__(self, capacity: int, item_shape: tuple[int, ...] = ()):
        """
        Initialize ring buffer.

        Args:
            capacity: Maximum number of samples held at once
            item_shape: Shape of each sample (``()`` for scalars)
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self.capacity = capacity
        self.item_shape = tuple(item_shape)
        self._data = np.zeros((capacity, *self.item_shape), dtype=np.float64)
        self._timestamps = np.zeros(capacity, dtype=np.float64)
        self._next = 0
        self._size = 0
        self.total_appended = 0

        logger.debug(
            f"Initialized RingBuffer: capacity={capacity}, item_shape={self.item_shape}"
        )

    def append(self, item: np.ndarray, timestamp: float):
        """
        Store a sample, evicting the oldest one when full.

        Args:
            item: Array matching ``item_shape``
            timestamp: Capture time of the sample in seconds
        """
        item = np.asarray(item, dtype=np.float64)
        if item.shape != self.item_shape:
            raise ValueError(
                f"Expected sample of shape {self.item_shape}, got {item.shape}"
            )

        self._data[self._next] = item
        self._timestamps[self._next] = timestamp
        self._next = (self._next + 1) % self.capacity
        if self._size < self.capacity:
            self._size += 1
        self.total_appended += 1

    def latest(self, offset: int = 0) -> tuple[np.ndarray, float]:
        """
        Return a recent sample.

        Args:
            offset: 0 for the newest sample, 1 for the one before it, ...

        Returns:
            Tuple of (sample copy, timestamp)
        """
        if not 0 <= offset < self._size:
            raise IndexError(
                f"offset {offset} out of range for buffer of size {self._size}"
            )
        slot = (self._next - 1 - offset) % self.capacity
        return self._data[slot].copy(), float(self._timestamps[slot])

    def items(self) -> list[tuple[np.ndarray, float]]:
        """Return all held samples, oldest first."""
        return [self.latest(offset) for offset in range(self._size - 1, -1, -1)]

    def is_full(self) -> bool:
        return self._size == self.capacity

    def get_buffer_info(self) -> dict:
        """
        Get buffer statistics and information.

        Returns:
            Dictionary with buffer statistics
        """
        if self._size == 0:
            return {
                "num_items": 0,
                "capacity": self.capacity,
                "total_appended": self.total_appended,
                "oldest_timestamp": None,
                "newest_timestamp": None,
                "duration_seconds": 0.0,
            }

        _, newest = self.latest(0)
        _, oldest = self.latest(self._size - 1)
        return {
            "num_items": self._size,
            "capacity": self.capacity,
            "total_appended": self.total_appended,
            "oldest_timestamp": oldest,
            "newest_timestamp": newest,
            "duration_seconds": newest - oldest,
        }

    def clear(self):
        """Drop all samples. The arena is kept for reuse."""
        self._next = 0
        self._size = 0
        self.total_appended = 0

    def __len__(self) -> int:
        """Return number of samples currently in buffer."""
        return self._size

    def __repr__(self) -> str:
        """String representation of buffer."""
        return (
            f"RingBuffer("
            f"items={self._size}/{self.capacity}, "
            f"item_shape={self.item_shape})"
        )
