"""Bounded history buffers."""

from .ring_buffer import RingBuffer

__all__ = ["RingBuffer"]
