"""Environment-driven settings for the fall monitoring core."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
