"""Shared helpers: caching and logging setup."""

from .cache import Cache
from .logger import configure_logging, set_log_level

__all__ = ["Cache", "configure_logging", "set_log_level"]
