"""Configuration helpers for database location and analysis thresholds."""

from .settings import Settings, cache_dir, get_settings, load_settings

__all__ = [
    "Settings",
    "cache_dir",
    "get_settings",
    "load_settings",
]
