"""
Dependency helper for the process-wide configuration.
"""

from functools import lru_cache

from aps_mcp.core.config import AppSettings, get_settings


@lru_cache()
def _settings_singleton() -> AppSettings:
    """Ensure configuration is created once per process."""
    return get_settings()


def get_app_settings() -> AppSettings:
    return _settings_singleton()


__all__ = ["get_app_settings"]
