"""
Configuration

Environment-driven settings for the API and its background workers.
Feed limits, the trending window and queue sizing all live here so tests
can override them through the environment.

Usage:
======
    from src.config import settings

    page_size = settings.FEED_DEFAULT_LIMIT
"""

from src.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
