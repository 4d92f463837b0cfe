"""Configuration module for the club harness.

Usage:
    from clubharness.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.supabase_url)

Note:
    Call ``get_settings.cache_clear()`` after changing the environment in a
    test; the instance is cached for the whole process otherwise.
"""

from clubharness.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
