"""
Config package export.

Keeps import sites clean and stable:
    from ledgerwatch.config import get_settings, Settings
"""

from __future__ import annotations

from .settings import CacheBackend, Environment, Settings, get_settings

__all__ = ["CacheBackend", "Environment", "Settings", "get_settings"]
