"""
Core module for the Budget API.

Contains centralized configuration and core utilities.
"""

from app.core.config import settings, get_settings

__all__ = ["settings", "get_settings"]
