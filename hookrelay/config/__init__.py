"""
PURPOSE: Export configuration settings and constants for hookrelay.

This module centralizes access to all configuration settings and constants
used throughout the webhook server.
"""

from .constants import MAX_CAPACITY, Category, NotificationType
from .settings import Settings, settings

__all__ = [
    "settings",
    "Settings",
    "MAX_CAPACITY",
    "Category",
    "NotificationType",
]
