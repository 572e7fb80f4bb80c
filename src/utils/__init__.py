"""Utility modules for the Keyword Opportunity Engine."""

from .config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
