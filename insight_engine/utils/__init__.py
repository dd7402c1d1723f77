"""Utility modules for the Search Insight Engine."""

from .config import Settings, get_settings
from .serialization import to_json, to_plain

__all__ = [
    "Settings",
    "get_settings",
    "to_json",
    "to_plain",
]
