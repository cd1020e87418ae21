"""Core configuration shared by the storage adapters."""

from .config import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
