"""Core configuration for Position Keeper."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
