"""Core configuration for html_transformer."""

from .config import Settings, settings

__all__ = ["Settings", "settings"]
