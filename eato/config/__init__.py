# eato/config/__init__.py
"""
Configuration package.
Exports the application settings.
"""

from eato.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
