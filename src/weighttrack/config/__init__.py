"""Configuration management."""

from weighttrack.config.settings import (
    Settings,
    get_settings,
    reload_settings,
    set_settings,
)

__all__ = ["Settings", "get_settings", "reload_settings", "set_settings"]
