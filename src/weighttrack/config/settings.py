"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".weighttrack"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "weighttrack.db"


def _default_users() -> dict[str, str]:
    return {"alex": "Alex", "sam": "Sam"}


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class ReminderConfig:
    """Daily logging reminder."""

    time: str = "21:00"


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json"
    history_days: int = 14
    units: str = "metric"


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    # user key -> display name
    users: dict[str, str] = field(default_factory=_default_users)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.weighttrack/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        if "database" in data:
            db_data = data["database"] or {}
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        if data.get("users"):
            settings.users = {
                str(key): str(name) for key, name in data["users"].items()
            }

        if "reminders" in data:
            reminder_data = data["reminders"] or {}
            if "time" in reminder_data:
                settings.reminders.time = str(reminder_data["time"])

        if "defaults" in data:
            def_data = data["defaults"] or {}
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]
            if "history_days" in def_data:
                settings.defaults.history_days = int(def_data["history_days"])
            if "units" in def_data:
                settings.defaults.units = def_data["units"]

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.weighttrack/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        return {
            "database": {
                "path": str(self.database.path),
            },
            "users": dict(self.users),
            "reminders": {
                "time": self.reminders.time,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
                "history_days": self.defaults.history_days,
                "units": self.defaults.units,
            },
        }


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Set the global settings instance (useful for testing).

    Passing None makes the next get_settings() load from disk again.
    """
    global _settings
    _settings = settings
