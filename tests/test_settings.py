"""Tests for YAML settings."""

from __future__ import annotations

from pathlib import Path

from weighttrack.config.settings import Settings


class TestSettings:
    """Tests for Settings.load and Settings.save."""

    def test_defaults_when_missing(self, tmp_path) -> None:
        settings = Settings.load(tmp_path / "missing.yaml")

        assert settings.users == {"alex": "Alex", "sam": "Sam"}
        assert settings.reminders.time == "21:00"
        assert settings.defaults.output_format == "table"
        assert settings.defaults.history_days == 14
        assert settings.defaults.units == "metric"
        assert settings.database.path.name == "weighttrack.db"

    def test_load_overrides(self, tmp_path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(
            "database:\n"
            f"  path: {tmp_path / 'data.db'}\n"
            "users:\n"
            "  jo: Jo\n"
            "reminders:\n"
            "  time: '20:30'\n"
            "defaults:\n"
            "  history_days: 30\n"
        )

        settings = Settings.load(config)

        assert settings.database.path == tmp_path / "data.db"
        assert settings.users == {"jo": "Jo"}
        assert settings.reminders.time == "20:30"
        assert settings.defaults.history_days == 30
        assert settings.defaults.output_format == "table"

    def test_empty_file(self, tmp_path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("")

        assert Settings.load(config).users == {"alex": "Alex", "sam": "Sam"}

    def test_save_and_reload(self, tmp_path) -> None:
        settings = Settings()
        settings.database.path = tmp_path / "weights.db"
        settings.users = {"alex": "Alex"}
        settings.defaults.output_format = "json"

        config = tmp_path / "nested" / "config.yaml"
        settings.save(config)
        loaded = Settings.load(config)

        assert loaded.to_dict() == settings.to_dict()
        assert isinstance(loaded.database.path, Path)
