"""Tests for whole-store JSON export and import."""

from __future__ import annotations

import json
from datetime import date

import pytest

from weighttrack.config.settings import Settings
from weighttrack.db.connection import DatabaseConnection
from weighttrack.tracking.diagnostics import record_weight, setup_profile
from weighttrack.tracking.document import (
    DOCUMENT_VERSION,
    export_document,
    import_document,
    validate_document,
)
from weighttrack.tracking.queries import (
    DailyEntryQueries,
    ProfileQueries,
    WeightQueries,
)

START = date(2026, 2, 10)


@pytest.fixture
def populated_db(seeded_db, day_factory):
    with seeded_db.get_connection() as conn:
        setup_profile(conn, "alex", 165, 30, 80, 70, sex="female", start_date=START)
        DailyEntryQueries.save_entry(
            conn, "alex", day_factory(date(2026, 2, 11), exercises=("chest",))
        )
        DailyEntryQueries.save_entry(
            conn, "alex", day_factory(date(2026, 2, 12), calories=1800, run_km=5)
        )
        record_weight(conn, "alex", 79.4, measured_at=date(2026, 2, 17), notes="hydrated")
    return seeded_db


class TestExport:
    """Tests for export_document."""

    def test_document_shape(self, populated_db) -> None:
        with populated_db.get_connection() as conn:
            document = export_document(conn, Settings())

        assert document["version"] == DOCUMENT_VERSION
        assert isinstance(document["lastUpdated"], int)
        assert set(document["users"]) == {"alex", "sam"}
        assert document["settings"] == {"reminderTime": "21:00", "units": "metric"}

        alex = document["users"]["alex"]
        assert alex["profile"]["gender"] == "female"
        assert alex["profile"]["setupComplete"] is True
        assert alex["profile"]["startDate"] == "2026-02-10"
        assert alex["lastEntryDate"] == "2026-02-12"
        assert alex["nextWeightPrompt"] == "2026-02-24"

        assert [d["date"] for d in alex["dailyEntries"]] == ["2026-02-12", "2026-02-11"]
        assert alex["dailyEntries"][0]["calories"]["total"] == 1800
        assert alex["dailyEntries"][0]["running"] == {"completed": True, "distance": 5}

        latest = alex["weightEntries"][0]
        assert latest["actualWeight"] == 79.4
        assert latest["weekNumber"] == 1
        assert latest["notes"] == "hydrated"

    def test_json_serializable(self, populated_db) -> None:
        with populated_db.get_connection() as conn:
            json.dumps(export_document(conn))

    def test_settings_optional(self, seeded_db) -> None:
        with seeded_db.get_connection() as conn:
            assert "settings" not in export_document(conn)


class TestImport:
    """Tests for import_document."""

    def test_round_trip(self, populated_db, tmp_path) -> None:
        with populated_db.get_connection() as conn:
            document = export_document(conn)

        target = DatabaseConnection(tmp_path / "copy.db")
        target.initialize_schema()
        with target.get_connection() as conn:
            imported = import_document(conn, json.loads(json.dumps(document)))
            profile = ProfileQueries.get_profile(conn, "alex")
            daily = DailyEntryQueries.get_entries(conn, "alex")
            weights = WeightQueries.get_weight_entries(conn, "alex")
            again = export_document(conn)

        assert sorted(imported) == ["alex", "sam"]
        assert profile.setup_complete is True
        assert profile.next_weight_prompt == date(2026, 2, 24)
        assert len(daily) == 2
        assert daily[1].workout.exercises == ["chest"]
        assert [w.week_number for w in weights] == [1, 0]
        assert weights[0].predicted_weight_kg == document["users"]["alex"][
            "weightEntries"
        ][0]["predictedWeight"]
        assert again["users"] == document["users"]

    def test_replaces_existing_data(self, populated_db) -> None:
        document = {
            "version": "1.0.0",
            "users": {
                "alex": {
                    "profile": {"name": "Alex", "height": 170, "age": 31, "gender": "female"},
                    "dailyEntries": [
                        {"date": "2026-03-01", "calories": {"lunch": 500}},
                    ],
                    "weightEntries": [],
                },
            },
        }
        with populated_db.get_connection() as conn:
            import_document(conn, document)
            daily = DailyEntryQueries.get_entries(conn, "alex")
            profile = ProfileQueries.get_profile(conn, "alex")
            sam = ProfileQueries.get_profile(conn, "sam")

        assert [d.entry_date for d in daily] == [date(2026, 3, 1)]
        assert profile.height_cm == 170
        assert profile.setup_complete is False
        assert sam is not None

    def test_stored_total_is_ignored(self, seeded_db) -> None:
        document = {
            "version": "1.0.0",
            "users": {
                "sam": {
                    "profile": {"name": "Sam", "gender": "male"},
                    "dailyEntries": [
                        {
                            "date": "2026-03-01",
                            "calories": {"breakfast": 300, "dinner": 700, "total": 99999},
                        },
                    ],
                },
            },
        }
        with seeded_db.get_connection() as conn:
            import_document(conn, document)
            row = conn.execute(
                "SELECT total_calories FROM daily_entries WHERE user_key = 'sam'"
            ).fetchone()

        assert row[0] == 1000

    @pytest.mark.parametrize(
        "data",
        [
            None,
            [],
            {"users": {}},
            {"version": "1.0.0"},
            {"version": "1.0.0", "users": []},
        ],
    )
    def test_invalid_document(self, data) -> None:
        with pytest.raises(ValueError, match="Invalid data format"):
            validate_document(data)

    def test_missing_entry_date(self, populated_db) -> None:
        document = {
            "version": "1.0.0",
            "users": {"alex": {"dailyEntries": [{"calories": {"lunch": 500}}]}},
        }
        with pytest.raises(ValueError, match="alex"):
            with populated_db.get_connection() as conn:
                import_document(conn, document)

        # Nothing was replaced
        with populated_db.get_connection() as conn:
            assert len(DailyEntryQueries.get_entries(conn, "alex")) == 2

    def test_invalid_gender(self, seeded_db) -> None:
        document = {
            "version": "1.0.0",
            "users": {"sam": {"profile": {"gender": "robot"}}},
        }
        with seeded_db.get_connection() as conn:
            with pytest.raises(ValueError):
                import_document(conn, document)

    @pytest.mark.parametrize(
        "user_data",
        [
            "oops",
            ["alex"],
            {"profile": "oops"},
            {"dailyEntries": ["x"]},
            {"dailyEntries": "x"},
            {"dailyEntries": [{"date": "2026-03-01", "calories": "lots"}]},
            {"weightEntries": [42]},
        ],
    )
    def test_malformed_user_section(self, populated_db, user_data) -> None:
        document = {"version": "1.0.0", "users": {"alex": user_data}}
        with pytest.raises(ValueError, match="Invalid entry for user 'alex'"):
            with populated_db.get_connection() as conn:
                import_document(conn, document)

        with populated_db.get_connection() as conn:
            assert len(DailyEntryQueries.get_entries(conn, "alex")) == 2

    @pytest.mark.parametrize("field", ["lastEntryDate", "nextWeightPrompt"])
    def test_invalid_tracking_date(self, populated_db, field) -> None:
        document = {
            "version": "1.0.0",
            "users": {"alex": {"profile": {"name": "Alex"}, field: "yesterday"}},
        }
        with pytest.raises(ValueError, match="alex"):
            with populated_db.get_connection() as conn:
                import_document(conn, document)

        with populated_db.get_connection() as conn:
            profile = ProfileQueries.get_profile(conn, "alex")
        assert profile.next_weight_prompt == date(2026, 2, 24)

    def test_later_bad_user_leaves_earlier_users_untouched(self, populated_db) -> None:
        document = {
            "version": "1.0.0",
            "users": {
                "alex": {"profile": {"name": "Alex"}},
                "sam": {"dailyEntries": [{"calories": {}}]},
            },
        }
        with pytest.raises(ValueError, match="sam"):
            with populated_db.get_connection() as conn:
                import_document(conn, document)

        with populated_db.get_connection() as conn:
            assert ProfileQueries.get_profile(conn, "alex").setup_complete is True

    def test_tracking_dates_are_stored(self, seeded_db) -> None:
        document = {
            "version": "1.0.0",
            "users": {
                "sam": {
                    "profile": {"name": "Sam", "gender": "male"},
                    "lastEntryDate": "2026-03-01",
                    "nextWeightPrompt": "2026-03-05",
                },
            },
        }
        with seeded_db.get_connection() as conn:
            import_document(conn, document)
            profile = ProfileQueries.get_profile(conn, "sam")

        assert profile.last_entry_date == date(2026, 3, 1)
        assert profile.next_weight_prompt == date(2026, 3, 5)
