"""Tests for exercise calories and activity level inference."""

from __future__ import annotations

from datetime import date, timedelta

from weighttrack.profiles.body_calc import ActivityLevel
from weighttrack.tracking.activity import (
    MET_VALUES,
    activity_score,
    calculate_exercise_calories,
    infer_activity_level,
)
from weighttrack.tracking.models import DailyEntry, RunningRecord

DAY = date(2026, 3, 1)


class TestExerciseCalories:
    """Tests for calculate_exercise_calories."""

    def test_single_tag_workout(self, day_factory) -> None:
        """4.0 × 70 × 45 / 60 = 210."""
        day = day_factory(DAY, exercises=("chest",))
        assert calculate_exercise_calories(70, day) == 210

    def test_tags_are_averaged(self, day_factory) -> None:
        """chest 4.0 and abs 3.0 average to 3.5: 3.5 × 70 × 0.75 = 183.75."""
        day = day_factory(DAY, exercises=("chest", "abs"))
        assert calculate_exercise_calories(70, day) == 184

    def test_unknown_tag_defaults_to_3_5(self, day_factory) -> None:
        day = day_factory(DAY, exercises=("yoga",))
        assert calculate_exercise_calories(70, day) == 184

    def test_running(self, day_factory) -> None:
        """5 km at 10 min/km: 9.8 × 70 × 50 / 60 = 571.67."""
        day = day_factory(DAY, run_km=5)
        assert calculate_exercise_calories(70, day) == 572

    def test_workout_and_run_add_up(self, day_factory) -> None:
        day = day_factory(DAY, exercises=("chest",), run_km=5)
        assert calculate_exercise_calories(70, day) == 782

    def test_repeated_tags_count_once(self, day_factory) -> None:
        day = day_factory(DAY, exercises=("chest", "chest", "abs"))
        assert day.workout.exercises == ["chest", "abs"]
        assert calculate_exercise_calories(70, day) == 184

    def test_workout_without_tags_burns_nothing(self, day_factory) -> None:
        day = day_factory(DAY, workout=True)
        assert calculate_exercise_calories(70, day) == 0

    def test_incomplete_run_ignored(self) -> None:
        day = DailyEntry(
            entry_date=DAY,
            running=RunningRecord(completed=False, distance_km=5),
        )
        assert calculate_exercise_calories(70, day) == 0

    def test_missing_weight(self, day_factory) -> None:
        day = day_factory(DAY, exercises=("leg",), run_km=3)
        assert calculate_exercise_calories(None, day) == 0
        assert calculate_exercise_calories(0, day) == 0

    def test_met_table(self) -> None:
        assert MET_VALUES["bicep/tricep"] == 3.5
        assert MET_VALUES["booty"] == 4.5
        assert MET_VALUES["running"] == 9.8


class TestInferActivityLevel:
    """Tests for infer_activity_level."""

    def _days(self, day_factory, layout):
        return [
            day_factory(DAY - timedelta(days=i), **fields)
            for i, fields in enumerate(layout)
        ]

    def test_empty_is_sedentary(self) -> None:
        assert infer_activity_level([]) == ActivityLevel.SEDENTARY
        assert infer_activity_level(None) == ActivityLevel.SEDENTARY

    def test_mixed_week_is_moderate(self, day_factory) -> None:
        """3 workouts × 2 tags and a 5 km run: 30 + 25 + 12 = 67."""
        days = self._days(day_factory, [
            {"exercises": ("chest", "back")},
            {"exercises": ("leg", "booty")},
            {"exercises": ("abs", "shoulder")},
            {"run_km": 5},
            {}, {}, {},
        ])
        assert activity_score(days) == 67
        assert infer_activity_level(days) == ActivityLevel.MODERATE

    def test_below_light_threshold(self, day_factory) -> None:
        """One workout with 2 tags scores 14."""
        days = self._days(day_factory, [{"exercises": ("chest", "back")}])
        assert infer_activity_level(days) == ActivityLevel.SEDENTARY

    def test_light_at_threshold(self, day_factory) -> None:
        days = self._days(day_factory, [{"run_km": 3}])
        assert activity_score(days) == 15
        assert infer_activity_level(days) == ActivityLevel.LIGHT

    def test_moderate_at_threshold(self, day_factory) -> None:
        days = self._days(day_factory, [{"run_km": 8}])
        assert infer_activity_level(days) == ActivityLevel.MODERATE

    def test_active_at_threshold(self, day_factory) -> None:
        days = self._days(day_factory, [{"exercises": ("chest", "back")}] * 5)
        assert activity_score(days) == 70
        assert infer_activity_level(days) == ActivityLevel.ACTIVE

    def test_very_active(self, day_factory) -> None:
        days = self._days(day_factory, [{"exercises": ("chest", "back", "abs")}] * 7)
        assert activity_score(days) == 112
        assert infer_activity_level(days) == ActivityLevel.VERY_ACTIVE

    def test_repeated_tags_score_once(self, day_factory) -> None:
        """One workout day with a single distinct tag: 10 + 2 = 12."""
        days = self._days(day_factory, [{"exercises": ("chest", "chest")}])
        assert activity_score(days) == 12

    def test_incomplete_run_not_scored(self) -> None:
        day = DailyEntry(
            entry_date=DAY,
            running=RunningRecord(completed=False, distance_km=20),
        )
        assert activity_score([day]) == 0
