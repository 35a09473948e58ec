"""Exercise energy estimates and weekly activity classification.

Strength sessions are costed with the mean MET of the trained muscle
groups over a fixed session length; runs assume a 10 min/km pace.
Calories = MET × weight_kg × minutes / 60.
"""

from __future__ import annotations

from typing import Iterable, Optional

from weighttrack.profiles.body_calc import ActivityLevel, round_half_up
from weighttrack.tracking.models import DailyEntry


# MET (Metabolic Equivalent of Task) values per exercise tag
MET_VALUES = {
    "bicep/tricep": 3.5,
    "shoulder": 3.5,
    "back": 4.0,
    "chest": 4.0,
    "booty": 4.5,
    "leg": 4.5,
    "abs": 3.0,
    "running": 9.8,  # Moderate pace
}

DEFAULT_MET = 3.5
WORKOUT_DURATION_MINUTES = 45
RUN_MINUTES_PER_KM = 10

# Activity score thresholds, highest first
ACTIVITY_THRESHOLDS = (
    (100, ActivityLevel.VERY_ACTIVE),
    (70, ActivityLevel.ACTIVE),
    (40, ActivityLevel.MODERATE),
    (15, ActivityLevel.LIGHT),
)

POINTS_PER_WORKOUT_DAY = 10
POINTS_PER_KM = 5
POINTS_PER_EXERCISE = 2


def activity_score(entries: Iterable[DailyEntry]) -> float:
    """Score a window of days by workouts, running distance and variety.

    Args:
        entries: Daily entries to score

    Returns:
        10 per workout day + 5 per km run + 2 per exercise tag on
        workout days
    """
    workout_days = 0
    total_km = 0.0
    total_exercises = 0

    for entry in entries:
        if entry.workout.completed:
            workout_days += 1
            total_exercises += len(entry.workout.exercises)
        if entry.running.completed:
            total_km += entry.running.distance_km or 0

    return (
        workout_days * POINTS_PER_WORKOUT_DAY
        + total_km * POINTS_PER_KM
        + total_exercises * POINTS_PER_EXERCISE
    )


def infer_activity_level(week_entries: Optional[list[DailyEntry]]) -> ActivityLevel:
    """Classify a week of entries into an activity level."""
    if not week_entries:
        return ActivityLevel.SEDENTARY

    score = activity_score(week_entries)
    for threshold, level in ACTIVITY_THRESHOLDS:
        if score >= threshold:
            return level
    return ActivityLevel.SEDENTARY


def _strength_calories(weight_kg: float, exercises: list[str]) -> float:
    avg_met = sum(MET_VALUES.get(tag, DEFAULT_MET) for tag in exercises) / len(exercises)
    return avg_met * weight_kg * WORKOUT_DURATION_MINUTES / 60


def _running_calories(weight_kg: float, distance_km: float) -> float:
    run_minutes = distance_km * RUN_MINUTES_PER_KM
    return MET_VALUES["running"] * weight_kg * run_minutes / 60


def calculate_exercise_calories(weight_kg: Optional[float], day: DailyEntry) -> int:
    """Estimate calories burned by a day's workout and run.

    Args:
        weight_kg: Body weight used for the MET formula
        day: Daily entry with workout and running records

    Returns:
        Calories burned, rounded to the nearest integer. 0 without a weight.

    Example:
        A completed chest workout at 70 kg:
        4.0 × 70 × 45 / 60 = 210
    """
    if not weight_kg:
        return 0

    total = 0.0

    if day.workout.completed and day.workout.exercises:
        total += _strength_calories(weight_kg, day.workout.exercises)

    if day.running.completed:
        total += _running_calories(weight_kg, day.running.distance_km or 0)

    return int(round_half_up(total))
