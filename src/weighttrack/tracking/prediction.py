"""One-week weight forecast from an energy-balance model.

The forecast averages the most recent week of logged intake and exercise,
compares it against Mifflin-St Jeor TDEE at the current weight, and turns
the daily surplus or deficit into a 7-day weight change:

    balance   = avg_intake - (TDEE + avg_exercise)
    raw       = weight + balance / 7700 × 7
    predicted = weight + (raw - weight) × confidence × 0.9

Confidence grows linearly with the number of logged days and saturates at a
full week. The 0.9 dampening keeps forecasts conservative even then.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from weighttrack.profiles.body_calc import (
    calculate_bmr,
    calculate_tdee,
    round_half_up,
)
from weighttrack.tracking.activity import (
    calculate_exercise_calories,
    infer_activity_level,
)
from weighttrack.tracking.models import DailyEntry, Prediction, Profile

# 7700 kcal ≈ 1 kg of body mass
CALORIES_PER_KG = 7700

LOOKBACK_DAYS = 7
FORECAST_DAYS = 7
DAMPENING_FACTOR = 0.9


@dataclass
class Averages:
    """Summary of a window of daily entries."""

    avg_calories: int = 0
    workout_days: int = 0
    running_days: int = 0
    entries: list[DailyEntry] = field(default_factory=list)


def recent_window(
    entries: Optional[list[DailyEntry]],
    days: int = LOOKBACK_DAYS,
) -> list[DailyEntry]:
    """Return up to `days` most recent entries, newest first."""
    if not entries:
        return []
    ordered = sorted(entries, key=lambda e: e.entry_date, reverse=True)
    return ordered[:days]


def calculate_averages(
    entries: Optional[list[DailyEntry]],
    days: int = LOOKBACK_DAYS,
) -> Averages:
    """Average intake and count active days over the recent window.

    Args:
        entries: Daily entries in any order
        days: Window size (default 7)

    Returns:
        Averages with the rounded mean calorie total; zeroed if no entries
    """
    window = recent_window(entries, days)
    if not window:
        return Averages()

    total_calories = sum(e.calories.total for e in window)

    return Averages(
        avg_calories=int(round_half_up(total_calories / len(window))),
        workout_days=sum(1 for e in window if e.workout.completed),
        running_days=sum(1 for e in window if e.running.completed),
        entries=window,
    )


def predict_weight(
    profile: Optional[Profile],
    daily_entries: Optional[list[DailyEntry]],
    current_weight: Optional[float],
) -> Prediction:
    """Forecast body weight one week ahead.

    Args:
        profile: Profile supplying height, age and sex
        daily_entries: Logged days; only the 7 most recent are used
        current_weight: Current weight in kg

    Returns:
        Prediction. With no profile, no weight or no entries the prediction
        echoes current_weight with every energy field and confidence at 0.
    """
    if profile is None or not current_weight or not daily_entries:
        return Prediction(predicted_weight=current_weight)

    averages = calculate_averages(daily_entries, LOOKBACK_DAYS)
    window = averages.entries
    days_of_data = len(window)

    # Every day is costed at today's weight
    avg_exercise_calories = sum(
        calculate_exercise_calories(current_weight, day) for day in window
    ) / days_of_data

    bmr = calculate_bmr(current_weight, profile.height_cm, profile.age, profile.sex)
    activity_level = infer_activity_level(window)
    tdee = calculate_tdee(bmr, activity_level)

    # Missing TDEE contributes nothing to expenditure
    daily_balance = averages.avg_calories - ((tdee or 0) + avg_exercise_calories)

    daily_change_kg = daily_balance / CALORIES_PER_KG
    raw_prediction = current_weight + daily_change_kg * FORECAST_DAYS

    confidence = min(days_of_data / LOOKBACK_DAYS, 1)
    damped = current_weight + (
        (raw_prediction - current_weight) * confidence * DAMPENING_FACTOR
    )

    return Prediction(
        predicted_weight=round_half_up(damped, 1),
        daily_balance=int(round_half_up(daily_balance)),
        tdee=int(round_half_up(tdee or 0)),
        bmr=int(round_half_up(bmr or 0)),
        avg_exercise_calories=int(round_half_up(avg_exercise_calories)),
        activity_level=activity_level,
        confidence=int(round_half_up(confidence * 100)),
        days_of_data=days_of_data,
    )
