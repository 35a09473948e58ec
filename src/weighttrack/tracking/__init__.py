"""Daily logging, weight tracking and one-week weight forecasts.

Key components:
- Activity scoring and MET-based exercise calories
- Energy-balance weight forecast with confidence dampening
- Weekly loss rate and time-to-goal projection
- Profile, daily entry and weight entry queries
"""

from __future__ import annotations

from weighttrack.tracking.activity import (
    calculate_exercise_calories,
    infer_activity_level,
)
from weighttrack.tracking.models import (
    DailyEntry,
    GoalEstimate,
    Prediction,
    Profile,
    WeightEntry,
)
from weighttrack.tracking.prediction import calculate_averages, predict_weight
from weighttrack.tracking.progress import (
    calculate_time_to_goal,
    calculate_week_number,
    calculate_weight_loss_rate,
)

__all__ = [
    "DailyEntry",
    "GoalEstimate",
    "Prediction",
    "Profile",
    "WeightEntry",
    "calculate_averages",
    "calculate_exercise_calories",
    "calculate_time_to_goal",
    "calculate_week_number",
    "calculate_weight_loss_rate",
    "infer_activity_level",
    "predict_weight",
]
