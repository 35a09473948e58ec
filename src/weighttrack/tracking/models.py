"""Data models for daily logging, weight tracking and predictions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from weighttrack.profiles.body_calc import ActivityLevel, Sex


# Meal slots that make up a day's calorie total
MEALS = ("breakfast", "lunch", "dinner", "snack")


@dataclass
class CalorieBreakdown:
    """Calorie subtotals for one day. Total is always derived."""

    breakfast: float = 0
    lunch: float = 0
    dinner: float = 0
    snack: float = 0

    @property
    def total(self) -> float:
        return self.breakfast + self.lunch + self.dinner + self.snack

    def to_dict(self) -> dict:
        return {
            "breakfast": self.breakfast,
            "lunch": self.lunch,
            "dinner": self.dinner,
            "snack": self.snack,
            "total": self.total,
        }


@dataclass
class WorkoutRecord:
    """Strength workout for a day."""

    completed: bool = False
    exercises: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Tags form a set; keep first-seen order
        self.exercises = list(dict.fromkeys(self.exercises))


@dataclass
class RunningRecord:
    """Run for a day."""

    completed: bool = False
    distance_km: float = 0.0


@dataclass
class DailyEntry:
    """One calendar day's logged intake and activity."""

    entry_date: date
    calories: CalorieBreakdown = field(default_factory=CalorieBreakdown)
    workout: WorkoutRecord = field(default_factory=WorkoutRecord)
    running: RunningRecord = field(default_factory=RunningRecord)
    entry_id: Optional[int] = None

    def __post_init__(self) -> None:
        for meal in MEALS:
            if getattr(self.calories, meal) < 0:
                raise ValueError(f"{meal} calories must be >= 0")
        if self.running.distance_km < 0:
            raise ValueError("running distance must be >= 0")

    def to_dict(self) -> dict:
        """Convert to the exported document shape."""
        return {
            "date": self.entry_date.isoformat(),
            "calories": self.calories.to_dict(),
            "workout": {
                "completed": self.workout.completed,
                "exercises": list(self.workout.exercises),
            },
            "running": {
                "completed": self.running.completed,
                "distance": self.running.distance_km,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyEntry":
        """Build an entry from the exported document shape.

        Any stored total is ignored and recomputed from the meal subtotals.
        """
        calories = data.get("calories") or {}
        workout = data.get("workout") or {}
        running = data.get("running") or {}
        return cls(
            entry_date=date.fromisoformat(data["date"]),
            calories=CalorieBreakdown(
                **{meal: calories.get(meal) or 0 for meal in MEALS}
            ),
            workout=WorkoutRecord(
                completed=bool(workout.get("completed")),
                exercises=list(workout.get("exercises") or []),
            ),
            running=RunningRecord(
                completed=bool(running.get("completed")),
                distance_km=float(running.get("distance") or 0),
            ),
        )


@dataclass
class Profile:
    """Static and biometric parameters for one tracked person.

    Biometric fields stay optional until setup is complete; the estimation
    functions treat missing values as "no estimate possible".
    """

    user_key: str
    name: str
    height_cm: Optional[float] = None
    age: Optional[int] = None
    sex: Sex = Sex.FEMALE
    start_weight_kg: Optional[float] = None
    goal_weight_kg: Optional[float] = None
    start_date: Optional[date] = None
    setup_complete: bool = False
    last_entry_date: Optional[date] = None
    next_weight_prompt: Optional[date] = None

    def __post_init__(self) -> None:
        if not self.user_key:
            raise ValueError("user_key must not be empty")
        if isinstance(self.sex, str):
            if self.sex not in ("male", "female"):
                raise ValueError(f"sex must be 'male' or 'female', got '{self.sex}'")
            self.sex = Sex(self.sex)
        if self.height_cm is not None and self.height_cm < 0:
            raise ValueError("height_cm must be >= 0")
        if self.age is not None and self.age < 0:
            raise ValueError("age must be >= 0")

    def to_dict(self) -> dict:
        """Convert to the exported document shape."""
        return {
            "name": self.name,
            "height": self.height_cm,
            "age": self.age,
            "gender": self.sex.value,
            "goalWeight": self.goal_weight_kg,
            "startWeight": self.start_weight_kg,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "setupComplete": self.setup_complete,
        }


@dataclass
class WeightEntry:
    """A weekly weight measurement, optionally stamped with a prediction."""

    entry_date: date
    actual_weight_kg: float
    week_number: int
    predicted_weight_kg: Optional[float] = None
    notes: str = ""
    entry_id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.actual_weight_kg <= 0:
            raise ValueError(
                f"actual_weight_kg must be positive, got {self.actual_weight_kg}"
            )

    def to_dict(self) -> dict:
        return {
            "date": self.entry_date.isoformat(),
            "actualWeight": self.actual_weight_kg,
            "predictedWeight": self.predicted_weight_kg,
            "notes": self.notes,
            "weekNumber": self.week_number,
        }


@dataclass
class Prediction:
    """Output of the weight forecast. Not persisted on its own."""

    predicted_weight: Optional[float]
    daily_balance: int = 0
    tdee: int = 0
    bmr: int = 0
    avg_exercise_calories: int = 0
    activity_level: ActivityLevel = ActivityLevel.SEDENTARY
    confidence: int = 0  # percent, 0-100
    days_of_data: int = 0

    def to_dict(self) -> dict:
        return {
            "predictedWeight": self.predicted_weight,
            "dailyBalance": self.daily_balance,
            "tdee": self.tdee,
            "bmr": self.bmr,
            "avgExerciseCalories": self.avg_exercise_calories,
            "activityLevel": self.activity_level.value,
            "confidence": self.confidence,
            "daysOfData": self.days_of_data,
        }


@dataclass
class GoalEstimate:
    """Projected time to reach a goal weight."""

    weeks_remaining: Optional[int]
    estimated_date: Optional[date]
    achieved: bool = False

    @property
    def has_estimate(self) -> bool:
        return self.weeks_remaining is not None
