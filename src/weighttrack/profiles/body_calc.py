"""Body composition calculations: BMR, TDEE, BMI and healthy weight range.

Uses the Mifflin-St Jeor equation for BMR as it's widely validated for
calculating resting metabolic rate. All functions take metric units
(kg, cm) and return None instead of raising when an input is missing.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional


class Sex(Enum):
    """Biological sex for BMR calculation."""
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def coerce(cls, value: object) -> "Sex":
        """Map any stored value onto a Sex; anything but exactly "female" is MALE."""
        if isinstance(value, Sex):
            return value
        if value == "female":
            return cls.FEMALE
        return cls.MALE


class ActivityLevel(Enum):
    """Activity levels used to pick a TDEE multiplier."""
    SEDENTARY = "sedentary"          # Little or no exercise
    LIGHT = "light"                  # Light exercise 1-3 days/week
    MODERATE = "moderate"            # Moderate exercise 3-5 days/week
    ACTIVE = "active"                # Hard exercise 6-7 days/week
    VERY_ACTIVE = "veryActive"       # Very hard exercise, physical job

    @classmethod
    def coerce(cls, value: object) -> "ActivityLevel":
        """Map any value onto an ActivityLevel; unknown values are SEDENTARY."""
        if isinstance(value, ActivityLevel):
            return value
        for level in cls:
            if level.value == value:
                return level
        return cls.SEDENTARY


# Activity level multipliers (Harris-Benedict activity factors)
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

# BMI bounds used for the healthy weight range
HEALTHY_BMI_MIN = 18.5
HEALTHY_BMI_MAX = 24.9

# (upper bound exclusive, label), checked in order
BMI_CATEGORIES = (
    (18.5, "Underweight"),
    (25.0, "Normal"),
    (30.0, "Overweight"),
)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going toward +infinity.

    Python's round() uses banker's rounding, so round(0.5) == 0. Stored
    values and displayed figures use half-up rounding throughout.

    Example:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(-2.5)
        -2.0
        >>> round_half_up(80.25, 1)
        80.3
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_bmr(
    weight_kg: Optional[float],
    height_cm: Optional[float],
    age: Optional[float],
    sex: object,
) -> Optional[float]:
    """Calculate Basal Metabolic Rate using Mifflin-St Jeor equation.

    Args:
        weight_kg: Weight in kilograms
        height_cm: Height in centimeters
        age: Age in years
        sex: Sex enum or its string value; anything but female uses
             the male constant

    Returns:
        BMR in calories per day, or None if weight, height or age is
        missing or zero
    """
    if not weight_kg or not height_cm or not age:
        return None

    base = (10 * weight_kg) + (6.25 * height_cm) - (5 * age)

    if Sex.coerce(sex) == Sex.FEMALE:
        return base - 161
    return base + 5


def calculate_tdee(
    bmr: Optional[float],
    activity_level: object = ActivityLevel.SEDENTARY,
) -> Optional[float]:
    """Calculate Total Daily Energy Expenditure.

    Args:
        bmr: Basal Metabolic Rate
        activity_level: ActivityLevel or its string value; unknown values
                        fall back to sedentary

    Returns:
        TDEE in calories per day, or None if bmr is missing or zero
    """
    if not bmr:
        return None

    multiplier = ACTIVITY_MULTIPLIERS[ActivityLevel.coerce(activity_level)]
    return bmr * multiplier


def calculate_bmi(
    weight_kg: Optional[float],
    height_cm: Optional[float],
) -> Optional[float]:
    """Calculate Body Mass Index rounded to one decimal."""
    if not weight_kg or not height_cm:
        return None

    height_m = height_cm / 100
    return round_half_up(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: Optional[float]) -> str:
    """Return the WHO category label for a BMI value."""
    if not bmi:
        return "Unknown"

    for upper, label in BMI_CATEGORIES:
        if bmi < upper:
            return label
    return "Obese"


def healthy_weight_range(height_cm: Optional[float]) -> Optional[tuple[float, float]]:
    """Return (min, max) weight in kg for a normal BMI at this height."""
    if not height_cm:
        return None

    height_m = height_cm / 100
    return (
        round_half_up(HEALTHY_BMI_MIN * height_m * height_m, 1),
        round_half_up(HEALTHY_BMI_MAX * height_m * height_m, 1),
    )
