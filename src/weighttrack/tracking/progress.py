"""Progress metrics derived from weekly weight entries."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Optional

from weighttrack.profiles.body_calc import round_half_up
from weighttrack.tracking.models import GoalEstimate, WeightEntry


def calculate_week_number(entry_date: date, start_date: Optional[date]) -> int:
    """Weeks since the start date, rounded up. 0 without a start date.

    Example:
        >>> calculate_week_number(date(2026, 2, 18), date(2026, 2, 10))
        2
    """
    if start_date is None:
        return 0
    return math.ceil((entry_date - start_date).days / 7)


def calculate_weight_loss_rate(weight_entries: Optional[list[WeightEntry]]) -> float:
    """
    Average weight change per week between the first and last entry.

    Args:
        weight_entries: Weight entries in any order

    Returns:
        kg per week rounded to one decimal (negative = losing). 0 with fewer
        than two entries or when both ends fall in the same week.
    """
    if not weight_entries or len(weight_entries) < 2:
        return 0.0

    ordered = sorted(weight_entries, key=lambda e: e.entry_date)
    first = ordered[0]
    last = ordered[-1]

    weeks_passed = last.week_number - first.week_number
    if weeks_passed == 0:
        return 0.0

    change = last.actual_weight_kg - first.actual_weight_kg
    return round_half_up(change / weeks_passed, 1)


def calculate_time_to_goal(
    current_weight: Optional[float],
    goal_weight: Optional[float],
    avg_weekly_loss: float,
    today: Optional[date] = None,
) -> GoalEstimate:
    """
    Project when the goal weight will be reached at the current rate.

    Only a genuine loss (avg_weekly_loss < 0) produces a projection.

    Args:
        current_weight: Current weight in kg
        goal_weight: Goal weight in kg
        avg_weekly_loss: Weekly change in kg (negative = losing)
        today: Reference date for the projection (default: today)

    Returns:
        GoalEstimate; weeks_remaining is None when no projection is possible
    """
    if today is None:
        today = date.today()

    if not current_weight or not goal_weight or avg_weekly_loss >= 0:
        return GoalEstimate(weeks_remaining=None, estimated_date=None)

    to_lose = current_weight - goal_weight
    if to_lose <= 0:
        return GoalEstimate(weeks_remaining=0, estimated_date=today, achieved=True)

    weeks_remaining = math.ceil(to_lose / abs(avg_weekly_loss))
    return GoalEstimate(
        weeks_remaining=weeks_remaining,
        estimated_date=today + timedelta(days=weeks_remaining * 7),
        achieved=False,
    )
