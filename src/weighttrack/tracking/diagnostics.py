"""Progress statistics and reports built on stored entries."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from weighttrack.profiles.body_calc import (
    bmi_category,
    calculate_bmi,
    healthy_weight_range,
)
from weighttrack.tracking.models import (
    DailyEntry,
    GoalEstimate,
    Prediction,
    Profile,
    WeightEntry,
)
from weighttrack.tracking.prediction import LOOKBACK_DAYS, predict_weight
from weighttrack.tracking.progress import (
    calculate_time_to_goal,
    calculate_weight_loss_rate,
)
from weighttrack.tracking.queries import (
    DailyEntryQueries,
    ProfileQueries,
    WeightQueries,
)

logger = logging.getLogger(__name__)


@dataclass
class UserStats:
    """Dashboard summary for one user."""

    current_weight: Optional[float]
    start_weight: Optional[float]
    goal_weight: Optional[float]
    total_change: Optional[float]  # vs start weight
    week_change: Optional[float]  # vs previous weigh-in
    days_tracked: int
    weeks_tracked: int
    streak: int


@dataclass
class ProgressReport:
    """Combined progress report."""

    profile: Profile
    stats: UserStats
    bmi: Optional[float]
    bmi_category: str
    healthy_range: Optional[tuple[float, float]]
    weekly_rate: float  # kg/week, negative = losing
    goal: GoalEstimate
    prediction: Prediction


def calculate_streak(entries: list[DailyEntry], today: Optional[date] = None) -> int:
    """
    Count consecutive logged days ending today.

    Today may still be unlogged: the streak then counts back from
    yesterday. This intentionally differs from the web app, which returned
    0 whenever today had no entry. If neither day is logged the streak is 0.
    """
    if today is None:
        today = date.today()

    logged = {entry.entry_date for entry in entries}
    day = today if today in logged else today - timedelta(days=1)

    streak = 0
    while day in logged:
        streak += 1
        day -= timedelta(days=1)
    return streak


def is_weight_entry_due(
    profile: Profile,
    weight_entries: list[WeightEntry],
    today: Optional[date] = None,
) -> bool:
    """True once setup is complete and the next weigh-in date has arrived."""
    if today is None:
        today = date.today()

    if not weight_entries and profile.setup_complete:
        return True
    if profile.next_weight_prompt is not None:
        return today >= profile.next_weight_prompt
    return False


def predict_for_user(
    conn: sqlite3.Connection,
    user_key: str,
    current_weight: Optional[float] = None,
) -> Prediction:
    """Run the weight forecast on a user's stored snapshot.

    Args:
        current_weight: Weight to forecast from; defaults to the latest
                        logged weight (or the start weight)
    """
    profile = ProfileQueries.require_profile(conn, user_key)
    if current_weight is None:
        current_weight = WeightQueries.get_latest_weight(conn, user_key)
    entries = DailyEntryQueries.get_entries(conn, user_key, limit=LOOKBACK_DAYS)
    return predict_weight(profile, entries, current_weight)


def record_weight(
    conn: sqlite3.Connection,
    user_key: str,
    weight_kg: float,
    measured_at: Optional[date] = None,
    notes: str = "",
) -> tuple[WeightEntry, Prediction]:
    """Log a weigh-in stamped with the forecast made from that weight."""
    if measured_at is None:
        measured_at = date.today()

    prediction = predict_for_user(conn, user_key, weight_kg)
    entry = WeightQueries.add_weight(
        conn,
        user_key,
        weight_kg,
        measured_at,
        predicted_weight_kg=prediction.predicted_weight,
        notes=notes,
    )
    logger.debug(
        "Prediction for %s from %.1f kg: %s (confidence %d%%)",
        user_key,
        weight_kg,
        prediction.predicted_weight,
        prediction.confidence,
    )
    return entry, prediction


def setup_profile(
    conn: sqlite3.Connection,
    user_key: str,
    height_cm: float,
    age: int,
    start_weight_kg: float,
    goal_weight_kg: float,
    sex: Optional[str] = None,
    start_date: Optional[date] = None,
) -> Profile:
    """Complete first-time setup and log the starting weight.

    The first weight entry records the start weight as both the actual
    and the predicted value.
    """
    profile = ProfileQueries.require_profile(conn, user_key)
    if start_date is None:
        start_date = profile.start_date or date.today()

    updates: dict = {
        "height_cm": height_cm,
        "age": age,
        "start_weight_kg": start_weight_kg,
        "goal_weight_kg": goal_weight_kg,
        "start_date": start_date,
        "setup_complete": True,
    }
    if sex is not None:
        updates["sex"] = sex

    profile = ProfileQueries.update_profile(conn, user_key, **updates)
    WeightQueries.add_weight(
        conn,
        user_key,
        start_weight_kg,
        start_date,
        predicted_weight_kg=start_weight_kg,
    )
    return profile


def generate_user_stats(
    conn: sqlite3.Connection,
    user_key: str,
    today: Optional[date] = None,
) -> UserStats:
    """Summarize weights, changes and logging streak for a user."""
    profile = ProfileQueries.require_profile(conn, user_key)
    daily = DailyEntryQueries.get_entries(conn, user_key)
    weights = WeightQueries.get_weight_entries(conn, user_key)
    current = WeightQueries.get_latest_weight(conn, user_key)

    week_change = None
    if len(weights) >= 2:
        week_change = weights[0].actual_weight_kg - weights[1].actual_weight_kg

    total_change = None
    if profile.start_weight_kg and current:
        total_change = current - profile.start_weight_kg

    return UserStats(
        current_weight=current,
        start_weight=profile.start_weight_kg,
        goal_weight=profile.goal_weight_kg,
        total_change=total_change,
        week_change=week_change,
        days_tracked=len(daily),
        weeks_tracked=len(weights),
        streak=calculate_streak(daily, today),
    )


def generate_progress_report(
    conn: sqlite3.Connection,
    user_key: str,
    today: Optional[date] = None,
) -> ProgressReport:
    """Combine stats, BMI, weekly rate, goal projection and forecast."""
    profile = ProfileQueries.require_profile(conn, user_key)
    stats = generate_user_stats(conn, user_key, today)
    weights = WeightQueries.get_weight_entries(conn, user_key)

    weekly_rate = calculate_weight_loss_rate(weights)
    bmi = calculate_bmi(stats.current_weight, profile.height_cm)

    return ProgressReport(
        profile=profile,
        stats=stats,
        bmi=bmi,
        bmi_category=bmi_category(bmi),
        healthy_range=healthy_weight_range(profile.height_cm),
        weekly_rate=weekly_rate,
        goal=calculate_time_to_goal(
            stats.current_weight, profile.goal_weight_kg, weekly_rate, today
        ),
        prediction=predict_for_user(conn, user_key, stats.current_weight),
    )


def format_progress_report(report: ProgressReport) -> str:
    """Format progress report as human-readable text."""
    stats = report.stats
    prediction = report.prediction
    lines = [
        f"=== {report.profile.name} ===",
        "",
    ]

    if stats.current_weight is not None:
        lines.append(f"Current weight: {stats.current_weight:.1f} kg")
    if stats.total_change is not None:
        lines.append(f"Change since start: {stats.total_change:+.1f} kg")
    if stats.week_change is not None:
        lines.append(f"Change since last weigh-in: {stats.week_change:+.1f} kg")
    lines.append(f"Weekly rate: {report.weekly_rate:+.1f} kg/week")
    lines.append(
        f"Logged: {stats.days_tracked} days, {stats.weeks_tracked} weigh-ins, "
        f"streak {stats.streak}"
    )

    if report.bmi is not None:
        lines.append(f"BMI: {report.bmi:.1f} ({report.bmi_category})")
    if report.healthy_range is not None:
        low, high = report.healthy_range
        lines.append(f"Healthy range: {low:.1f}-{high:.1f} kg")

    if report.profile.goal_weight_kg:
        lines.append("")
        lines.append(f"Goal: {report.profile.goal_weight_kg:.1f} kg")
        if report.goal.achieved:
            lines.append("Goal achieved")
        elif report.goal.has_estimate:
            lines.append(
                f"ETA: {report.goal.weeks_remaining} weeks "
                f"({report.goal.estimated_date.isoformat()})"  # type: ignore[union-attr]
            )
        else:
            lines.append("ETA: needs a downward trend")

    lines.append("")
    if prediction.days_of_data:
        lines.append(
            f"Next week: {prediction.predicted_weight:.1f} kg "
            f"(confidence {prediction.confidence}%, {prediction.days_of_data} days)"
        )
        lines.append(
            f"BMR {prediction.bmr} | TDEE {prediction.tdee} "
            f"({prediction.activity_level.value}) | "
            f"exercise {prediction.avg_exercise_calories} | "
            f"balance {prediction.daily_balance:+d} kcal/day"
        )
    else:
        lines.append("Next week: log some days to get a forecast")

    return "\n".join(lines)
