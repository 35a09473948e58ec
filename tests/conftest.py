"""Pytest fixtures for weighttrack tests."""

from __future__ import annotations

import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest

from weighttrack.db.connection import DatabaseConnection
from weighttrack.tracking.models import (
    CalorieBreakdown,
    DailyEntry,
    Profile,
    RunningRecord,
    WorkoutRecord,
)
from weighttrack.tracking.queries import ProfileQueries


def make_day(
    day: date,
    calories: float = 2000,
    exercises: tuple[str, ...] = (),
    workout: bool = False,
    run_km: float | None = None,
) -> DailyEntry:
    """Build a daily entry with the whole intake logged as dinner."""
    return DailyEntry(
        entry_date=day,
        calories=CalorieBreakdown(dinner=calories),
        workout=WorkoutRecord(
            completed=workout or bool(exercises), exercises=list(exercises)
        ),
        running=RunningRecord(
            completed=run_km is not None, distance_km=run_km or 0.0
        ),
    )


@pytest.fixture
def day_factory():
    """Return the make_day builder."""
    return make_day


@pytest.fixture
def profile() -> Profile:
    """A completed profile: 30y female, 165 cm."""
    return Profile(
        user_key="alex",
        name="Alex",
        height_cm=165,
        age=30,
        sex="female",
        start_weight_kg=80.0,
        goal_weight_kg=70.0,
        start_date=date(2026, 2, 10),
        setup_complete=True,
    )


@pytest.fixture
def week_of_days() -> list[DailyEntry]:
    """Seven consecutive sedentary 2000 kcal days, newest first."""
    end = date(2026, 3, 10)
    return [make_day(end - timedelta(days=i)) for i in range(7)]


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)


@pytest.fixture
def seeded_db(temp_db):
    """Database with two empty user profiles."""
    with temp_db.get_connection() as conn:
        ProfileQueries.ensure_user(conn, "alex", "Alex")
        ProfileQueries.ensure_user(conn, "sam", "Sam")
    return temp_db
