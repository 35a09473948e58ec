"""Database queries for profiles, daily entries and weight entries.

Query methods never commit; the connection context manager from
``DatabaseConnection.get_connection`` commits the whole unit of work.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from weighttrack.tracking.models import (
    CalorieBreakdown,
    DailyEntry,
    Profile,
    RunningRecord,
    WeightEntry,
    WorkoutRecord,
)
from weighttrack.tracking.progress import calculate_week_number

logger = logging.getLogger(__name__)

# Days between weigh-ins
WEIGH_IN_INTERVAL_DAYS = 7

# Profile fields that update_profile accepts
EDITABLE_PROFILE_FIELDS = (
    "name",
    "height_cm",
    "age",
    "sex",
    "start_weight_kg",
    "goal_weight_kg",
    "start_date",
    "setup_complete",
)


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _row_to_profile(row: sqlite3.Row) -> Profile:
    return Profile(
        user_key=row["user_key"],
        name=row["name"],
        height_cm=row["height_cm"],
        age=row["age"],
        sex=row["sex"],
        start_weight_kg=row["start_weight_kg"],
        goal_weight_kg=row["goal_weight_kg"],
        start_date=_parse_date(row["start_date"]),
        setup_complete=bool(row["setup_complete"]),
        last_entry_date=_parse_date(row["last_entry_date"]),
        next_weight_prompt=_parse_date(row["next_weight_prompt"]),
    )


def _row_to_daily_entry(row: sqlite3.Row) -> DailyEntry:
    return DailyEntry(
        entry_id=row["entry_id"],
        entry_date=date.fromisoformat(row["entry_date"]),
        calories=CalorieBreakdown(
            breakfast=row["breakfast"],
            lunch=row["lunch"],
            dinner=row["dinner"],
            snack=row["snack"],
        ),
        workout=WorkoutRecord(
            completed=bool(row["workout_completed"]),
            exercises=json.loads(row["exercises"] or "[]"),
        ),
        running=RunningRecord(
            completed=bool(row["running_completed"]),
            distance_km=row["running_km"],
        ),
    )


def _row_to_weight_entry(row: sqlite3.Row) -> WeightEntry:
    return WeightEntry(
        entry_id=row["entry_id"],
        entry_date=date.fromisoformat(row["entry_date"]),
        actual_weight_kg=row["actual_weight_kg"],
        predicted_weight_kg=row["predicted_weight_kg"],
        notes=row["notes"] or "",
        week_number=row["week_number"],
    )


class ProfileQueries:
    """Database queries for user profiles."""

    @staticmethod
    def ensure_user(conn: sqlite3.Connection, user_key: str, name: str) -> Profile:
        """Create an empty profile for user_key if none exists, and return it."""
        conn.execute(
            "INSERT OR IGNORE INTO user_profiles (user_key, name) VALUES (?, ?)",
            (user_key, name),
        )
        return ProfileQueries.require_profile(conn, user_key)

    @staticmethod
    def get_profile(conn: sqlite3.Connection, user_key: str) -> Optional[Profile]:
        """Get a profile by user key."""
        row = conn.execute(
            "SELECT * FROM user_profiles WHERE user_key = ?",
            (user_key,),
        ).fetchone()

        if row is None:
            return None
        return _row_to_profile(row)

    @staticmethod
    def require_profile(conn: sqlite3.Connection, user_key: str) -> Profile:
        """Get a profile by user key, raising ValueError if it does not exist."""
        profile = ProfileQueries.get_profile(conn, user_key)
        if profile is None:
            raise ValueError(f"Unknown user: {user_key}")
        return profile

    @staticmethod
    def list_profiles(conn: sqlite3.Connection) -> list[Profile]:
        """List all profiles ordered by user key."""
        rows = conn.execute(
            "SELECT * FROM user_profiles ORDER BY user_key"
        ).fetchall()
        return [_row_to_profile(row) for row in rows]

    @staticmethod
    def update_profile(
        conn: sqlite3.Connection,
        user_key: str,
        **updates: object,
    ) -> Profile:
        """
        Apply a partial update to a profile.

        Args:
            user_key: Profile to update
            **updates: Any of EDITABLE_PROFILE_FIELDS

        Raises:
            ValueError: Unknown user, unknown field or invalid value
        """
        unknown = set(updates) - set(EDITABLE_PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update profile fields: {', '.join(sorted(unknown))}")

        profile = ProfileQueries.require_profile(conn, user_key)

        # replace() re-runs validation
        updated = replace(profile, **updates)  # type: ignore[arg-type]

        conn.execute(
            """
            UPDATE user_profiles
            SET name = ?, height_cm = ?, age = ?, sex = ?, start_weight_kg = ?,
                goal_weight_kg = ?, start_date = ?, setup_complete = ?
            WHERE user_key = ?
            """,
            (
                updated.name,
                updated.height_cm,
                updated.age,
                updated.sex.value,
                updated.start_weight_kg,
                updated.goal_weight_kg,
                _iso(updated.start_date),
                updated.setup_complete,
                user_key,
            ),
        )
        logger.info("Updated profile %s: %s", user_key, ", ".join(sorted(updates)))
        return updated

    @staticmethod
    def reset_profile(conn: sqlite3.Connection, user_key: str) -> Profile:
        """Clear a user's biometrics and delete all of their entries."""
        ProfileQueries.require_profile(conn, user_key)

        conn.execute("DELETE FROM daily_entries WHERE user_key = ?", (user_key,))
        conn.execute("DELETE FROM weight_entries WHERE user_key = ?", (user_key,))
        conn.execute(
            """
            UPDATE user_profiles
            SET height_cm = NULL, age = NULL, start_weight_kg = NULL,
                goal_weight_kg = NULL, start_date = NULL, setup_complete = FALSE,
                last_entry_date = NULL, next_weight_prompt = NULL
            WHERE user_key = ?
            """,
            (user_key,),
        )
        logger.info("Reset profile %s", user_key)

        return ProfileQueries.require_profile(conn, user_key)


class DailyEntryQueries:
    """Database queries for daily intake and activity entries."""

    @staticmethod
    def save_entry(
        conn: sqlite3.Connection,
        user_key: str,
        entry: DailyEntry,
    ) -> DailyEntry:
        """
        Insert or replace the entry for entry.entry_date.

        The stored calorie total is recomputed from the meal subtotals.
        """
        ProfileQueries.require_profile(conn, user_key)

        calories = entry.calories
        conn.execute(
            """
            INSERT INTO daily_entries (
                user_key, entry_date, breakfast, lunch, dinner, snack,
                total_calories, workout_completed, exercises,
                running_completed, running_km
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (user_key, entry_date) DO UPDATE SET
                breakfast = excluded.breakfast,
                lunch = excluded.lunch,
                dinner = excluded.dinner,
                snack = excluded.snack,
                total_calories = excluded.total_calories,
                workout_completed = excluded.workout_completed,
                exercises = excluded.exercises,
                running_completed = excluded.running_completed,
                running_km = excluded.running_km,
                updated_at = CURRENT_TIMESTAMP
            """,
            (
                user_key,
                entry.entry_date.isoformat(),
                calories.breakfast,
                calories.lunch,
                calories.dinner,
                calories.snack,
                calories.total,
                entry.workout.completed,
                json.dumps(list(entry.workout.exercises)),
                entry.running.completed,
                entry.running.distance_km or 0,
            ),
        )
        conn.execute(
            "UPDATE user_profiles SET last_entry_date = ? WHERE user_key = ?",
            (entry.entry_date.isoformat(), user_key),
        )
        logger.debug(
            "Saved daily entry for %s on %s (%s kcal)",
            user_key,
            entry.entry_date,
            calories.total,
        )

        row = conn.execute(
            "SELECT * FROM daily_entries WHERE user_key = ? AND entry_date = ?",
            (user_key, entry.entry_date.isoformat()),
        ).fetchone()
        return _row_to_daily_entry(row)

    @staticmethod
    def get_entries(
        conn: sqlite3.Connection,
        user_key: str,
        limit: Optional[int] = None,
    ) -> list[DailyEntry]:
        """Get daily entries newest first, optionally limited to the last N."""
        query = """
            SELECT * FROM daily_entries
            WHERE user_key = ?
            ORDER BY entry_date DESC
        """
        params: list = [user_key]

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        rows = conn.execute(query, params).fetchall()
        return [_row_to_daily_entry(row) for row in rows]

    @staticmethod
    def get_entry_by_date(
        conn: sqlite3.Connection,
        user_key: str,
        entry_date: date,
    ) -> Optional[DailyEntry]:
        """Get the entry for a specific day."""
        row = conn.execute(
            "SELECT * FROM daily_entries WHERE user_key = ? AND entry_date = ?",
            (user_key, entry_date.isoformat()),
        ).fetchone()

        if row is None:
            return None
        return _row_to_daily_entry(row)

    @staticmethod
    def delete_entry(
        conn: sqlite3.Connection,
        user_key: str,
        entry_date: date,
    ) -> bool:
        """Delete the entry for a day. Returns True if a row was removed."""
        cursor = conn.execute(
            "DELETE FROM daily_entries WHERE user_key = ? AND entry_date = ?",
            (user_key, entry_date.isoformat()),
        )
        return cursor.rowcount > 0


class WeightQueries:
    """Database queries for weight entries."""

    @staticmethod
    def insert_entry(
        conn: sqlite3.Connection,
        user_key: str,
        entry: WeightEntry,
    ) -> WeightEntry:
        """Insert a fully built weight entry as-is and set its entry_id."""
        cursor = conn.execute(
            """
            INSERT INTO weight_entries (user_key, entry_date, actual_weight_kg,
                                        predicted_weight_kg, notes, week_number)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                user_key,
                entry.entry_date.isoformat(),
                entry.actual_weight_kg,
                entry.predicted_weight_kg,
                entry.notes,
                entry.week_number,
            ),
        )
        entry.entry_id = cursor.lastrowid
        return entry

    @staticmethod
    def add_weight(
        conn: sqlite3.Connection,
        user_key: str,
        weight_kg: float,
        entry_date: date,
        predicted_weight_kg: Optional[float] = None,
        notes: str = "",
    ) -> WeightEntry:
        """
        Add a weight entry.

        The week number is computed from the profile's start date, and the
        next weigh-in prompt is set one week after entry_date.
        """
        profile = ProfileQueries.require_profile(conn, user_key)

        entry = WeightEntry(
            entry_date=entry_date,
            actual_weight_kg=weight_kg,
            predicted_weight_kg=predicted_weight_kg,
            notes=notes or "",
            week_number=calculate_week_number(entry_date, profile.start_date),
        )

        WeightQueries.insert_entry(conn, user_key, entry)

        next_prompt = entry_date + timedelta(days=WEIGH_IN_INTERVAL_DAYS)
        conn.execute(
            "UPDATE user_profiles SET next_weight_prompt = ? WHERE user_key = ?",
            (next_prompt.isoformat(), user_key),
        )
        logger.info(
            "Logged weight for %s: %.1f kg (week %d)",
            user_key,
            weight_kg,
            entry.week_number,
        )
        return entry

    @staticmethod
    def get_weight_entries(
        conn: sqlite3.Connection,
        user_key: str,
        limit: Optional[int] = None,
    ) -> list[WeightEntry]:
        """Get weight entries newest first."""
        query = """
            SELECT * FROM weight_entries
            WHERE user_key = ?
            ORDER BY entry_date DESC, entry_id DESC
        """
        params: list = [user_key]

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        rows = conn.execute(query, params).fetchall()
        return [_row_to_weight_entry(row) for row in rows]

    @staticmethod
    def get_latest_weight(conn: sqlite3.Connection, user_key: str) -> Optional[float]:
        """Most recent logged weight, falling back to the profile start weight."""
        row = conn.execute(
            """
            SELECT actual_weight_kg FROM weight_entries
            WHERE user_key = ?
            ORDER BY entry_date DESC, entry_id DESC LIMIT 1
            """,
            (user_key,),
        ).fetchone()

        if row is not None:
            return row[0]

        profile = ProfileQueries.get_profile(conn, user_key)
        if profile is None:
            return None
        return profile.start_weight_kg
