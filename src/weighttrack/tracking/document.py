"""Whole-store JSON export and import.

The document mirrors the layout used for backups:

    {
      "version": "1.0.0",
      "lastUpdated": <epoch ms>,
      "users": {
        "<key>": {
          "profile": {...},
          "dailyEntries": [...],     # newest first
          "weightEntries": [...],    # newest first
          "lastEntryDate": "YYYY-MM-DD" | null,
          "nextWeightPrompt": "YYYY-MM-DD" | null
        }
      },
      "settings": {...}
    }
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from datetime import date
from typing import Optional

from weighttrack.config.settings import Settings
from weighttrack.tracking.models import DailyEntry, Profile, WeightEntry
from weighttrack.tracking.queries import (
    DailyEntryQueries,
    ProfileQueries,
    WeightQueries,
)

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0.0"


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def export_document(
    conn: sqlite3.Connection,
    settings: Optional[Settings] = None,
) -> dict:
    """Serialize every stored user into a single JSON-ready document."""
    users: dict[str, dict] = {}

    for profile in ProfileQueries.list_profiles(conn):
        daily = DailyEntryQueries.get_entries(conn, profile.user_key)
        weights = WeightQueries.get_weight_entries(conn, profile.user_key)
        users[profile.user_key] = {
            "profile": profile.to_dict(),
            "dailyEntries": [entry.to_dict() for entry in daily],
            "weightEntries": [entry.to_dict() for entry in weights],
            "lastEntryDate": _iso(profile.last_entry_date),
            "nextWeightPrompt": _iso(profile.next_weight_prompt),
        }

    document: dict = {
        "version": DOCUMENT_VERSION,
        "lastUpdated": int(time.time() * 1000),
        "users": users,
    }
    if settings is not None:
        document["settings"] = {
            "reminderTime": settings.reminders.time,
            "units": settings.defaults.units,
        }
    return document


def _profile_from_document(user_key: str, data: dict) -> Profile:
    return Profile(
        user_key=user_key,
        name=data.get("name") or user_key,
        height_cm=data.get("height") or None,
        age=data.get("age") or None,
        sex=data.get("gender") or "female",
        start_weight_kg=data.get("startWeight") or None,
        goal_weight_kg=data.get("goalWeight") or None,
        start_date=_parse_date(data.get("startDate")),
        setup_complete=bool(data.get("setupComplete")),
    )


def validate_document(data: object) -> dict:
    """Check the top-level shape of an imported document.

    Raises:
        ValueError: If the document is not an object with users and version
    """
    if not isinstance(data, dict) or "users" not in data or "version" not in data:
        raise ValueError("Invalid data format: expected 'users' and 'version'")
    if not isinstance(data["users"], dict):
        raise ValueError("Invalid data format: 'users' must be an object")
    return data


@dataclass
class _UserRecords:
    """One user's records parsed from a document, ready to store."""

    profile: Profile
    daily: list[DailyEntry]
    weights: list[WeightEntry]
    last_entry_date: Optional[date]
    next_weight_prompt: Optional[date]


def _records(user_data: dict, key: str) -> list[dict]:
    records = user_data.get(key) or []
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise TypeError(f"'{key}' must be a list of objects")
    return records


def _parse_user(user_key: str, user_data: object) -> _UserRecords:
    """Parse one user's section of a document.

    Raises:
        ValueError: The section or one of its records is malformed
    """
    user_data = user_data or {}
    try:
        if not isinstance(user_data, dict):
            raise TypeError("user data must be an object")
        profile_data = user_data.get("profile") or {}
        if not isinstance(profile_data, dict):
            raise TypeError("'profile' must be an object")

        return _UserRecords(
            profile=_profile_from_document(user_key, profile_data),
            daily=[DailyEntry.from_dict(raw) for raw in _records(user_data, "dailyEntries")],
            weights=[
                WeightEntry(
                    entry_date=date.fromisoformat(raw["date"]),
                    actual_weight_kg=float(raw["actualWeight"]),
                    predicted_weight_kg=raw.get("predictedWeight"),
                    notes=raw.get("notes") or "",
                    week_number=int(raw.get("weekNumber") or 0),
                )
                for raw in _records(user_data, "weightEntries")
            ],
            last_entry_date=_parse_date(user_data.get("lastEntryDate")),
            next_weight_prompt=_parse_date(user_data.get("nextWeightPrompt")),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning("Rejected import: bad record for user %s", user_key)
        raise ValueError(f"Invalid entry for user '{user_key}': {e}") from e


def import_document(conn: sqlite3.Connection, data: object) -> list[str]:
    """
    Replace stored data for every user present in the document.

    Users missing from the document are left untouched. Weight entries keep
    their stored week numbers and predictions. Every user is parsed before
    any stored data is replaced.

    Args:
        conn: Open connection; the caller's context commits or rolls back
        data: Parsed JSON document

    Returns:
        Imported user keys

    Raises:
        ValueError: Malformed document or entry
    """
    try:
        document = validate_document(data)
    except ValueError:
        logger.warning("Rejected import: document failed validation")
        raise

    parsed = {
        user_key: _parse_user(user_key, user_data)
        for user_key, user_data in document["users"].items()
    }

    for user_key, records in parsed.items():
        profile = records.profile
        ProfileQueries.ensure_user(conn, user_key, profile.name)
        ProfileQueries.reset_profile(conn, user_key)
        ProfileQueries.update_profile(
            conn,
            user_key,
            name=profile.name,
            height_cm=profile.height_cm,
            age=profile.age,
            sex=profile.sex,
            start_weight_kg=profile.start_weight_kg,
            goal_weight_kg=profile.goal_weight_kg,
            start_date=profile.start_date,
            setup_complete=profile.setup_complete,
        )

        for entry in records.daily:
            DailyEntryQueries.save_entry(conn, user_key, entry)
        for weight_entry in records.weights:
            WeightQueries.insert_entry(conn, user_key, weight_entry)

        conn.execute(
            """
            UPDATE user_profiles SET last_entry_date = ?, next_weight_prompt = ?
            WHERE user_key = ?
            """,
            (_iso(records.last_entry_date), _iso(records.next_weight_prompt), user_key),
        )

    imported = list(parsed)
    logger.info("Imported %d user(s): %s", len(imported), ", ".join(imported))
    return imported
