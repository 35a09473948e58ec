"""SQLite database schema definitions."""

SCHEMA_SQL = """
-- One row per tracked person
CREATE TABLE IF NOT EXISTS user_profiles (
    user_key TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    height_cm REAL,
    age INTEGER,
    sex TEXT NOT NULL DEFAULT 'female' CHECK (sex IN ('male', 'female')),
    start_weight_kg REAL,
    goal_weight_kg REAL,
    start_date DATE,
    setup_complete BOOLEAN NOT NULL DEFAULT FALSE,
    last_entry_date DATE,
    next_weight_prompt DATE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Daily intake and activity, one row per user per day
CREATE TABLE IF NOT EXISTS daily_entries (
    entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_key TEXT NOT NULL,
    entry_date DATE NOT NULL,
    breakfast REAL NOT NULL DEFAULT 0,
    lunch REAL NOT NULL DEFAULT 0,
    dinner REAL NOT NULL DEFAULT 0,
    snack REAL NOT NULL DEFAULT 0,
    total_calories REAL NOT NULL DEFAULT 0,
    workout_completed BOOLEAN NOT NULL DEFAULT FALSE,
    exercises TEXT NOT NULL DEFAULT '[]',  -- JSON array of exercise tags
    running_completed BOOLEAN NOT NULL DEFAULT FALSE,
    running_km REAL NOT NULL DEFAULT 0,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (user_key, entry_date),
    FOREIGN KEY (user_key) REFERENCES user_profiles(user_key)
);

CREATE INDEX IF NOT EXISTS idx_daily_entries_user_date
    ON daily_entries(user_key, entry_date);

-- Weekly weigh-ins; never updated once written
CREATE TABLE IF NOT EXISTS weight_entries (
    entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_key TEXT NOT NULL,
    entry_date DATE NOT NULL,
    actual_weight_kg REAL NOT NULL,
    predicted_weight_kg REAL,
    notes TEXT NOT NULL DEFAULT '',
    week_number INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (user_key) REFERENCES user_profiles(user_key)
);

CREATE INDEX IF NOT EXISTS idx_weight_entries_user_date
    ON weight_entries(user_key, entry_date);
"""


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL
