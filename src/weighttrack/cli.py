"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from weighttrack.config import get_settings
from weighttrack.db import get_db
from weighttrack.tracking.queries import (
    DailyEntryQueries,
    ProfileQueries,
    WeightQueries,
)

app = typer.Typer(
    help="Two-person weight and activity tracker with weekly forecasts",
    no_args_is_help=True,
)
console = Console()

# Subcommand groups
user_app = typer.Typer(help="Manage tracked user profiles")
day_app = typer.Typer(help="Log daily calories, workouts and runs")
weight_app = typer.Typer(help="Log weekly weigh-ins")

app.add_typer(user_app, name="user")
app.add_typer(day_app, name="day")
app.add_typer(weight_app, name="weight")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(command: str, message: str, json_output: bool) -> NoReturn:
    """Report an error in the active output mode and exit with status 1."""
    if json_output:
        output_json({"success": False, "command": command, "errors": [message]})
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def parse_date(date_str: Optional[str], command: str, json_output: bool) -> date:
    """Parse a YYYY-MM-DD option, defaulting to today."""
    if not date_str:
        return date.today()
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        fail(command, f"Invalid date '{date_str}', expected YYYY-MM-DD", json_output)


def ensure_tables() -> None:
    """Create tables and a profile row for each configured user (idempotent)."""
    db = get_db()
    db.initialize_schema()
    with db.get_connection() as conn:
        for user_key, name in get_settings().users.items():
            ProfileQueries.ensure_user(conn, user_key, name)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@user_app.callback()
def user_callback() -> None:
    """Ensure tables exist before any user command."""
    ensure_tables()


@day_app.callback()
def day_callback() -> None:
    """Ensure tables exist before any day command."""
    ensure_tables()


@weight_app.callback()
def weight_callback() -> None:
    """Ensure tables exist before any weight command."""
    ensure_tables()


# ============================================================================
# Main Commands
# ============================================================================


@app.command()
def init(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Create the database and the configured user profiles."""
    ensure_tables()
    db = get_db()
    users = list(get_settings().users)

    if json_output:
        output_json({
            "success": True,
            "command": "init",
            "data": {"db_path": str(db.db_path), "users": users},
            "human_summary": f"Initialized {len(users)} user(s)",
        })
    else:
        console.print(f"Database: {db.db_path}")
        console.print(f"[green]Users ready:[/green] {', '.join(users)}")


@app.command()
def predict(
    user_key: str = typer.Argument(..., help="User key"),
    weight: Optional[float] = typer.Option(
        None, "--weight", "-w", help="Forecast from this weight (default: latest)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Forecast next week's weight from the last 7 logged days."""
    from weighttrack.tracking.diagnostics import predict_for_user

    ensure_tables()
    db = get_db()
    try:
        with db.get_connection() as conn:
            prediction = predict_for_user(conn, user_key, weight)
    except ValueError as e:
        fail("predict", str(e), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "predict",
            "data": prediction.to_dict(),
            "human_summary": f"Predicted {prediction.predicted_weight} kg "
                             f"({prediction.confidence}% confidence)",
        })
        return

    if not prediction.days_of_data:
        console.print("[yellow]No daily entries yet; forecast is your current weight[/yellow]")

    table = Table(title=f"Forecast for {user_key}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Predicted weight", f"{prediction.predicted_weight} kg")
    table.add_row("Daily balance", f"{prediction.daily_balance:+d} kcal")
    table.add_row("BMR", f"{prediction.bmr} kcal")
    table.add_row("TDEE", f"{prediction.tdee} kcal")
    table.add_row("Exercise (avg)", f"{prediction.avg_exercise_calories} kcal")
    table.add_row("Activity level", prediction.activity_level.value)
    table.add_row("Confidence", f"{prediction.confidence}%")
    table.add_row("Days of data", str(prediction.days_of_data))
    console.print(table)


@app.command()
def stats(
    user_key: str = typer.Argument(..., help="User key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show progress, BMI, weekly rate, goal ETA and forecast."""
    from weighttrack.tracking.diagnostics import (
        format_progress_report,
        generate_progress_report,
    )

    ensure_tables()
    db = get_db()
    try:
        with db.get_connection() as conn:
            report = generate_progress_report(conn, user_key)
    except ValueError as e:
        fail("stats", str(e), json_output)

    if json_output:
        goal = report.goal
        output_json({
            "success": True,
            "command": "stats",
            "data": {
                "current_weight": report.stats.current_weight,
                "start_weight": report.stats.start_weight,
                "goal_weight": report.stats.goal_weight,
                "total_change": report.stats.total_change,
                "week_change": report.stats.week_change,
                "days_tracked": report.stats.days_tracked,
                "weeks_tracked": report.stats.weeks_tracked,
                "streak": report.stats.streak,
                "bmi": report.bmi,
                "bmi_category": report.bmi_category,
                "healthy_range": list(report.healthy_range) if report.healthy_range else None,
                "weekly_rate": report.weekly_rate,
                "goal": {
                    "weeks_remaining": goal.weeks_remaining,
                    "estimated_date": goal.estimated_date.isoformat() if goal.estimated_date else None,
                    "achieved": goal.achieved,
                },
                "prediction": report.prediction.to_dict(),
            },
            "human_summary": f"{report.weekly_rate:+.1f} kg/week",
        })
    else:
        console.print(format_progress_report(report))


@app.command("export")
def export_cmd(
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to file instead of stdout"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Export all stored data as a JSON document."""
    from weighttrack.tracking.document import export_document

    ensure_tables()
    db = get_db()
    with db.get_connection() as conn:
        document = export_document(conn, get_settings())

    if output:
        with open(output, "w") as f:
            output_json(document, file=f)

    if json_output:
        output_json({
            "success": True,
            "command": "export",
            "data": {
                "output": str(output) if output else None,
                "users": list(document["users"]),
                "document": None if output else document,
            },
            "human_summary": f"Exported {len(document['users'])} user(s)",
        })
    elif output:
        console.print(f"[green]Exported {len(document['users'])} user(s) to {output}[/green]")
    else:
        output_json(document)


@app.command("import")
def import_cmd(
    path: Path = typer.Argument(..., help="JSON document to import"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Import a JSON document, replacing data for the users it contains."""
    from weighttrack.tracking.document import import_document

    ensure_tables()
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        fail("import", f"Failed to read {path}: {e}", json_output)

    db = get_db()
    try:
        with db.get_connection() as conn:
            imported = import_document(conn, data)
    except ValueError as e:
        fail("import", f"Failed to import data: {e}", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "import",
            "data": {"users": imported},
            "human_summary": "Data imported successfully",
        })
    else:
        console.print(f"[green]Data imported successfully[/green] ({', '.join(imported)})")


# ============================================================================
# User Profile Commands
# ============================================================================


@user_app.command("setup")
def user_setup(
    user_key: str = typer.Argument(..., help="User key"),
    height: float = typer.Option(..., "--height", help="Height in cm"),
    age: int = typer.Option(..., "--age", help="Age in years"),
    start_weight: float = typer.Option(..., "--start-weight", help="Starting weight in kg"),
    goal_weight: float = typer.Option(..., "--goal-weight", help="Goal weight in kg"),
    sex: Optional[str] = typer.Option(None, "--sex", help="Sex (male/female)"),
    start_date: Optional[str] = typer.Option(
        None, "--start-date", help="Start date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Complete profile setup and log the starting weight."""
    from weighttrack.tracking.diagnostics import setup_profile

    started = parse_date(start_date, "user setup", json_output)
    db = get_db()
    try:
        with db.get_connection() as conn:
            profile = setup_profile(
                conn, user_key, height, age, start_weight, goal_weight,
                sex=sex, start_date=started,
            )
    except ValueError as e:
        fail("user setup", str(e), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "user setup",
            "data": {"user_key": user_key, "profile": profile.to_dict()},
            "human_summary": f"Profile saved for {profile.name}",
        })
    else:
        console.print(f"[green]Profile saved for {profile.name}[/green]")


@user_app.command("show")
def user_show(
    user_key: str = typer.Argument(..., help="User key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show a user profile."""
    db = get_db()
    with db.get_connection() as conn:
        profile = ProfileQueries.get_profile(conn, user_key)

    if profile is None:
        fail("user show", f"Unknown user: {user_key}", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "user show",
            "data": {"user_key": user_key, **profile.to_dict()},
            "human_summary": f"{profile.name}: setup "
                             f"{'complete' if profile.setup_complete else 'pending'}",
        })
        return

    console.print(f"[bold]{profile.name}[/bold] ({user_key})")
    if not profile.setup_complete:
        console.print(f"[yellow]Setup pending. Run: weighttrack user setup {user_key} ...[/yellow]")
    console.print(f"  Sex: {profile.sex.value}")
    if profile.height_cm:
        console.print(f"  Height: {profile.height_cm} cm")
    if profile.age:
        console.print(f"  Age: {profile.age}")
    if profile.start_weight_kg:
        console.print(f"  Start weight: {profile.start_weight_kg} kg")
    if profile.goal_weight_kg:
        console.print(f"  Goal weight: {profile.goal_weight_kg} kg")
    if profile.start_date:
        console.print(f"  Start date: {profile.start_date.isoformat()}")
    if profile.next_weight_prompt:
        console.print(f"  Next weigh-in: {profile.next_weight_prompt.isoformat()}")


@user_app.command("list")
def user_list(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List all user profiles."""
    db = get_db()
    with db.get_connection() as conn:
        profiles = ProfileQueries.list_profiles(conn)

    if json_output:
        output_json({
            "success": True,
            "command": "user list",
            "data": {"users": [{"user_key": p.user_key, **p.to_dict()} for p in profiles]},
            "human_summary": f"{len(profiles)} user(s)",
        })
        return

    table = Table(title="Users")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Setup")
    table.add_column("Last entry", justify="right")
    for p in profiles:
        table.add_row(
            p.user_key,
            p.name,
            "[green]done[/green]" if p.setup_complete else "[yellow]pending[/yellow]",
            p.last_entry_date.isoformat() if p.last_entry_date else "-",
        )
    console.print(table)


@user_app.command("reset")
def user_reset(
    user_key: str = typer.Argument(..., help="User key"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Clear a user's profile and delete all of their entries."""
    if not force and not json_output:
        typer.confirm(f"Delete all data for '{user_key}'?", abort=True)

    db = get_db()
    try:
        with db.get_connection() as conn:
            ProfileQueries.reset_profile(conn, user_key)
    except ValueError as e:
        fail("user reset", str(e), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "user reset",
            "data": {"user_key": user_key},
            "human_summary": f"Reset {user_key}",
        })
    else:
        console.print(f"[green]Reset {user_key}[/green]")


# ============================================================================
# Daily Entry Commands
# ============================================================================


@day_app.command("log")
def day_log(
    user_key: str = typer.Argument(..., help="User key"),
    breakfast: float = typer.Option(0, "--breakfast", "-b", help="Breakfast kcal"),
    lunch: float = typer.Option(0, "--lunch", "-l", help="Lunch kcal"),
    dinner: float = typer.Option(0, "--dinner", "-d", help="Dinner kcal"),
    snack: float = typer.Option(0, "--snack", "-s", help="Snack kcal"),
    exercise: Optional[list[str]] = typer.Option(
        None, "--exercise", "-e", help="Exercise tag (repeatable), marks a workout"
    ),
    workout: bool = typer.Option(False, "--workout", help="Workout done (no tags)"),
    run_km: Optional[float] = typer.Option(None, "--run-km", help="Running distance in km"),
    date_str: Optional[str] = typer.Option(
        None, "--date", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log (or replace) a day's calories and activity."""
    from weighttrack.tracking.diagnostics import is_weight_entry_due
    from weighttrack.tracking.models import (
        CalorieBreakdown,
        DailyEntry,
        RunningRecord,
        WorkoutRecord,
    )

    entry_date = parse_date(date_str, "day log", json_output)
    exercises = list(exercise or [])

    db = get_db()
    try:
        entry = DailyEntry(
            entry_date=entry_date,
            calories=CalorieBreakdown(breakfast, lunch, dinner, snack),
            workout=WorkoutRecord(completed=workout or bool(exercises), exercises=exercises),
            running=RunningRecord(completed=run_km is not None, distance_km=run_km or 0.0),
        )
        with db.get_connection() as conn:
            saved = DailyEntryQueries.save_entry(conn, user_key, entry)
            profile = ProfileQueries.get_profile(conn, user_key)
            weights = WeightQueries.get_weight_entries(conn, user_key, limit=1)
            weigh_in_due = profile is not None and is_weight_entry_due(profile, weights)
    except ValueError as e:
        fail("day log", str(e), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "day log",
            "data": {**saved.to_dict(), "weigh_in_due": weigh_in_due},
            "human_summary": f"Logged {saved.calories.total:.0f} kcal on {entry_date}",
        })
    else:
        console.print(f"[green]Logged:[/green] {saved.calories.total:.0f} kcal on {entry_date}")
        if weigh_in_due:
            console.print(f"[yellow]Weigh-in due. Run: weighttrack weight add {user_key} <kg>[/yellow]")


@day_app.command("list")
def day_list(
    user_key: str = typer.Argument(..., help="User key"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Number of days to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List daily entries, newest first."""
    from weighttrack.tracking.activity import calculate_exercise_calories

    if limit is None:
        limit = get_settings().defaults.history_days

    db = get_db()
    with db.get_connection() as conn:
        entries = DailyEntryQueries.get_entries(conn, user_key, limit=limit)
        weight = WeightQueries.get_latest_weight(conn, user_key)

    if json_output:
        output_json({
            "success": True,
            "command": "day list",
            "data": {"entries": [e.to_dict() for e in entries]},
            "human_summary": f"{len(entries)} entries",
        })
        return

    if not entries:
        console.print("No daily entries found")
        return

    table = Table(title=f"Daily entries for {user_key}")
    table.add_column("Date", style="cyan")
    table.add_column("kcal", justify="right")
    table.add_column("Workout")
    table.add_column("Run (km)", justify="right")
    table.add_column("Burned", justify="right", style="blue")

    for e in entries:
        table.add_row(
            e.entry_date.isoformat(),
            f"{e.calories.total:.0f}",
            ", ".join(e.workout.exercises) if e.workout.completed else "",
            f"{e.running.distance_km:.1f}" if e.running.completed else "",
            str(calculate_exercise_calories(weight, e)),
        )
    console.print(table)


@day_app.command("delete")
def day_delete(
    user_key: str = typer.Argument(..., help="User key"),
    date_str: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delete the entry for one day."""
    entry_date = parse_date(date_str, "day delete", json_output)

    db = get_db()
    with db.get_connection() as conn:
        deleted = DailyEntryQueries.delete_entry(conn, user_key, entry_date)

    if not deleted:
        fail("day delete", f"No entry for {user_key} on {entry_date}", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "day delete",
            "data": {"date": entry_date.isoformat()},
            "human_summary": f"Deleted entry for {entry_date}",
        })
    else:
        console.print(f"[green]Deleted entry for {entry_date}[/green]")


# ============================================================================
# Weight Commands
# ============================================================================


@weight_app.command("add")
def weight_add(
    user_key: str = typer.Argument(..., help="User key"),
    weight: float = typer.Argument(..., help="Weight in kg"),
    notes: str = typer.Option("", "--notes", "-n", help="Optional notes"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log a weigh-in stamped with next week's forecast."""
    from weighttrack.tracking.diagnostics import record_weight

    measured_at = parse_date(date_str, "weight add", json_output)

    db = get_db()
    try:
        with db.get_connection() as conn:
            entry, prediction = record_weight(conn, user_key, weight, measured_at, notes)
    except ValueError as e:
        fail("weight add", str(e), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "weight add",
            "data": {**entry.to_dict(), "prediction": prediction.to_dict()},
            "human_summary": f"Logged {weight:.1f} kg, next week: "
                             f"{prediction.predicted_weight} kg",
        })
    else:
        console.print(f"[green]Logged:[/green] {weight:.1f} kg on {measured_at} (week {entry.week_number})")
        console.print(
            f"[blue]Next week:[/blue] {prediction.predicted_weight} kg "
            f"({prediction.confidence}% confidence)"
        )


@weight_app.command("list")
def weight_list(
    user_key: str = typer.Argument(..., help="User key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List weigh-ins with their forecasts, newest first."""
    db = get_db()
    with db.get_connection() as conn:
        entries = WeightQueries.get_weight_entries(conn, user_key)

    if json_output:
        output_json({
            "success": True,
            "command": "weight list",
            "data": {"entries": [e.to_dict() for e in entries]},
            "human_summary": f"{len(entries)} weigh-ins",
        })
        return

    if not entries:
        console.print("No weight entries found")
        return

    table = Table(title=f"Weigh-ins for {user_key}")
    table.add_column("Date", style="cyan")
    table.add_column("Week", justify="right")
    table.add_column("Actual", justify="right")
    table.add_column("Predicted", justify="right", style="blue")
    table.add_column("Notes")

    for e in entries:
        table.add_row(
            e.entry_date.isoformat(),
            str(e.week_number),
            f"{e.actual_weight_kg:.1f}",
            f"{e.predicted_weight_kg:.1f}" if e.predicted_weight_kg is not None else "-",
            e.notes,
        )
    console.print(table)


if __name__ == "__main__":
    app()
