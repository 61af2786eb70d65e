"""Analysis commands: history, delete-workout, stats, prs."""

import json
from typing import Annotated, Optional

import typer

from ...io.serializers import personal_record_to_dict, stats_to_dict, workout_log_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, ProfileOption, app, get_tracker


@app.command()
def history(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Show only the most recent N workouts"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show completed workouts, most recent first.
    """
    tracker = get_tracker(profile, data_dir)
    logs = tracker.history()
    if limit is not None:
        logs = logs[:limit]

    if json_out:
        print(json.dumps([workout_log_to_dict(log) for log in logs], indent=2))
        return
    if not logs:
        views.print_info("No completed workouts yet.")
        return
    views.console.print(views.format_history_table(logs, tracker.catalog))


@app.command("delete-workout")
def delete_workout(
    record_id: Annotated[
        int,
        typer.Argument(help="Workout number to delete (see # column in history)"),
    ],
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Delete a completed workout and recalculate XP, level, streak and records.

    Use 'history' to see workout numbers in the # column.
    """
    tracker = get_tracker(profile, data_dir)
    logs = tracker.history()
    if not logs:
        views.print_error("No completed workouts.")
        raise typer.Exit(1)
    if record_id < 1 or record_id > len(logs):
        views.print_error(f"Workout number must be between 1 and {len(logs)}")
        raise typer.Exit(1)

    target = logs[record_id - 1]
    template = tracker.catalog.get_template(target.template_id)
    name = template.name if template is not None else target.template_id
    views.console.print(
        f"Workout to delete: [bold]{target.date}[/bold] ({name}, {len(target.set_entries)} sets)"
    )
    if not force and not views.confirm_action("Delete this workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    if not tracker.delete_workout(target.id):
        views.print_error("Could not delete the workout.")
        raise typer.Exit(1)

    stats = tracker.stats.stats
    views.print_success(f"Deleted workout #{record_id}: {target.date}")
    views.console.print(
        f"Recalculated: {stats.experience_points} XP, level {stats.level}, "
        f"streak {stats.current_streak_days} days"
    )


@app.command()
def stats(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show level, XP, streak and this week's totals.
    """
    tracker = get_tracker(profile, data_dir)
    current = tracker.stats.stats
    info = tracker.level_info()
    week = tracker.weekly_summary()

    if json_out:
        data = stats_to_dict(current)
        data.update({
            "title": info.title,
            "level_progress_pct": round(info.progress_pct, 2),
            "workouts_completed": len(tracker.history()),
            "this_week": {"workouts": week.workouts, "sets": week.sets, "volume": week.volume},
        })
        print(json.dumps(data, indent=2))
        return

    views.print_stats(current, info, week, len(tracker.history()))


@app.command()
def prs(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show personal records (best estimated 1RM per exercise).
    """
    tracker = get_tracker(profile, data_dir)
    records = tracker.stats.records

    if json_out:
        print(json.dumps([personal_record_to_dict(r) for r in records], indent=2))
        return
    if not records:
        views.print_info("No personal records yet.")
        return
    views.console.print(views.format_records_table(records))
