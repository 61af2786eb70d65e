"""Planning commands: workouts, create-workout, suggest, quests."""

import json
import re
from typing import Annotated, Optional

import typer

from ...core.catalog import get_catalog, save_user_template
from ...core.catalog.loader import get_user_workouts_dir
from ...core.models import ExerciseTemplate, WorkoutTemplate
from ...io.serializers import quest_to_dict
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    ProfileOption,
    app,
    data_root,
    get_tracker,
    load_catalog,
)

EXERCISE_FORMAT = "id:Name:sets:reps_lo-reps_hi:weight_lo-weight_hi[:unit]"
_WORKOUT_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


def _range(text: str, cast) -> tuple:
    lo, sep, hi = text.partition("-")
    if not sep:
        return (cast(lo), cast(lo))
    return (cast(lo), cast(hi))


def parse_exercise(text: str) -> ExerciseTemplate:
    """
    Parse one --exercise value, e.g. ``bench_press:Bench Press:4:6-10:95-185``.

    A single number is accepted for either range (``dips:Dips:3:10:0``).

    Raises:
        ValueError: If the value does not match EXERCISE_FORMAT
    """
    parts = [p.strip() for p in text.split(":")]
    if len(parts) not in (5, 6):
        raise ValueError(f"expected {EXERCISE_FORMAT}, got {text!r}")
    exercise_id, name, sets, reps, weights = parts[:5]
    return ExerciseTemplate(
        exercise_id=exercise_id,
        name=name or exercise_id,
        sets=int(sets),
        rep_range=_range(reps, int),
        weight_range=_range(weights, float),
        unit=parts[5] if len(parts) == 6 else "lbs",
    )


@app.command()
def workouts(data_dir: DataDirOption = None, json_out: JsonOption = False) -> None:
    """
    List the available workouts.
    """
    catalog = load_catalog(data_dir)
    if json_out:
        print(json.dumps([
            {
                "id": t.template_id,
                "name": t.name,
                "exercises": [
                    {"id": e.exercise_id, "name": e.name, "sets": e.sets}
                    for e in t.exercises
                ],
            }
            for t in catalog.templates()
        ], indent=2))
        return
    views.console.print(views.format_templates_table(catalog.templates()))


@app.command("create-workout")
def create_workout(
    name: Annotated[str, typer.Argument(help="Workout name, e.g. 'Arm Day'")],
    exercises: Annotated[
        list[str],
        typer.Option("--exercise", "-e", help=f"Exercise as {EXERCISE_FORMAT} (repeatable, in order)"),
    ],
    workout_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Workout id (default: derived from the name)"),
    ] = None,
    description: Annotated[
        str,
        typer.Option("--description", "-d", help="Short description"),
    ] = "",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace an existing workout with the same id"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Save a custom workout to <data dir>/workouts/.
    """
    root = data_root(data_dir)
    template_id = workout_id or _slug(name)
    if not _WORKOUT_ID_RE.match(template_id):
        views.print_error(f"Invalid workout id: {template_id!r} (letters, digits, _ and - only)")
        raise typer.Exit(1)
    try:
        template = WorkoutTemplate(
            template_id=template_id,
            name=name.strip() or template_id,
            description=description,
            exercises=tuple(parse_exercise(e) for e in exercises),
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if template_id in load_catalog(data_dir) and not force:
        views.print_error(f"Workout {template_id!r} already exists (use --force to replace it).")
        raise typer.Exit(1)

    try:
        path = save_user_template(template, get_user_workouts_dir(root))
    except OSError as e:
        views.print_error(f"Could not save workout: {e}")
        raise typer.Exit(1)
    get_catalog(reload=True, root=root)

    views.print_success(f"Saved {template.name} ({template_id}, {template.total_sets} sets) to {path}")
    views.print_info(f"Run 'liftmeup start {template_id}' to begin.")


@app.command()
def suggest(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Suggest the next workout (a different one from last time).
    """
    tracker = get_tracker(profile, data_dir)
    template_id = tracker.suggest_next()
    if template_id is None:
        views.print_info("No workouts available.")
        return
    template = tracker.catalog.get_template(template_id)
    views.console.print(f"Suggested: [bold cyan]{template.name}[/bold cyan] ({template_id})")
    views.print_info(f"Run 'liftmeup start {template_id}' to begin.")


@app.command()
def quests(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show this week's quests.
    """
    tracker = get_tracker(profile, data_dir)
    if json_out:
        print(json.dumps([quest_to_dict(q) for q in tracker.quests], indent=2))
        return
    views.console.print(views.format_quests_table(tracker.quests))
