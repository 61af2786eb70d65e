"""Session commands: start, status, log-set, edit-set, delete-set, train, rest, discard, complete."""

import json
import time
from typing import Annotated, Optional

import typer

from ...core.models import DIFFICULTIES, PAIN_OPTIONS, CheckIn
from ...core.session import SessionEngine, SessionState
from ...core.tracker import Tracker
from ...io.serializers import workout_log_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, ProfileOption, app, get_tracker


def _require_session(tracker: Tracker) -> SessionEngine:
    session = tracker.session
    if session.active_log is None:
        views.print_error("No workout in progress.")
        views.print_info("Run 'start <workout>' first (see 'workouts').")
        raise typer.Exit(1)
    return session


def _check_difficulty(difficulty: str | None) -> None:
    if difficulty is not None and difficulty not in DIFFICULTIES:
        views.print_error(f"Difficulty must be one of {', '.join(DIFFICULTIES)}")
        raise typer.Exit(1)


def _set_id(session: SessionEngine, exercise_id: str, set_number: int) -> str:
    """Resolve 'exercise, 1-based set number' to the stored set id."""
    entries = session.active_log.sets_for(exercise_id)
    if not 1 <= set_number <= len(entries):
        views.print_error(
            f"{exercise_id} has {len(entries)} logged sets; set {set_number} does not exist"
        )
        raise typer.Exit(1)
    return entries[set_number - 1].id


def run_rest(session: SessionEngine, seconds: int | None = None) -> None:
    """
    Count down a rest period, one tick per second.

    Ctrl-C skips the rest of the countdown.
    """
    if not session.start_rest(seconds):
        return
    try:
        with views.console.status("") as status:
            while session.cursor.rest_seconds_remaining > 0:
                status.update(f"Rest: {session.cursor.rest_seconds_remaining}s  (Ctrl-C to skip)")
                time.sleep(1)
                session.tick_rest()
    except KeyboardInterrupt:
        views.print_info("Rest skipped.")
    session.skip_rest()


@app.command()
def start(
    workout: Annotated[str, typer.Argument(help="Workout id (see 'workouts')")],
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: today)"),
    ] = None,
) -> None:
    """
    Start a workout.
    """
    tracker = get_tracker(profile, data_dir)
    session = tracker.session
    if session.active_log is not None:
        views.print_error(f"Workout {session.active_log.id[:8]} is already in progress.")
        views.print_info("Finish it with 'complete' or drop it with 'discard'.")
        raise typer.Exit(1)
    if tracker.catalog.get_template(workout) is None:
        views.print_error(f"Unknown workout: {workout}")
        raise typer.Exit(1)

    try:
        log = session.start_workout(workout, date)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if log is None:
        views.print_error("Could not start the workout.")
        raise typer.Exit(1)

    views.print_success(f"Started {session.template.name} on {log.date}")
    views.print_session_status(session)


@app.command()
def status(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the workout in progress.
    """
    tracker = get_tracker(profile, data_dir)
    session = tracker.session

    if json_out:
        log = session.active_log
        cursor = session.cursor
        print(json.dumps({
            "state": session.state.value,
            "workout": workout_log_to_dict(log) if log is not None else None,
            "exercise_index": cursor.current_exercise_index if cursor else None,
            "set_index": cursor.current_set_index if cursor else None,
            "progress": round(session.progress(), 4),
        }, indent=2))
        return

    views.console.print()
    views.print_session_status(session)
    views.console.print()


@app.command("log-set")
def log_set(
    reps: Annotated[int, typer.Argument(help="Reps performed")],
    weight: Annotated[float, typer.Argument(help="Weight lifted")],
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Exercise id (default: the current exercise)"),
    ] = None,
    difficulty: Annotated[
        Optional[str],
        typer.Option("--difficulty", help="easy, ok or hard"),
    ] = None,
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a set of the workout in progress.
    """
    tracker = get_tracker(profile, data_dir)
    session = _require_session(tracker)
    _check_difficulty(difficulty)
    if reps <= 0 or weight <= 0:
        views.print_error("Reps and weight must be positive")
        raise typer.Exit(1)

    current = session.current_exercise()
    if exercise is None:
        if current is None:
            views.print_error("Every exercise is done; pass --exercise to log an extra set.")
            raise typer.Exit(1)
        exercise = current.exercise_id
    if session.template.exercise(exercise) is None:
        views.print_error(f"{exercise} is not part of {session.template.name}")
        raise typer.Exit(1)

    entry = session.log_set(exercise, reps, weight, difficulty)
    if entry is None:
        views.print_error("Set was not logged.")
        raise typer.Exit(1)
    if current is not None and current.exercise_id == exercise:
        session.next_set()

    views.print_success(
        f"Logged {session.catalog.exercise_name(exercise)} set {entry.set_number}: "
        f"{reps} x {weight:g}"
    )


@app.command("edit-set")
def edit_set(
    exercise: Annotated[str, typer.Argument(help="Exercise id")],
    set_number: Annotated[int, typer.Argument(help="Set number within the exercise")],
    reps: Annotated[int, typer.Argument(help="Corrected reps")],
    weight: Annotated[float, typer.Argument(help="Corrected weight")],
    difficulty: Annotated[
        Optional[str],
        typer.Option("--difficulty", help="easy, ok or hard"),
    ] = None,
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Correct a logged set.
    """
    tracker = get_tracker(profile, data_dir)
    session = _require_session(tracker)
    _check_difficulty(difficulty)
    set_id = _set_id(session, exercise, set_number)

    if not session.edit_set(set_id, reps, weight, difficulty):
        views.print_error("Reps and weight must be positive")
        raise typer.Exit(1)
    views.print_success(f"Updated {exercise} set {set_number}: {reps} x {weight:g}")


@app.command("delete-set")
def delete_set(
    exercise: Annotated[str, typer.Argument(help="Exercise id")],
    set_number: Annotated[int, typer.Argument(help="Set number within the exercise")],
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a logged set.
    """
    tracker = get_tracker(profile, data_dir)
    session = _require_session(tracker)
    set_id = _set_id(session, exercise, set_number)

    session.delete_set(set_id)
    views.print_success(f"Deleted {exercise} set {set_number}")


@app.command()
def rest(
    seconds: Annotated[
        Optional[int],
        typer.Option("--seconds", "-s", help="Rest length (default from config)"),
    ] = None,
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Run the rest timer. Ctrl-C skips it.
    """
    tracker = get_tracker(profile, data_dir)
    session = _require_session(tracker)
    if seconds is not None and seconds <= 0:
        views.print_error("Rest must be at least one second")
        raise typer.Exit(1)
    run_rest(session, seconds)


def _train_prompt(session: SessionEngine) -> str:
    exercise = session.current_exercise()
    reps, weight = session.suggested_input()
    return (
        f"{exercise.name} set {session.cursor.current_set_index + 1}/{exercise.sets} "
        f"[{reps} x {weight:g}]: "
    )


@app.command()
def train(
    rest_seconds: Annotated[
        Optional[int],
        typer.Option("--rest", "-r", help="Rest between sets in seconds (0 = no timer)"),
    ] = None,
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Work through the current workout set by set.

    At each prompt press Enter to log the suggested set, or type
    "reps weight [easy|ok|hard]".  "j N" jumps to exercise N, "n" skips
    to the next set, "p" pauses.
    """
    tracker = get_tracker(profile, data_dir)
    session = _require_session(tracker)
    views.print_session_status(session)

    while session.state != SessionState.FINISHED:
        raw = views.console.input(_train_prompt(session)).strip().lower()

        if raw in ("p", "q"):
            session.pause_workout()
            views.print_info("Paused. Run 'train' again to continue.")
            return
        if raw == "n":
            session.next_set()
            continue
        if raw.startswith("j"):
            try:
                index = int(raw[1:].strip()) - 1
            except ValueError:
                views.print_error("Usage: j <exercise number>")
                continue
            if not session.jump_to_exercise(index):
                views.print_error(f"Exercise number must be 1-{len(session.template.exercises)}")
            continue

        if raw:
            parts = raw.split()
            try:
                reps, weight = int(parts[0]), float(parts[1])
            except (IndexError, ValueError):
                views.print_error("Enter 'reps weight', e.g. 8 135")
                continue
            difficulty = parts[2] if len(parts) > 2 else None
        else:
            reps, weight = session.suggested_input()
            difficulty = None

        exercise = session.current_exercise()
        entry = session.log_set(exercise.exercise_id, reps, weight, difficulty)
        if entry is None:
            views.print_error("Reps and weight must be positive; difficulty easy, ok or hard.")
            continue
        session.next_set()
        if session.state != SessionState.FINISHED and rest_seconds != 0:
            run_rest(session, rest_seconds)

    views.print_success("All sets done. Run 'complete' to finish the workout.")


@app.command()
def discard(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Throw away the workout in progress.
    """
    tracker = get_tracker(profile, data_dir)
    session = _require_session(tracker)
    sets = len(session.active_log.set_entries)

    if not force and not views.confirm_action(f"Discard this workout ({sets} sets logged)?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    session.discard_workout()
    views.print_success("Workout discarded.")


@app.command()
def complete(
    notes: Annotated[str, typer.Option("--notes", "-n", help="Workout notes")] = "",
    fatigue: Annotated[Optional[int], typer.Option(help="Check-in: fatigue 1-5")] = None,
    difficulty: Annotated[Optional[int], typer.Option(help="Check-in: difficulty 1-5")] = None,
    recovery: Annotated[Optional[int], typer.Option(help="Check-in: recovery 1-5")] = None,
    sleep: Annotated[Optional[int], typer.Option(help="Check-in: sleep quality 1-5")] = None,
    motivation: Annotated[Optional[int], typer.Option(help="Check-in: motivation 1-5")] = None,
    pain: Annotated[
        Optional[str],
        typer.Option(help=f"Check-in: pain ({', '.join(PAIN_OPTIONS)})"),
    ] = None,
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Finish the workout in progress and collect rewards.
    """
    tracker = get_tracker(profile, data_dir)
    session = _require_session(tracker)
    if session.state != SessionState.FINISHED:
        remaining = session.template.total_sets - len(session.active_log.set_entries)
        views.print_error(f"Workout is not finished yet ({max(remaining, 1)} sets to go).")
        raise typer.Exit(1)

    check_in = None
    ratings = (fatigue, difficulty, recovery, sleep, motivation, pain)
    if any(r is not None for r in ratings):
        try:
            check_in = CheckIn(
                fatigue=fatigue if fatigue is not None else 3,
                difficulty=difficulty if difficulty is not None else 3,
                recovery=recovery if recovery is not None else 3,
                sleep_quality=sleep if sleep is not None else 3,
                motivation=motivation if motivation is not None else 3,
                pain=pain or "none",
            )
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

    log = session.active_log
    summary = tracker.complete_workout(check_in=check_in, notes=notes)
    if summary is None:
        views.print_error("Could not complete the workout.")
        raise typer.Exit(1)

    views.print_success(
        f"Workout complete: {len(log.set_entries)} sets, volume {log.total_volume:,.0f}, "
        f"{log.duration_minutes} min, +{summary.xp_earned} XP"
    )
    views.console.print(f"Streak: {summary.streak} days")
