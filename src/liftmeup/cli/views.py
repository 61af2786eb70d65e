"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workouts, stats and quests.
"""

from rich.console import Console
from rich.table import Table

from ..core.catalog import WorkoutCatalog
from ..core.events import (
    Event,
    ExperienceEarned,
    PersonalRecordBeaten,
    QuestCompleted,
    RestFinished,
    WorkoutCompleted,
)
from ..core.models import (
    LevelInfo,
    PersonalRecord,
    Profile,
    Quest,
    UserProfileStats,
    WeeklySummary,
    WorkoutLog,
    WorkoutTemplate,
)
from ..core.session import SessionEngine, SessionState

console = Console()
err_console = Console(stderr=True)

_STATUS_MARK = {
    "not-started": "[dim]·[/dim]",
    "in-progress": "[yellow]▶[/yellow]",
    "completed": "[green]✓[/green]",
}


def _fmt_weight(weight: float) -> str:
    return f"{weight:g}"


def print_event(event: Event) -> None:
    """Event sink for the CLI: one line per reward or milestone."""
    if isinstance(event, ExperienceEarned):
        console.print(f"[magenta]+{event.amount} XP[/magenta] [dim]({event.reason})[/dim]")
        if event.leveled_up:
            console.print(f"[bold magenta]Level up! You are now level {event.level}[/bold magenta]")
    elif isinstance(event, PersonalRecordBeaten):
        r = event.record
        console.print(
            f"[bold yellow]New PR[/bold yellow] {r.exercise_name}: "
            f"{r.reps} x {_fmt_weight(r.weight)} (est. 1RM {r.estimated_1rm:.1f})"
        )
    elif isinstance(event, QuestCompleted):
        console.print(f"[bold green]Quest complete:[/bold green] {event.quest.name}")
    elif isinstance(event, RestFinished):
        console.print("[bold]Rest complete![/bold]")
    elif isinstance(event, WorkoutCompleted) and event.beat_previous_volume:
        console.print("[green]You beat your last volume for this workout.[/green]")


def format_templates_table(templates: list[WorkoutTemplate]) -> Table:
    table = Table(title="Workouts")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Exercises")
    table.add_column("Sets", justify="right")

    for t in templates:
        table.add_row(
            t.template_id,
            t.name,
            ", ".join(e.name for e in t.exercises),
            str(t.total_sets),
        )
    return table


def print_session_status(session: SessionEngine) -> None:
    """
    Print the active workout: per-exercise progress and the next set.

    Args:
        session: Session engine with an active workout
    """
    template = session.template
    log = session.active_log
    if template is None or log is None:
        print_info("No workout in progress.")
        return

    console.print(
        f"[bold]{template.name}[/bold]  {log.date}  "
        f"volume {log.total_volume:,.0f} {template.exercises[0].unit}  "
        f"({session.progress():.0%})"
    )

    table = Table(show_header=True)
    table.add_column("#", justify="right")
    table.add_column("")
    table.add_column("Exercise")
    table.add_column("Sets", justify="right")
    table.add_column("Logged")
    for i, exercise in enumerate(template.exercises):
        entries = log.sets_for(exercise.exercise_id)
        logged = ", ".join(
            f"{e.actual_reps}x{_fmt_weight(e.weight)}" for e in entries
        )
        table.add_row(
            str(i + 1),
            _STATUS_MARK[session.exercise_status(i)],
            exercise.name,
            f"{len(entries)}/{exercise.sets}",
            logged,
        )
    console.print(table)

    state = session.state
    if state == SessionState.FINISHED:
        print_success("All sets done. Run 'complete' to finish the workout.")
        return
    if state == SessionState.RESTING:
        console.print(f"Resting: {session.cursor.rest_seconds_remaining}s left")

    exercise = session.current_exercise()
    if exercise is not None:
        reps, weight = session.suggested_input()
        console.print(
            f"Next: [cyan]{exercise.name}[/cyan] set {session.cursor.current_set_index + 1}"
            f"/{exercise.sets}  suggested {reps} x {_fmt_weight(weight)} {exercise.unit}"
        )


def format_history_table(logs: list[WorkoutLog], catalog: WorkoutCatalog) -> Table:
    table = Table(title="Workout History")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Workout")
    table.add_column("Sets", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("ID", style="dim")

    for i, log in enumerate(logs, 1):
        template = catalog.get_template(log.template_id)
        table.add_row(
            str(i),
            log.date,
            template.name if template is not None else log.template_id,
            str(len(log.set_entries)),
            f"{log.total_volume:,.0f}",
            str(log.duration_minutes),
            log.id[:8],
        )
    return table


def print_stats(
    stats: UserProfileStats,
    info: LevelInfo,
    week: WeeklySummary,
    total_workouts: int,
) -> None:
    console.print()
    console.print(f"[bold]Level {info.level}[/bold] {info.title}  ({stats.experience_points} XP)")
    if info.xp_for_next_level > 0:
        filled = int(info.progress_pct / 5)
        bar = "█" * filled + "░" * (20 - filled)
        console.print(
            f"  {bar} {info.xp_into_level}/{info.xp_for_next_level} XP to next level"
        )
    else:
        console.print("  Max level reached")
    console.print(
        f"Streak: [bold]{stats.current_streak_days}[/bold] days"
        f"  (longest {stats.longest_streak_days})"
    )
    console.print(f"Last workout: {stats.last_workout_date or '-'}")
    console.print(f"Workouts completed: {total_workouts}")
    console.print(
        f"This week: {week.workouts} workouts, {week.sets} sets, {week.volume:,.0f} volume"
    )
    console.print()


def format_records_table(records: list[PersonalRecord]) -> Table:
    table = Table(title="Personal Records")
    table.add_column("Exercise")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Est. 1RM", justify="right", style="bold")
    table.add_column("Date", style="cyan")

    for r in sorted(records, key=lambda r: r.exercise_name):
        table.add_row(
            r.exercise_name,
            _fmt_weight(r.weight),
            str(r.reps),
            f"{r.estimated_1rm:.1f}",
            r.date,
        )
    return table


def format_quests_table(quests: list[Quest]) -> Table:
    table = Table(title="Weekly Quests")
    table.add_column("")
    table.add_column("Quest")
    table.add_column("Progress", justify="right")
    table.add_column("XP", justify="right")
    table.add_column("Ends", style="cyan")

    for q in quests:
        mark = "[green]✓[/green]" if q.is_complete else ""
        table.add_row(
            mark,
            f"{q.name}\n[dim]{q.description}[/dim]",
            f"{q.current:g}/{q.target}",
            str(q.xp_reward),
            q.end_date,
        )
    return table


def format_profiles_table(profiles: list[Profile]) -> Table:
    table = Table(title="Profiles")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Created")
    table.add_column("Last used")
    for p in profiles:
        table.add_row(p.id, p.name, p.created_at[:10], p.last_accessed_at[:10])
    return table


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} \\[y/N]: ")
    return response.lower() in ("y", "yes")
