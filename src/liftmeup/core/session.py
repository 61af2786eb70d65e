"""
Session engine: the state machine of one in-progress workout.

A profile has at most one incomplete WorkoutLog at a time.  While it is
being trained the engine also holds a SessionCursor pointing at the next
set.  Every operation is a synchronous transition; operations that do not
apply (no active session, unknown set id, workout not finished yet, ...)
leave the state untouched and report it through their return value
instead of raising.
"""

import logging
import math
import uuid
from dataclasses import replace
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable

from .config import DEFAULT_GAME_CONFIG, DEFAULT_PROFILE_ID, MAX_REST_SECONDS, GameConfig
from .cursor import advance_cursor, derive_cursor, exercise_status, is_finished, logged_counts
from .events import EventSink, RestFinished, SetLogged, WorkoutCompleted, null_sink
from .models import (
    CheckIn,
    Difficulty,
    ExerciseStatus,
    ExerciseTemplate,
    SessionCursor,
    SetEntry,
    WorkoutLog,
    WorkoutTemplate,
    validate_difficulty,
)
from .ports import CatalogReader, Clock, LogStore, PersistenceError, SystemClock
from .stats import CompletionSummary, StatsEngine, last_log_of_template

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    EXERCISING = "exercising"
    RESTING = "resting"
    FINISHED = "finished"


def _new_id() -> str:
    return str(uuid.uuid4())


class SessionEngine:
    """
    Owns the profile's workout log collection and the active session.

    The engine writes the full log collection to the log store after each
    mutation.  A failed write is logged and otherwise ignored: the
    in-memory transition has already happened.
    """

    def __init__(
        self,
        logs: Iterable[WorkoutLog],
        *,
        catalog: CatalogReader,
        stats: StatsEngine,
        profile_id: str = DEFAULT_PROFILE_ID,
        config: GameConfig = DEFAULT_GAME_CONFIG,
        clock: Clock | None = None,
        sink: EventSink = null_sink,
        log_store: LogStore | None = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self._logs: list[WorkoutLog] = list(logs)
        self._cursor: SessionCursor | None = None
        self.catalog = catalog
        self.stats = stats
        self.profile_id = profile_id
        self.config = config
        self.clock = clock or SystemClock()
        self.sink = sink
        self.log_store = log_store
        self._new_id = id_factory

    # ── read access ─────────────────────────────────────────────────────────

    @property
    def logs(self) -> list[WorkoutLog]:
        return list(self._logs)

    @property
    def cursor(self) -> SessionCursor | None:
        return self._cursor

    @property
    def active_log(self) -> WorkoutLog | None:
        return self._cursor.workout_log if self._cursor is not None else None

    @property
    def template(self) -> WorkoutTemplate | None:
        if self._cursor is None:
            return None
        return self.catalog.get_template(self._cursor.workout_log.template_id)

    @property
    def state(self) -> SessionState:
        if self._cursor is None:
            return SessionState.IDLE
        if self._cursor.is_resting:
            return SessionState.RESTING
        template = self.template
        if template is not None and is_finished(template, self._cursor.current_exercise_index):
            return SessionState.FINISHED
        return SessionState.EXERCISING

    def incomplete_log(self) -> WorkoutLog | None:
        """The profile's resumable workout, if any."""
        for log in self._logs:
            if not log.is_complete:
                return log
        return None

    def find_log(self, log_id: str) -> WorkoutLog | None:
        for log in self._logs:
            if log.id == log_id:
                return log
        return None

    def current_exercise(self) -> ExerciseTemplate | None:
        template = self.template
        if template is None or is_finished(template, self._cursor.current_exercise_index):
            return None
        return template.exercises[self._cursor.current_exercise_index]

    def progress(self) -> float:
        """Logged sets over the template's total target sets, capped at 1."""
        template = self.template
        if template is None:
            return 0.0
        done = len(self._cursor.workout_log.set_entries)
        return min(1.0, done / template.total_sets)

    def exercise_status(self, exercise_index: int) -> ExerciseStatus | None:
        template = self.template
        if template is None or not 0 <= exercise_index < len(template.exercises):
            return None
        return exercise_status(template, self._cursor.workout_log.set_entries, exercise_index)

    def suggested_input(
        self,
        exercise_index: int | None = None,
        set_index: int | None = None,
    ) -> tuple[int, float] | None:
        """
        Reps and weight to pre-fill for a set.

        Uses the same set of the last completed workout of this template when
        there is one, else the midpoints of the template's ranges.
        """
        template = self.template
        if template is None:
            return None
        if exercise_index is None:
            exercise_index = self._cursor.current_exercise_index
        if set_index is None:
            set_index = self._cursor.current_set_index
        if not 0 <= exercise_index < len(template.exercises):
            return None

        exercise = template.exercises[exercise_index]
        previous = last_log_of_template(self._logs, template.template_id)
        if previous is not None:
            for entry in previous.set_entries:
                if entry.exercise_id == exercise.exercise_id and entry.set_number == set_index + 1:
                    return entry.actual_reps, entry.weight
        return exercise.default_reps(), exercise.default_weight()

    # ── persistence ─────────────────────────────────────────────────────────

    def _save_logs(self) -> None:
        if self.log_store is None:
            return
        try:
            self.log_store.save_all_logs(self.profile_id, list(self._logs))
        except PersistenceError as e:
            logger.warning("Could not save workout logs for profile %s: %s", self.profile_id, e)

    def _set_position(self, exercise_index: int, set_index: int) -> None:
        self._cursor = replace(
            self._cursor,
            current_exercise_index=exercise_index,
            current_set_index=set_index,
            is_resting=False,
            rest_seconds_remaining=0,
        )

    # ── lifecycle ───────────────────────────────────────────────────────────

    def start_workout(self, template_id: str, on_date: str | date | None = None) -> WorkoutLog | None:
        """
        Begin a new workout.

        Rejected while any incomplete workout exists (resume or discard it
        first) or when the template is unknown.

        Returns:
            The new WorkoutLog, or None if the start was rejected

        Raises:
            ValueError: If on_date is not a valid YYYY-MM-DD date
        """
        existing = self.incomplete_log()
        if existing is not None:
            logger.warning(
                "Cannot start %s: workout %s is still in progress", template_id, existing.id
            )
            return None
        template = self.catalog.get_template(template_id)
        if template is None:
            logger.warning("Cannot start workout: unknown template %r", template_id)
            return None

        now = self.clock.now()
        if on_date is None:
            on_date = now.date()
        log = WorkoutLog(
            id=self._new_id(),
            date=on_date.isoformat() if isinstance(on_date, date) else on_date,
            template_id=template_id,
            start_time=now.isoformat(),
        )
        self._logs.append(log)
        exercise_index, set_index = derive_cursor(template, log.set_entries)
        self._cursor = SessionCursor(
            workout_log=log,
            current_exercise_index=exercise_index,
            current_set_index=set_index,
        )
        self._save_logs()
        logger.info("Started workout %s (%s) on %s", log.id, template.name, log.date)
        return log

    def resume_workout(self, log: WorkoutLog | None = None) -> bool:
        """
        Reattach to an incomplete workout, rebuilding the cursor from its sets.

        Args:
            log: The workout to resume; defaults to the profile's incomplete log

        Returns:
            True if a session is now active
        """
        if self._cursor is not None:
            logger.debug("resume_workout ignored: a session is already active")
            return False
        if log is None:
            log = self.incomplete_log()
            if log is None:
                return False
        if log.is_complete:
            logger.debug("resume_workout ignored: workout %s is complete", log.id)
            return False
        other = self.incomplete_log()
        if other is not None and other.id != log.id:
            logger.warning("Cannot resume %s: workout %s is in progress", log.id, other.id)
            return False
        template = self.catalog.get_template(log.template_id)
        if template is None:
            logger.warning("Cannot resume %s: unknown template %r", log.id, log.template_id)
            return False

        if self.find_log(log.id) is None:
            self._logs.append(log)
            self._save_logs()
        else:
            log = self.find_log(log.id)
        exercise_index, set_index = derive_cursor(template, log.set_entries)
        self._cursor = SessionCursor(
            workout_log=log,
            current_exercise_index=exercise_index,
            current_set_index=set_index,
        )
        return True

    def pause_workout(self) -> bool:
        """Leave the session; the workout stays in history and can be resumed."""
        if self._cursor is None:
            return False
        self._save_logs()
        self._cursor = None
        return True

    def discard_workout(self) -> bool:
        """Delete the active workout from history. Cannot be undone."""
        if self._cursor is None:
            return False
        log_id = self._cursor.workout_log.id
        self._logs = [log for log in self._logs if log.id != log_id]
        self._cursor = None
        self._save_logs()
        logger.info("Discarded workout %s", log_id)
        return True

    def complete_workout(
        self,
        check_in: CheckIn | None = None,
        notes: str = "",
    ) -> CompletionSummary | None:
        """
        Finish the workout and hand it to the statistics engine.

        Only allowed once every exercise has reached its target set count
        (the cursor is past the last exercise).

        Returns:
            CompletionSummary, or None if completion was rejected
        """
        template = self.template
        if template is None:
            return None
        if not is_finished(template, self._cursor.current_exercise_index):
            logger.warning(
                "Cannot complete workout %s: exercise %d of %d still open",
                self._cursor.workout_log.id,
                self._cursor.current_exercise_index + 1,
                len(template.exercises),
            )
            return None

        log = self._cursor.workout_log
        end = self.clock.now()
        start = datetime.fromisoformat(log.start_time)
        minutes = (end - start).total_seconds() / 60
        log.end_time = end.isoformat()
        log.duration_minutes = max(0, math.floor(minutes + 0.5))
        log.is_complete = True
        log.check_in = check_in
        log.notes = notes
        self._cursor = None
        self._save_logs()

        summary = self.stats.record_completion(log, self._logs)
        logger.info(
            "Completed workout %s: %d sets, volume %.0f, +%d XP",
            log.id,
            len(log.set_entries),
            log.total_volume,
            summary.xp_earned,
        )
        self.sink(
            WorkoutCompleted(
                log=log,
                xp_earned=summary.xp_earned,
                beat_previous_volume=summary.beat_previous_volume,
            )
        )
        return summary

    def remove_log(self, log_id: str) -> WorkoutLog | None:
        """
        Drop a workout from history (not the active one; discard that instead).

        Statistics are not touched here; see Tracker.delete_workout.
        """
        if self._cursor is not None and self._cursor.workout_log.id == log_id:
            logger.warning("Refusing to remove active workout %s; discard it instead", log_id)
            return None
        removed = self.find_log(log_id)
        if removed is None:
            return None
        self._logs = [log for log in self._logs if log.id != log_id]
        self._save_logs()
        return removed

    # ── sets ────────────────────────────────────────────────────────────────

    def log_set(
        self,
        exercise_id: str,
        reps: int,
        weight: float,
        difficulty: Difficulty = None,
    ) -> SetEntry | None:
        """
        Record a set and add its volume to the workout.

        Awards set XP, checks the exercise's personal record, and awards the
        exercise bonus when this set reaches the target set count.  The cursor
        is not moved; call next_set() when the lifter moves on.

        Returns:
            The new SetEntry, or None if nothing was logged
        """
        template = self.template
        if template is None:
            return None
        exercise = template.exercise(exercise_id)
        if exercise is None:
            logger.warning("log_set ignored: %r is not part of %s", exercise_id, template.template_id)
            return None
        if reps <= 0 or weight <= 0:
            logger.debug("log_set ignored: reps=%s weight=%s", reps, weight)
            return None
        try:
            validate_difficulty(difficulty)
        except ValueError as e:
            logger.debug("log_set ignored: %s", e)
            return None

        log = self._cursor.workout_log
        count = len(log.sets_for(exercise_id))
        entry = SetEntry(
            id=self._new_id(),
            exercise_id=exercise_id,
            set_number=count + 1,
            actual_reps=reps,
            weight=weight,
            difficulty=difficulty,
            timestamp=self.clock.now().isoformat(),
        )
        log.set_entries.append(entry)
        log.total_volume = log.recomputed_volume()
        self._save_logs()

        is_last = entry.set_number == exercise.sets
        self.sink(SetLogged(entry=entry, is_last_set_of_exercise=is_last))

        self.stats.award_experience(self.config.reward("complete_set"), "complete_set")
        if self.stats.check_personal_record(exercise_id, weight, reps, log.date) is not None:
            self.stats.award_experience(self.config.reward("new_pr"), "new_pr")
        if is_last:
            self.stats.award_experience(
                self.config.reward("complete_exercise"), "complete_exercise"
            )
        return entry

    def edit_set(
        self,
        set_id: str,
        reps: int,
        weight: float,
        difficulty: Difficulty = None,
    ) -> bool:
        """Change a logged set, swapping its old volume for the new one."""
        if self._cursor is None:
            return False
        log = self._cursor.workout_log
        entry = log.find_set(set_id)
        if entry is None:
            logger.debug("edit_set ignored: no set %s", set_id)
            return False
        if reps <= 0 or weight <= 0:
            return False
        try:
            validate_difficulty(difficulty)
        except ValueError:
            return False

        entry.actual_reps = reps
        entry.weight = weight
        entry.difficulty = difficulty
        log.total_volume = log.recomputed_volume()
        self._save_logs()
        return True

    def delete_set(self, set_id: str) -> bool:
        """
        Remove a logged set.

        The cursor is rebuilt from the remaining sets, since deleting can
        move the position back into an earlier exercise.  Resting ends.
        """
        if self._cursor is None:
            return False
        log = self._cursor.workout_log
        entry = log.find_set(set_id)
        if entry is None:
            logger.debug("delete_set ignored: no set %s", set_id)
            return False

        log.set_entries = [e for e in log.set_entries if e.id != set_id]
        log.total_volume = log.recomputed_volume()
        template = self.template
        if template is not None:
            self._set_position(*derive_cursor(template, log.set_entries))
        else:
            self._cursor = replace(self._cursor, is_resting=False, rest_seconds_remaining=0)
        self._save_logs()
        return True

    # ── navigation ──────────────────────────────────────────────────────────

    def next_set(self) -> bool:
        """
        Step to the next set, rolling over to the next exercise at its target.

        Forward-only; use after finishing a set in template order.
        """
        template = self.template
        if template is None or is_finished(template, self._cursor.current_exercise_index):
            return False
        self._set_position(
            *advance_cursor(
                template,
                self._cursor.current_exercise_index,
                self._cursor.current_set_index,
            )
        )
        return True

    def jump_to_exercise(self, exercise_index: int) -> bool:
        """Move to an exercise out of order; the set index is its logged count."""
        template = self.template
        if template is None or not 0 <= exercise_index < len(template.exercises):
            return False
        exercise = template.exercises[exercise_index]
        done = logged_counts(self._cursor.workout_log.set_entries).get(exercise.exercise_id, 0)
        self._set_position(exercise_index, done)
        return True

    # ── rest timer ──────────────────────────────────────────────────────────

    def start_rest(self, seconds: int | None = None) -> bool:
        """Start the rest countdown (default length from the game config)."""
        if self._cursor is None:
            return False
        if seconds is None:
            seconds = self.config.default_rest_seconds
        if not 0 < seconds <= MAX_REST_SECONDS:
            logger.debug("start_rest ignored: %s seconds", seconds)
            return False
        self._cursor = replace(self._cursor, is_resting=True, rest_seconds_remaining=seconds)
        return True

    def tick_rest(self) -> bool:
        """One second of rest elapsed. Emits RestFinished when it reaches zero."""
        if self._cursor is None or not self._cursor.is_resting:
            return False
        before = self._cursor.rest_seconds_remaining
        remaining = max(0, before - 1)
        self._cursor = replace(self._cursor, rest_seconds_remaining=remaining)
        if before > 0 and remaining == 0:
            self.sink(RestFinished())
        return True

    def skip_rest(self) -> bool:
        """End the rest early (or acknowledge a finished countdown)."""
        if self._cursor is None:
            return False
        self._cursor = replace(self._cursor, is_resting=False, rest_seconds_remaining=0)
        return True
