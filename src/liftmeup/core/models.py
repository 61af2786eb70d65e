"""
Data models for liftmeup.

All core dataclasses representing workout templates, logged workouts,
the in-progress session cursor, and derived profile statistics.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Difficulty = Literal["easy", "ok", "hard"] | None
Pain = Literal["none", "knee", "shoulder", "back", "other"]
QuestType = Literal["workouts", "sets", "volume", "streak", "variety"]
ExerciseStatus = Literal["not-started", "in-progress", "completed"]

DIFFICULTIES: tuple[str, ...] = ("easy", "ok", "hard")
PAIN_OPTIONS: tuple[str, ...] = ("none", "knee", "shoulder", "back", "other")
QUEST_TYPES: tuple[str, ...] = ("workouts", "sets", "volume", "streak", "variety")


def validate_iso_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


def validate_difficulty(difficulty: str | None) -> None:
    if difficulty is not None and difficulty not in DIFFICULTIES:
        raise ValueError(
            f"Invalid difficulty: {difficulty!r}. Must be one of {DIFFICULTIES} or None"
        )


@dataclass(frozen=True)
class ExerciseTemplate:
    """
    One exercise inside a workout template.

    ``sets`` is the target set count; the session engine counts logged
    sets against it and never keeps a separate counter.
    """

    exercise_id: str
    name: str
    sets: int
    rep_range: tuple[int, int]
    weight_range: tuple[float, float]
    unit: str = "lbs"

    def __post_init__(self) -> None:
        """Validate template data."""
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.sets < 1:
            raise ValueError("sets must be at least 1")
        lo, hi = self.rep_range
        if lo < 0 or hi < lo:
            raise ValueError(f"Invalid rep_range: {self.rep_range}")
        wlo, whi = self.weight_range
        if wlo < 0 or whi < wlo:
            raise ValueError(f"Invalid weight_range: {self.weight_range}")

    def default_reps(self) -> int:
        """Midpoint of the rep range, used to pre-fill a set with no history."""
        return round((self.rep_range[0] + self.rep_range[1]) / 2)

    def default_weight(self) -> float:
        """Midpoint of the weight range, used to pre-fill a set with no history."""
        return float(round((self.weight_range[0] + self.weight_range[1]) / 2))


@dataclass(frozen=True)
class WorkoutTemplate:
    """
    A static workout definition: an ordered list of exercises.
    """

    template_id: str
    name: str
    exercises: tuple[ExerciseTemplate, ...]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.template_id:
            raise ValueError("template_id must be non-empty")
        if not self.exercises:
            raise ValueError(f"Workout {self.template_id!r} has no exercises")
        ids = [e.exercise_id for e in self.exercises]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Workout {self.template_id!r} repeats an exercise id")

    @property
    def total_sets(self) -> int:
        """Sum of target sets over all exercises."""
        return sum(e.sets for e in self.exercises)

    def exercise_index(self, exercise_id: str) -> int | None:
        for i, e in enumerate(self.exercises):
            if e.exercise_id == exercise_id:
                return i
        return None

    def exercise(self, exercise_id: str) -> ExerciseTemplate | None:
        idx = self.exercise_index(exercise_id)
        return self.exercises[idx] if idx is not None else None


@dataclass
class SetEntry:
    """
    A single logged set.

    ``id`` is fixed at creation; reps, weight and difficulty may be edited.
    """

    id: str
    exercise_id: str
    set_number: int  # 1-based within the exercise, in logging order
    actual_reps: int
    weight: float
    difficulty: Difficulty = None
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.set_number < 1:
            raise ValueError("set_number must be at least 1")
        if self.actual_reps < 0:
            raise ValueError("actual_reps must be non-negative")
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        validate_difficulty(self.difficulty)

    @property
    def volume(self) -> float:
        """Volume contribution: reps x weight."""
        return self.actual_reps * self.weight


@dataclass
class CheckIn:
    """Post-workout self assessment. Ratings are 1 (low) to 5 (high)."""

    fatigue: int = 3
    difficulty: int = 3
    recovery: int = 3
    sleep_quality: int = 3
    motivation: int = 3
    pain: Pain = "none"
    notes: str = ""

    def __post_init__(self) -> None:
        for name in ("fatigue", "difficulty", "recovery", "sleep_quality", "motivation"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} must be between 1 and 5, got {value}")
        if self.pain not in PAIN_OPTIONS:
            raise ValueError(f"Invalid pain: {self.pain!r}. Must be one of {PAIN_OPTIONS}")


@dataclass
class WorkoutLog:
    """
    A logged workout, complete or in progress.

    ``total_volume`` always equals the summed volume of ``set_entries``;
    every mutation of the entries updates it in the same step.
    """

    id: str
    date: str  # ISO format: YYYY-MM-DD
    template_id: str
    start_time: str  # ISO datetime
    end_time: str | None = None
    duration_minutes: int = 0
    total_volume: float = 0.0
    notes: str = ""
    is_complete: bool = False
    set_entries: list[SetEntry] = field(default_factory=list)
    check_in: CheckIn | None = None

    def __post_init__(self) -> None:
        validate_iso_date(self.date)
        if self.duration_minutes < 0:
            raise ValueError("duration_minutes must be non-negative")

    def sets_for(self, exercise_id: str) -> list[SetEntry]:
        """Entries logged for one exercise, in logging order."""
        return [e for e in self.set_entries if e.exercise_id == exercise_id]

    def find_set(self, set_id: str) -> SetEntry | None:
        for entry in self.set_entries:
            if entry.id == set_id:
                return entry
        return None

    def distinct_exercises(self) -> set[str]:
        return {e.exercise_id for e in self.set_entries}

    def recomputed_volume(self) -> float:
        """Volume summed from scratch over the current entries."""
        return sum(e.volume for e in self.set_entries)


@dataclass
class SessionCursor:
    """
    Position inside the active workout.

    The indices are derived data: they can always be rebuilt from
    ``workout_log.set_entries`` and the template (see cursor.derive_cursor).
    """

    workout_log: WorkoutLog
    current_exercise_index: int = 0
    current_set_index: int = 0
    is_resting: bool = False
    rest_seconds_remaining: int = 0


@dataclass
class UserProfileStats:
    """Experience, level and streak for one profile."""

    experience_points: int = 0
    level: int = 1
    current_streak_days: int = 0
    longest_streak_days: int = 0
    last_workout_date: str | None = None

    def __post_init__(self) -> None:
        if self.experience_points < 0:
            raise ValueError("experience_points must be non-negative")
        if self.level < 1:
            raise ValueError("level must be at least 1")
        if self.current_streak_days < 0 or self.longest_streak_days < 0:
            raise ValueError("streak days must be non-negative")
        if self.last_workout_date is not None:
            validate_iso_date(self.last_workout_date)


@dataclass
class PersonalRecord:
    """Best estimated one-rep max ever logged for one exercise."""

    exercise_id: str
    exercise_name: str
    weight: float
    reps: int
    date: str
    estimated_1rm: float


@dataclass(frozen=True)
class LevelThreshold:
    """One row of the level table."""

    level: int
    xp_required: int
    title: str


@dataclass(frozen=True)
class LevelInfo:
    """Level plus progress toward the next one."""

    level: int
    title: str
    xp_into_level: int
    xp_for_next_level: int
    progress_pct: float


@dataclass(frozen=True)
class StreakInfo:
    current: int
    longest: int
    is_active: bool


@dataclass
class Quest:
    """
    A weekly challenge.

    ``current`` is derived from the log history inside
    [start_date, end_date]; see quests.quest_progress.
    """

    id: str
    name: str
    description: str
    quest_type: QuestType
    target: int
    xp_reward: int
    start_date: str  # ISO date, Monday of the quest week
    end_date: str  # ISO date, Sunday of the quest week
    current: float = 0
    is_complete: bool = False

    def __post_init__(self) -> None:
        if self.quest_type not in QUEST_TYPES:
            raise ValueError(f"Invalid quest_type: {self.quest_type!r}")
        if self.target <= 0:
            raise ValueError("target must be positive")
        validate_iso_date(self.start_date)
        validate_iso_date(self.end_date)


@dataclass(frozen=True)
class WeeklySummary:
    workouts: int
    volume: float
    sets: int


@dataclass
class Profile:
    """A local user profile (several people can share one device)."""

    id: str
    name: str
    avatar: str = ""
    created_at: str = ""
    last_accessed_at: str = ""
