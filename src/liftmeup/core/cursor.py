"""
Position of the next set inside a workout.

derive_cursor() is the single source of truth for "where am I" after
starting, resuming, or deleting a set: the position is recomputed from the
logged entries, never read from a stored counter.
"""

from collections import Counter
from typing import Iterable

from .models import ExerciseStatus, SetEntry, WorkoutTemplate


def logged_counts(set_entries: Iterable[SetEntry]) -> Counter:
    """Number of logged sets per exercise id."""
    return Counter(e.exercise_id for e in set_entries)


def derive_cursor(
    template: WorkoutTemplate,
    set_entries: Iterable[SetEntry],
) -> tuple[int, int]:
    """
    Compute (exercise_index, set_index) from logged sets.

    The cursor points at the first exercise, in template order, whose logged
    count is below its target; set_index is that count.  When every exercise
    is satisfied the cursor is past the end: (len(exercises), 0).

    Sets logged for exercises that are not in the template are ignored.
    """
    counts = logged_counts(set_entries)
    for i, exercise in enumerate(template.exercises):
        done = counts.get(exercise.exercise_id, 0)
        if done < exercise.sets:
            return i, done
    return len(template.exercises), 0


def advance_cursor(
    template: WorkoutTemplate,
    exercise_index: int,
    set_index: int,
) -> tuple[int, int]:
    """
    Move one set forward, rolling over to the next exercise at its target.

    Past-the-end positions stay where they are.
    """
    if exercise_index >= len(template.exercises):
        return exercise_index, set_index
    next_set = set_index + 1
    if next_set >= template.exercises[exercise_index].sets:
        return exercise_index + 1, 0
    return exercise_index, next_set


def is_finished(template: WorkoutTemplate, exercise_index: int) -> bool:
    return exercise_index >= len(template.exercises)


def exercise_status(
    template: WorkoutTemplate,
    set_entries: Iterable[SetEntry],
    exercise_index: int,
) -> ExerciseStatus:
    """not-started / in-progress / completed for one exercise of the template."""
    exercise = template.exercises[exercise_index]
    done = logged_counts(set_entries).get(exercise.exercise_id, 0)
    if done == 0:
        return "not-started"
    if done < exercise.sets:
        return "in-progress"
    return "completed"
