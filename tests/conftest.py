"""Shared fixtures: a small deterministic catalog, fixed clock, in-memory store."""

from datetime import datetime

import pytest

from liftmeup.core.catalog import WorkoutCatalog
from liftmeup.core.events import EventRecorder
from liftmeup.core.models import ExerciseTemplate, SetEntry, WorkoutLog, WorkoutTemplate
from liftmeup.core.ports import FixedClock
from liftmeup.core.session import SessionEngine
from liftmeup.core.stats import StatsEngine
from liftmeup.io.profile_store import MemoryStore

# Monday
START = datetime(2026, 3, 2, 9, 0, 0)


def make_template(template_id="upper", sets=(3, 2)) -> WorkoutTemplate:
    """Template with exercises bench (sets[0]) and row (sets[1], ...)."""
    names = ["bench", "row", "curl", "press"]
    return WorkoutTemplate(
        template_id=template_id,
        name=template_id.title(),
        exercises=tuple(
            ExerciseTemplate(
                exercise_id=names[i],
                name=names[i].title(),
                sets=n,
                rep_range=(8, 12),
                weight_range=(100, 140),
            )
            for i, n in enumerate(sets)
        ),
    )


def make_log(
    log_id: str,
    date: str,
    sets: list[tuple[str, int, float]],
    template_id: str = "upper",
    complete: bool = True,
) -> WorkoutLog:
    """Build a completed log from (exercise_id, reps, weight) rows."""
    counts: dict[str, int] = {}
    entries = []
    for i, (exercise_id, reps, weight) in enumerate(sets):
        counts[exercise_id] = counts.get(exercise_id, 0) + 1
        entries.append(
            SetEntry(
                id=f"{log_id}-s{i}",
                exercise_id=exercise_id,
                set_number=counts[exercise_id],
                actual_reps=reps,
                weight=weight,
            )
        )
    log = WorkoutLog(
        id=log_id,
        date=date,
        template_id=template_id,
        start_time=f"{date}T09:00:00",
        is_complete=complete,
        set_entries=entries,
    )
    log.total_volume = log.recomputed_volume()
    return log


@pytest.fixture
def template():
    return make_template()


@pytest.fixture
def catalog(template):
    return WorkoutCatalog([template, make_template("lower", sets=(2,))])


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def stats_engine(catalog, clock, recorder, store):
    return StatsEngine(
        catalog=catalog,
        clock=clock,
        sink=recorder,
        stats_store=store,
        pr_store=store,
    )


@pytest.fixture
def engine(catalog, clock, recorder, store, stats_engine):
    counter = iter(range(1, 10_000))
    return SessionEngine(
        [],
        catalog=catalog,
        stats=stats_engine,
        clock=clock,
        sink=recorder,
        log_store=store,
        id_factory=lambda: f"id{next(counter)}",
    )
