"""
Semantic events emitted by the engines.

A front end may turn these into haptics, sounds or confetti; the engines
only call the sink and never depend on how events are rendered.
"""

from dataclasses import dataclass
from typing import Callable, Union

from .models import PersonalRecord, Quest, SetEntry, WorkoutLog


@dataclass(frozen=True)
class SetLogged:
    entry: SetEntry
    is_last_set_of_exercise: bool


@dataclass(frozen=True)
class ExperienceEarned:
    amount: int
    reason: str  # reward action name, e.g. "complete_set"
    total: int
    level: int
    leveled_up: bool


@dataclass(frozen=True)
class PersonalRecordBeaten:
    record: PersonalRecord
    previous: PersonalRecord | None


@dataclass(frozen=True)
class WorkoutCompleted:
    log: WorkoutLog
    xp_earned: int
    beat_previous_volume: bool


@dataclass(frozen=True)
class RestFinished:
    pass


@dataclass(frozen=True)
class QuestCompleted:
    quest: Quest


Event = Union[
    SetLogged,
    ExperienceEarned,
    PersonalRecordBeaten,
    WorkoutCompleted,
    RestFinished,
    QuestCompleted,
]
EventSink = Callable[[Event], None]


def null_sink(event: Event) -> None:
    """Default sink: drop every event."""
    return None


class EventRecorder:
    """Sink that keeps every event it receives, in order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def __call__(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, cls: type) -> list:
        return [e for e in self.events if isinstance(e, cls)]

    def clear(self) -> None:
        self.events.clear()
