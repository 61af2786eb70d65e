"""
Collaborator contracts consumed by the session and statistics engines.

The engines only talk to storage, the catalog and the clock through these
protocols, so file stores, in-memory stores and fixed clocks are
interchangeable.
"""

from datetime import datetime, timedelta
from typing import Protocol

from .models import PersonalRecord, Quest, UserProfileStats, WorkoutLog, WorkoutTemplate


class PersistenceError(Exception):
    """Raised by a store when a load or save cannot be completed."""

    pass


class CatalogReader(Protocol):
    def get_template(self, template_id: str) -> WorkoutTemplate | None: ...

    def exercise_name(self, exercise_id: str) -> str: ...


class LogStore(Protocol):
    def load_all_logs(self, profile_id: str) -> list[WorkoutLog]: ...

    def save_all_logs(self, profile_id: str, logs: list[WorkoutLog]) -> None: ...


class StatsStore(Protocol):
    def load_stats(self, profile_id: str) -> UserProfileStats: ...

    def save_stats(self, profile_id: str, stats: UserProfileStats) -> None: ...


class PRStore(Protocol):
    def load_prs(self, profile_id: str) -> list[PersonalRecord]: ...

    def save_prs(self, profile_id: str, records: list[PersonalRecord]) -> None: ...


class QuestStore(Protocol):
    def load_quests(self, profile_id: str) -> list[Quest]: ...

    def save_quests(self, profile_id: str, quests: list[Quest]) -> None: ...


class ProfileStore(LogStore, StatsStore, PRStore, QuestStore, Protocol):
    """Everything a Tracker needs: the four stores plus a wipe."""

    def clear_profile(self, profile_id: str) -> None: ...


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock, local time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """
    Deterministic clock for tests and replays.

    Time only moves when advance() or set() is called.
    """

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by a timedelta built from kwargs (minutes=5, days=1, ...)."""
        self._now = self._now + timedelta(**kwargs)
        return self._now
