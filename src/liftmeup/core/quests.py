"""
Weekly quests, the suggested next workout, and weekly summaries.

Quest progress is never stored incrementally: it is re-derived from the
completed logs inside the quest's week every time update_quests() runs.
"""

import random
from datetime import date, timedelta
from typing import Iterable, Sequence

from .config import QUEST_TEMPLATES, QUESTS_PER_WEEK
from .models import Quest, UserProfileStats, WeeklySummary, WorkoutLog
from .stats import as_date, completed_logs_desc, last_log_of_template

__all__ = [
    "week_bounds",
    "generate_weekly_quests",
    "quest_progress",
    "update_quests",
    "quests_need_refresh",
    "suggest_next_template",
    "weekly_summary",
    "total_sets",
    "last_log_of_template",
]


def week_bounds(day: str | date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    d = as_date(day)
    monday = d - timedelta(days=d.weekday())
    return monday, monday + timedelta(days=6)


def generate_weekly_quests(
    today: str | date,
    rng: random.Random | None = None,
    templates: Sequence[tuple[str, str, str, int, int]] = QUEST_TEMPLATES,
    count: int = QUESTS_PER_WEEK,
) -> list[Quest]:
    """
    Draw ``count`` distinct quests for the week containing ``today``.

    Args:
        today: Any day of the target week
        rng: Random source; pass a seeded Random for reproducible draws
        templates: (quest_type, name, description, target, xp_reward) rows
        count: Number of quests, capped at the number of templates

    Returns:
        Fresh quests with zero progress
    """
    rng = rng or random.Random()
    start, end = week_bounds(today)
    picks = rng.sample(list(templates), min(count, len(templates)))
    return [
        Quest(
            id=f"{start.isoformat()}-{i}",
            name=name,
            description=description,
            quest_type=quest_type,
            target=target,
            xp_reward=xp_reward,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
        )
        for i, (quest_type, name, description, target, xp_reward) in enumerate(picks)
    ]


def _logs_in_window(logs: Iterable[WorkoutLog], start: date, end: date) -> list[WorkoutLog]:
    return [
        log for log in logs
        if log.is_complete and start <= as_date(log.date) <= end
    ]


def quest_progress(
    quest: Quest,
    logs: Iterable[WorkoutLog],
    stats: UserProfileStats,
) -> float:
    """Current value of a quest's metric, derived from the history."""
    window = _logs_in_window(logs, as_date(quest.start_date), as_date(quest.end_date))
    if quest.quest_type == "workouts":
        return len(window)
    if quest.quest_type == "sets":
        return total_sets(window)
    if quest.quest_type == "volume":
        return sum(log.total_volume for log in window)
    if quest.quest_type == "streak":
        return stats.current_streak_days
    if quest.quest_type == "variety":
        return len({log.template_id for log in window})
    return 0


def update_quests(
    quests: Iterable[Quest],
    logs: Iterable[WorkoutLog],
    stats: UserProfileStats,
) -> tuple[list[Quest], list[Quest]]:
    """
    Refresh progress of every quest.

    A completed quest stays completed even if its metric later drops
    (e.g. a deleted workout), so its reward is never paid twice.

    Returns:
        (all quests, quests that became complete in this call)
    """
    logs = list(logs)
    updated: list[Quest] = []
    newly_completed: list[Quest] = []
    for quest in quests:
        current = quest_progress(quest, logs, stats)
        done = quest.is_complete or current >= quest.target
        refreshed = Quest(
            id=quest.id,
            name=quest.name,
            description=quest.description,
            quest_type=quest.quest_type,
            target=quest.target,
            xp_reward=quest.xp_reward,
            start_date=quest.start_date,
            end_date=quest.end_date,
            current=min(current, quest.target),
            is_complete=done,
        )
        updated.append(refreshed)
        if done and not quest.is_complete:
            newly_completed.append(refreshed)
    return updated, newly_completed


def quests_need_refresh(quests: Sequence[Quest], today: str | date) -> bool:
    """True when there are no quests or they belong to a past week."""
    if not quests:
        return True
    ref = as_date(today)
    return any(as_date(q.end_date) < ref for q in quests)


def suggest_next_template(
    logs: Iterable[WorkoutLog],
    template_ids: Sequence[str],
    rng: random.Random | None = None,
) -> str | None:
    """
    Pick the next workout to train.

    With no history the first template is suggested; otherwise a random
    template other than the one trained last.
    """
    if not template_ids:
        return None
    done = completed_logs_desc(logs)
    if not done:
        return template_ids[0]
    candidates = [t for t in template_ids if t != done[0].template_id]
    if not candidates:
        return template_ids[0]
    return (rng or random.Random()).choice(candidates)


def weekly_summary(logs: Iterable[WorkoutLog], today: str | date) -> WeeklySummary:
    """Completed workouts, volume and sets in the current Monday-Sunday week."""
    start, end = week_bounds(today)
    window = _logs_in_window(logs, start, end)
    return WeeklySummary(
        workouts=len(window),
        volume=sum(log.total_volume for log in window),
        sets=total_sets(window),
    )


def total_sets(logs: Iterable[WorkoutLog]) -> int:
    """Sets logged across completed workouts."""
    return sum(len(log.set_entries) for log in logs if log.is_complete)
