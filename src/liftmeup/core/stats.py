"""
Statistics engine: experience, levels, streaks and personal records.

Everything here is derivable from the completed workout history.  The
StatsEngine applies incremental updates while a user trains (set logged,
workout completed); after a historical workout is deleted it rebuilds
everything from scratch with recalculate_all() instead of trying to undo
individual awards.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Iterable

from .config import (
    DEFAULT_GAME_CONFIG,
    DEFAULT_PROFILE_ID,
    LEVEL_THRESHOLDS,
    RECALC_XP_PER_EXERCISE,
    RECALC_XP_PER_SET,
    RECALC_XP_PER_WORKOUT,
    GameConfig,
)
from .events import EventSink, ExperienceEarned, PersonalRecordBeaten, null_sink
from .models import (
    LevelInfo,
    LevelThreshold,
    PersonalRecord,
    StreakInfo,
    UserProfileStats,
    WorkoutLog,
)
from .ports import CatalogReader, Clock, PersistenceError, PRStore, StatsStore, SystemClock

logger = logging.getLogger(__name__)


# =============================================================================
# Pure functions
# =============================================================================


def level_for_xp(xp: int, thresholds: list[LevelThreshold] = LEVEL_THRESHOLDS) -> int:
    """
    Highest level whose threshold is <= xp.

    Defaults to level 1 when no row qualifies (e.g. negative input).
    """
    for row in reversed(thresholds):
        if xp >= row.xp_required:
            return row.level
    return 1


def level_info(xp: int, thresholds: list[LevelThreshold] = LEVEL_THRESHOLDS) -> LevelInfo:
    """
    Level, title and progress toward the next level.

    At the top level progress is reported as 100%.
    """
    current = thresholds[0]
    nxt = thresholds[1] if len(thresholds) > 1 else thresholds[0]
    for i in range(len(thresholds) - 1, -1, -1):
        if xp >= thresholds[i].xp_required:
            current = thresholds[i]
            nxt = thresholds[i + 1] if i + 1 < len(thresholds) else thresholds[i]
            break

    into = xp - current.xp_required
    span = nxt.xp_required - current.xp_required
    progress = (into / span) * 100 if span > 0 else 100.0
    return LevelInfo(
        level=current.level,
        title=current.title,
        xp_into_level=into,
        xp_for_next_level=span,
        progress_pct=min(100.0, max(0.0, progress)),
    )


def estimate_1rm(weight: float, reps: int) -> float:
    """
    Estimate one-rep max using the Epley formula.

    1RM = weight * (1 + reps / 30).  A single is taken at face value so
    heavy singles are not inflated.

    Args:
        weight: Load lifted
        reps: Repetitions performed

    Returns:
        Estimated 1RM in the same unit as weight
    """
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / 30)


def as_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def completed_logs_desc(logs: Iterable[WorkoutLog]) -> list[WorkoutLog]:
    """Completed logs, most recent first."""
    done = [log for log in logs if log.is_complete]
    done.sort(key=lambda log: (log.date, log.start_time), reverse=True)
    return done


def compute_streak(logs: Iterable[WorkoutLog], today: str | date) -> StreakInfo:
    """
    Current streak of consecutive training days ending today or yesterday.

    Incomplete logs and logs dated after ``today`` are ignored.  If the most
    recent workout is more than one day old the streak is broken.  Otherwise
    the walk goes backward through the workout dates: a gap of one day
    extends the streak, several workouts on the same day count once, and any
    larger gap ends the walk.

    ``longest`` equals ``current`` here; the all-time longest streak is a
    running maximum kept in UserProfileStats.
    """
    ref = as_date(today)
    dates = [as_date(log.date) for log in completed_logs_desc(logs)]
    dates = [d for d in dates if d <= ref]
    if not dates:
        return StreakInfo(current=0, longest=0, is_active=False)

    days_diff = (ref - dates[0]).days
    if days_diff > 1:
        return StreakInfo(current=0, longest=0, is_active=False)

    streak = 0
    cursor = ref if days_diff == 0 else dates[0]
    for d in dates:
        gap = (cursor - d).days
        if gap == 0:
            if streak == 0:
                streak = 1
            continue
        if gap == 1:
            streak += 1
            cursor = d
        else:
            break

    return StreakInfo(current=streak, longest=streak, is_active=True)


def recalculate_experience(logs: Iterable[WorkoutLog]) -> int:
    """
    Total XP rebuilt from completed logs.

    Per completed workout: 10 per set, 25 per distinct exercise touched,
    100 for the completion itself.  PR and volume bonuses are not replayed.
    """
    total = 0
    for log in logs:
        if not log.is_complete:
            continue
        total += len(log.set_entries) * RECALC_XP_PER_SET
        total += len(log.distinct_exercises()) * RECALC_XP_PER_EXERCISE
        total += RECALC_XP_PER_WORKOUT
    return total


def recalculate_personal_records(
    logs: Iterable[WorkoutLog],
    exercise_name: Callable[[str], str] | None = None,
) -> list[PersonalRecord]:
    """
    Best estimated-1RM set per exercise across completed logs.

    Logs are replayed oldest first, so on ties the earliest set keeps the
    record, exactly as if check_personal_record had been called live.
    """
    name_of = exercise_name or (lambda exercise_id: exercise_id)
    best: dict[str, PersonalRecord] = {}
    for log in reversed(completed_logs_desc(logs)):
        for entry in log.set_entries:
            est = estimate_1rm(entry.weight, entry.actual_reps)
            existing = best.get(entry.exercise_id)
            if existing is None or est > existing.estimated_1rm:
                best[entry.exercise_id] = PersonalRecord(
                    exercise_id=entry.exercise_id,
                    exercise_name=name_of(entry.exercise_id),
                    weight=entry.weight,
                    reps=entry.actual_reps,
                    date=log.date,
                    estimated_1rm=est,
                )
    return list(best.values())


@dataclass(frozen=True)
class RecalculationResult:
    """Everything rebuilt by recalculate_all()."""

    records: list[PersonalRecord]
    experience_points: int
    level: int
    streak: StreakInfo
    longest_streak_days: int
    last_workout_date: str | None

    def to_stats(self) -> UserProfileStats:
        return UserProfileStats(
            experience_points=self.experience_points,
            level=self.level,
            current_streak_days=self.streak.current,
            longest_streak_days=self.longest_streak_days,
            last_workout_date=self.last_workout_date,
        )


def recalculate_all(
    all_logs: Iterable[WorkoutLog],
    previous_longest: int = 0,
    catalog: CatalogReader | None = None,
    thresholds: list[LevelThreshold] = LEVEL_THRESHOLDS,
) -> RecalculationResult:
    """
    Rebuild PRs, XP, level and streak from the remaining logs.

    The streak is evaluated against the most recent remaining workout date,
    and the longest streak never goes below ``previous_longest``: deleting a
    workout cannot erase a historical peak.  Calling this twice on the same
    logs gives the same result.
    """
    logs = list(all_logs)
    completed = completed_logs_desc(logs)

    records = recalculate_personal_records(
        completed,
        catalog.exercise_name if catalog is not None else None,
    )
    xp = recalculate_experience(completed)

    if completed:
        last_date = completed[0].date
        streak = compute_streak(completed, last_date)
    else:
        last_date = None
        streak = StreakInfo(current=0, longest=0, is_active=False)

    return RecalculationResult(
        records=records,
        experience_points=xp,
        level=level_for_xp(xp, thresholds),
        streak=streak,
        longest_streak_days=max(streak.current, previous_longest),
        last_workout_date=last_date,
    )


def last_log_of_template(
    logs: Iterable[WorkoutLog],
    template_id: str,
    exclude_id: str | None = None,
) -> WorkoutLog | None:
    """Most recent completed log of a template, optionally skipping one log id."""
    for log in completed_logs_desc(logs):
        if log.template_id == template_id and log.id != exclude_id:
            return log
    return None


# =============================================================================
# Engine
# =============================================================================


@dataclass(frozen=True)
class CompletionSummary:
    """What a finished workout earned."""

    xp_earned: int
    beat_previous_volume: bool
    volume_delta: float
    streak: int


class StatsEngine:
    """
    Owns UserProfileStats and the personal-record list for one profile.

    Mutations are applied in memory first; saving through the stores is
    best effort and a failed save never rolls a mutation back.
    """

    def __init__(
        self,
        stats: UserProfileStats | None = None,
        records: list[PersonalRecord] | None = None,
        *,
        profile_id: str = DEFAULT_PROFILE_ID,
        catalog: CatalogReader | None = None,
        config: GameConfig = DEFAULT_GAME_CONFIG,
        clock: Clock | None = None,
        sink: EventSink = null_sink,
        stats_store: StatsStore | None = None,
        pr_store: PRStore | None = None,
    ):
        self._stats = stats or UserProfileStats()
        self._records: dict[str, PersonalRecord] = {r.exercise_id: r for r in records or []}
        self.profile_id = profile_id
        self.catalog = catalog
        self.config = config
        self.clock = clock or SystemClock()
        self.sink = sink
        self.stats_store = stats_store
        self.pr_store = pr_store

    # ── read access ─────────────────────────────────────────────────────────

    @property
    def stats(self) -> UserProfileStats:
        return replace(self._stats)

    @property
    def records(self) -> list[PersonalRecord]:
        return list(self._records.values())

    def record_for(self, exercise_id: str) -> PersonalRecord | None:
        return self._records.get(exercise_id)

    def level_info(self) -> LevelInfo:
        return level_info(self._stats.experience_points, self.config.level_thresholds)

    # ── persistence ─────────────────────────────────────────────────────────

    def _save_stats(self) -> None:
        if self.stats_store is None:
            return
        try:
            self.stats_store.save_stats(self.profile_id, replace(self._stats))
        except PersistenceError as e:
            logger.warning("Could not save stats for profile %s: %s", self.profile_id, e)

    def _save_prs(self) -> None:
        if self.pr_store is None:
            return
        try:
            self.pr_store.save_prs(self.profile_id, self.records)
        except PersistenceError as e:
            logger.warning("Could not save personal records for profile %s: %s", self.profile_id, e)

    # ── mutations ───────────────────────────────────────────────────────────

    def award_experience(self, amount: int, reason: str = "bonus") -> int:
        """
        Add XP and recompute the level.

        Non-positive amounts are ignored so this call can never lower XP.

        Returns:
            The amount actually awarded
        """
        if amount <= 0:
            return 0
        old_level = self._stats.level
        xp = self._stats.experience_points + amount
        level = level_for_xp(xp, self.config.level_thresholds)
        self._stats = replace(self._stats, experience_points=xp, level=level)
        self._save_stats()
        if level > old_level:
            logger.info("Profile %s reached level %d", self.profile_id, level)
        self.sink(
            ExperienceEarned(
                amount=amount,
                reason=reason,
                total=xp,
                level=level,
                leveled_up=level > old_level,
            )
        )
        return amount

    def check_personal_record(
        self,
        exercise_id: str,
        weight: float,
        reps: int,
        on_date: str | None = None,
    ) -> PersonalRecord | None:
        """
        Store a new record if this set beats the exercise's best estimated 1RM.

        Returns:
            The new PersonalRecord, or None when the existing record stands
        """
        est = estimate_1rm(weight, reps)
        existing = self._records.get(exercise_id)
        if existing is not None and est <= existing.estimated_1rm:
            return None

        name = self.catalog.exercise_name(exercise_id) if self.catalog is not None else exercise_id
        record = PersonalRecord(
            exercise_id=exercise_id,
            exercise_name=name,
            weight=weight,
            reps=reps,
            date=on_date or self.clock.now().date().isoformat(),
            estimated_1rm=est,
        )
        self._records[exercise_id] = record
        self._save_prs()
        self.sink(PersonalRecordBeaten(record=record, previous=existing))
        return record

    def record_completion(
        self,
        log: WorkoutLog,
        history: Iterable[WorkoutLog] = (),
    ) -> CompletionSummary:
        """
        Apply a finished workout: streak +1, longest streak, last date, XP.

        The completion counts toward today's streak.  A volume bonus is
        awarded when the workout beats the previous completed workout of the
        same template.
        """
        previous = last_log_of_template(history, log.template_id, exclude_id=log.id)
        volume_delta = log.total_volume - previous.total_volume if previous is not None else 0.0
        beat = previous is not None and volume_delta > 0

        # Every completion counts, a second one on the same day included.
        # refresh_streak at the next start-up walks distinct dates and lowers
        # the current streak again; the longest streak keeps the peak.
        streak = self._stats.current_streak_days + 1
        self._stats = replace(
            self._stats,
            current_streak_days=streak,
            longest_streak_days=max(streak, self._stats.longest_streak_days),
            last_workout_date=log.date,
        )
        self._save_stats()

        earned = self.award_experience(self.config.reward("complete_workout"), "complete_workout")
        if beat:
            earned += self.award_experience(
                self.config.reward("beat_last_volume"), "beat_last_volume"
            )

        return CompletionSummary(
            xp_earned=earned,
            beat_previous_volume=beat,
            volume_delta=volume_delta,
            streak=streak,
        )

    def apply_recalculation(self, all_logs: Iterable[WorkoutLog]) -> RecalculationResult:
        """Replace PRs and stats with a full rebuild from ``all_logs``."""
        result = recalculate_all(
            all_logs,
            previous_longest=self._stats.longest_streak_days,
            catalog=self.catalog,
            thresholds=self.config.level_thresholds,
        )
        self._stats = result.to_stats()
        self._records = {r.exercise_id: r for r in result.records}
        self._save_prs()
        self._save_stats()
        logger.debug(
            "Recalculated profile %s: xp=%d level=%d streak=%d prs=%d",
            self.profile_id,
            result.experience_points,
            result.level,
            result.streak.current,
            len(result.records),
        )
        return result

    def refresh_streak(self, history: Iterable[WorkoutLog], today: str | date) -> StreakInfo:
        """
        Re-evaluate the current streak against the real date (e.g. on start-up).

        A streak that lapsed while the app was closed drops to zero; the
        longest streak is never lowered.
        """
        info = compute_streak(history, today)
        if info.current != self._stats.current_streak_days:
            self._stats = replace(
                self._stats,
                current_streak_days=info.current,
                longest_streak_days=max(info.current, self._stats.longest_streak_days),
            )
            self._save_stats()
        return info
