"""
Tracker: one profile's session engine, statistics engine and quests, wired
to a store.

This is what front ends (the CLI, tests, an embedding app) talk to.  On
construction it loads the profile, re-evaluates the streak against today's
date, rotates expired weekly quests and resumes an unfinished workout.
"""

import logging
import random
from datetime import date

from .catalog import get_catalog
from .config import DEFAULT_PROFILE_ID, GameConfig
from .config_loader import load_game_config
from .events import EventSink, QuestCompleted, null_sink
from .models import LevelInfo, Quest, WeeklySummary, WorkoutLog
from .ports import CatalogReader, Clock, PersistenceError, ProfileStore, SystemClock
from .quests import (
    generate_weekly_quests,
    quests_need_refresh,
    suggest_next_template,
    update_quests,
    weekly_summary,
)
from .session import SessionEngine
from .stats import CompletionSummary, StatsEngine, completed_logs_desc

logger = logging.getLogger(__name__)


class Tracker:
    """
    Facade over a single profile.

    Loading errors from the store propagate (StoreError); saves after that
    are best effort, like inside the engines.
    """

    def __init__(
        self,
        store: ProfileStore,
        profile_id: str = DEFAULT_PROFILE_ID,
        *,
        catalog: CatalogReader | None = None,
        config: GameConfig | None = None,
        clock: Clock | None = None,
        sink: EventSink = null_sink,
        rng: random.Random | None = None,
        auto_resume: bool = True,
    ):
        self.store = store
        self.profile_id = profile_id
        self.catalog = catalog if catalog is not None else get_catalog()
        self.config = config if config is not None else load_game_config()
        self.clock = clock or SystemClock()
        self.sink = sink
        self.rng = rng or random.Random()

        self._build_engines(
            logs=store.load_all_logs(profile_id),
            stats=store.load_stats(profile_id),
            records=store.load_prs(profile_id),
        )
        self._quests: list[Quest] = store.load_quests(profile_id)

        today = self.today()
        self.stats.refresh_streak(self.session.logs, today)
        self.rotate_quests(today)
        if auto_resume and self.session.resume_workout():
            logger.info("Resumed unfinished workout %s", self.session.active_log.id)

    def _build_engines(self, logs, stats, records) -> None:
        self.stats = StatsEngine(
            stats,
            records,
            profile_id=self.profile_id,
            catalog=self.catalog,
            config=self.config,
            clock=self.clock,
            sink=self.sink,
            stats_store=self.store,
            pr_store=self.store,
        )
        self.session = SessionEngine(
            logs,
            catalog=self.catalog,
            stats=self.stats,
            profile_id=self.profile_id,
            config=self.config,
            clock=self.clock,
            sink=self.sink,
            log_store=self.store,
        )

    def today(self) -> date:
        return self.clock.now().date()

    # ── queries ─────────────────────────────────────────────────────────────

    @property
    def quests(self) -> list[Quest]:
        return list(self._quests)

    def history(self) -> list[WorkoutLog]:
        """Completed workouts, most recent first."""
        return completed_logs_desc(self.session.logs)

    def level_info(self) -> LevelInfo:
        return self.stats.level_info()

    def weekly_summary(self) -> WeeklySummary:
        return weekly_summary(self.session.logs, self.today())

    def suggest_next(self) -> str | None:
        """Template id to train next (never the one trained last, when possible)."""
        return suggest_next_template(self.session.logs, self.catalog.ids(), self.rng)

    # ── quests ──────────────────────────────────────────────────────────────

    def _save_quests(self) -> None:
        try:
            self.store.save_quests(self.profile_id, list(self._quests))
        except PersistenceError as e:
            logger.warning("Could not save quests for profile %s: %s", self.profile_id, e)

    def rotate_quests(self, today: date | None = None) -> bool:
        """Draw a new set of weekly quests if there are none or they expired."""
        today = today or self.today()
        if not quests_need_refresh(self._quests, today):
            return False
        self._quests = generate_weekly_quests(today, self.rng)
        self.refresh_quests()
        logger.debug("New weekly quests for %s: %s", self.profile_id, [q.name for q in self._quests])
        return True

    def refresh_quests(self) -> list[Quest]:
        """
        Recompute quest progress and pay out newly completed quests.

        Returns:
            Quests completed by this refresh
        """
        self._quests, completed = update_quests(
            self._quests, self.session.logs, self.stats.stats
        )
        for quest in completed:
            self.stats.award_experience(quest.xp_reward, "quest")
            self.sink(QuestCompleted(quest=quest))
            logger.info("Quest completed: %s (+%d XP)", quest.name, quest.xp_reward)
        self._save_quests()
        return completed

    # ── workflow ────────────────────────────────────────────────────────────

    def complete_workout(self, check_in=None, notes: str = "") -> CompletionSummary | None:
        """Complete the active workout, then update quest progress."""
        summary = self.session.complete_workout(check_in=check_in, notes=notes)
        if summary is not None:
            self.refresh_quests()
        return summary

    def delete_workout(self, log_id: str) -> bool:
        """
        Delete a historical workout and rebuild PRs, XP, level and streak.

        The active workout cannot be deleted this way; discard it instead.
        """
        removed = self.session.remove_log(log_id)
        if removed is None:
            return False
        self.stats.apply_recalculation(self.session.logs)
        self.refresh_quests()
        logger.info("Deleted workout %s from %s", log_id, removed.date)
        return True

    def reset_all(self) -> None:
        """
        Wipe every stored record of the profile and start from zero.

        Raises:
            PersistenceError: If the store cannot delete the profile's data
        """
        self.store.clear_profile(self.profile_id)
        self._build_engines(logs=[], stats=None, records=[])
        self._quests = []
        self.rotate_quests()
        logger.info("Reset all data for profile %s", self.profile_id)
