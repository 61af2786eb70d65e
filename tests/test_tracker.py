"""
Integration tests for the Tracker facade: start-up, quests, deletion, reset.
"""

import random
from datetime import datetime

import pytest

from conftest import make_log
from liftmeup.core.config import GameConfig
from liftmeup.core.events import ExperienceEarned, QuestCompleted
from liftmeup.core.models import Quest, UserProfileStats
from liftmeup.core.session import SessionState
from liftmeup.core.tracker import Tracker
from liftmeup.io.profile_store import StoreError


def week_quest(quest_type="workouts", target=1, start="2026-03-02", end="2026-03-08"):
    return Quest(
        id=f"{start}-0",
        name="Test Quest",
        description="",
        quest_type=quest_type,
        target=target,
        xp_reward=150,
        start_date=start,
        end_date=end,
    )


def train(tracker, template_id, reps=10, weight=100.0):
    """Log every target set of a template in order and complete the workout."""
    tracker.session.start_workout(template_id)
    template = tracker.catalog.get_template(template_id)
    for exercise in template.exercises:
        for _ in range(exercise.sets):
            tracker.session.log_set(exercise.exercise_id, reps, weight)
            tracker.session.next_set()
    return tracker.complete_workout()


@pytest.fixture
def make_tracker(catalog, clock, store, recorder):
    def build(**kwargs):
        return Tracker(
            store,
            catalog=catalog,
            config=GameConfig(),
            clock=clock,
            sink=recorder,
            rng=random.Random(5),
            **kwargs,
        )

    return build


class TestStartup:
    def test_fresh_profile_gets_weekly_quests(self, make_tracker, store):
        tracker = make_tracker()

        assert len(tracker.quests) == 2
        assert {q.start_date for q in tracker.quests} == {"2026-03-02"}
        assert store.load_quests("default") == tracker.quests
        assert tracker.session.state is SessionState.IDLE

    def test_expired_quests_are_rotated(self, make_tracker, store):
        store.save_quests("default", [week_quest(start="2026-02-23", end="2026-03-01")])

        tracker = make_tracker()

        assert all(q.start_date == "2026-03-02" for q in tracker.quests)

    def test_current_quests_are_kept(self, make_tracker, store):
        store.save_quests("default", [week_quest("sets", 1000)])
        assert make_tracker().quests == [week_quest("sets", 1000)]

    def test_lapsed_streak_is_reset(self, make_tracker, store):
        store.save_all_logs("default", [make_log("old", "2026-02-25", [("bench", 10, 100)])])
        store.save_stats(
            "default",
            UserProfileStats(current_streak_days=5, longest_streak_days=5,
                             last_workout_date="2026-02-25"),
        )

        tracker = make_tracker()

        assert tracker.stats.stats.current_streak_days == 0
        assert tracker.stats.stats.longest_streak_days == 5

    def test_unfinished_workout_is_resumed(self, make_tracker, store):
        wip = make_log("wip", "2026-03-02", [("bench", 10, 100)] * 3, complete=False)
        store.save_all_logs("default", [wip])

        tracker = make_tracker()

        assert tracker.session.active_log.id == "wip"
        assert tracker.session.cursor.current_exercise_index == 1
        assert tracker.session.cursor.current_set_index == 0

    def test_auto_resume_can_be_disabled(self, make_tracker, store):
        store.save_all_logs("default", [make_log("wip", "2026-03-02", [], complete=False)])
        tracker = make_tracker(auto_resume=False)
        assert tracker.session.state is SessionState.IDLE
        assert tracker.session.incomplete_log().id == "wip"

    def test_two_unfinished_workouts_refuse_to_load(self, make_tracker, store):
        store.save_all_logs(
            "default",
            [make_log(log_id, "2026-03-02", [], complete=False) for log_id in ("w1", "w2")],
        )
        with pytest.raises(StoreError, match="2 unfinished workouts"):
            make_tracker()


class TestQuestPayout:
    def test_completed_quest_pays_once(self, make_tracker, store, recorder):
        store.save_quests("default", [week_quest("workouts", 1)])
        tracker = make_tracker()

        summary = train(tracker, "upper")

        assert summary is not None
        (quest,) = tracker.quests
        assert quest.is_complete
        assert len(recorder.of_type(QuestCompleted)) == 1
        quest_xp = [e for e in recorder.of_type(ExperienceEarned) if e.reason == "quest"]
        assert [e.amount for e in quest_xp] == [150]
        # sets 50 + two first-set PRs 100 + two exercise bonuses 50 + completion 100
        assert tracker.stats.stats.experience_points == 300 + 150

        train(tracker, "lower")
        assert len(recorder.of_type(QuestCompleted)) == 1
        assert store.load_quests("default")[0].is_complete


class TestDeleteWorkout:
    def trained(self, make_tracker, store, clock):
        store.save_quests("default", [week_quest("sets", 1000)])
        tracker = make_tracker()
        train(tracker, "upper", reps=10, weight=100.0)
        clock.set(datetime(2026, 3, 3, 9, 0, 0))
        train(tracker, "lower", reps=5, weight=120.0)
        return tracker

    def test_stats_rebuilt_from_remaining_logs(self, make_tracker, store, clock):
        tracker = self.trained(make_tracker, store, clock)
        first = tracker.history()[-1]
        assert tracker.stats.stats.longest_streak_days == 2

        assert tracker.delete_workout(first.id)

        stats = tracker.stats.stats
        # lower: 2 sets x 10 + 1 exercise x 25 + 100
        assert stats.experience_points == 145
        assert stats.level == 2
        assert stats.current_streak_days == 1
        assert stats.longest_streak_days == 2
        assert stats.last_workout_date == "2026-03-03"
        assert [r.exercise_id for r in tracker.stats.records] == ["bench"]
        assert tracker.stats.record_for("bench").estimated_1rm == pytest.approx(140.0)
        assert [log.id for log in store.load_all_logs("default")] == [
            log.id for log in tracker.session.logs
        ]
        assert store.load_stats("default") == stats

    def test_unknown_or_active_workout_not_deleted(self, make_tracker, store, clock):
        tracker = self.trained(make_tracker, store, clock)
        active = tracker.session.start_workout("upper")

        assert not tracker.delete_workout("missing")
        assert not tracker.delete_workout(active.id)
        assert tracker.session.find_log(active.id) is not None


class TestSummaries:
    def test_weekly_summary_and_suggestion(self, make_tracker):
        tracker = make_tracker()
        assert tracker.suggest_next() == "upper"

        train(tracker, "upper")

        week = tracker.weekly_summary()
        assert (week.workouts, week.sets) == (1, 5)
        assert week.volume == pytest.approx(5000.0)
        assert tracker.suggest_next() == "lower"
        assert tracker.level_info().level == 3


class TestReset:
    def test_reset_all(self, make_tracker, store):
        tracker = make_tracker()
        train(tracker, "upper")
        tracker.session.start_workout("lower")

        tracker.reset_all()

        assert store.load_all_logs("default") == []
        assert store.load_prs("default") == []
        assert tracker.stats.stats == UserProfileStats()
        assert tracker.session.state is SessionState.IDLE
        assert tracker.history() == []
        assert len(tracker.quests) == 2
