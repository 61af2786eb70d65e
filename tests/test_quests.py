"""
Tests for weekly quests, next-workout suggestion and weekly summaries.
"""

import random
from datetime import date

import pytest

from conftest import make_log
from liftmeup.core.models import Quest, UserProfileStats
from liftmeup.core.quests import (
    generate_weekly_quests,
    quest_progress,
    quests_need_refresh,
    suggest_next_template,
    update_quests,
    week_bounds,
    weekly_summary,
)


def quest(quest_type, target, *, start="2026-03-02", end="2026-03-08", **kwargs):
    return Quest(
        id=f"{start}-0",
        name=quest_type.title(),
        description="",
        quest_type=quest_type,
        target=target,
        xp_reward=150,
        start_date=start,
        end_date=end,
        **kwargs,
    )


def week_logs():
    return [
        make_log("prev", "2026-03-01", [("bench", 10, 100)] * 5),
        make_log("a", "2026-03-02", [("bench", 10, 100)] * 3, template_id="upper"),
        make_log("b", "2026-03-04", [("row", 10, 50)] * 2, template_id="lower"),
        make_log("c", "2026-03-05", [("bench", 10, 100)], template_id="upper", complete=False),
    ]


class TestWeekBounds:
    @pytest.mark.parametrize("day", ["2026-03-02", "2026-03-05", "2026-03-08"])
    def test_monday_to_sunday(self, day):
        assert week_bounds(day) == (date(2026, 3, 2), date(2026, 3, 8))


class TestGenerateWeeklyQuests:
    def test_distinct_quests_for_the_week(self):
        quests = generate_weekly_quests("2026-03-04", rng=random.Random(7))

        assert len(quests) == 2
        assert len({q.name for q in quests}) == 2
        assert {q.start_date for q in quests} == {"2026-03-02"}
        assert {q.end_date for q in quests} == {"2026-03-08"}
        assert [q.id for q in quests] == ["2026-03-02-0", "2026-03-02-1"]
        assert all(q.current == 0 and not q.is_complete for q in quests)

    def test_seeded_draw_is_reproducible(self):
        a = generate_weekly_quests("2026-03-04", rng=random.Random(3))
        b = generate_weekly_quests("2026-03-04", rng=random.Random(3))
        assert a == b

    def test_count_capped_by_templates(self):
        templates = [("workouts", "Only", "Do one", 1, 10)]
        quests = generate_weekly_quests("2026-03-04", templates=templates, count=5)
        assert len(quests) == 1


class TestQuestProgress:
    stats = UserProfileStats(current_streak_days=2)

    @pytest.mark.parametrize(
        "quest_type,expected",
        [("workouts", 2), ("sets", 5), ("volume", 4000), ("streak", 2), ("variety", 2)],
    )
    def test_metric_inside_week(self, quest_type, expected):
        assert quest_progress(quest(quest_type, 100000), week_logs(), self.stats) == expected

    def test_update_caps_current_at_target(self):
        (updated,), newly = update_quests([quest("sets", 4)], week_logs(), self.stats)
        assert updated.current == 4
        assert updated.is_complete
        assert newly == [updated]

    def test_completed_quest_stays_complete(self):
        done = quest("workouts", 2, current=2, is_complete=True)
        (updated,), newly = update_quests([done], week_logs()[:2], self.stats)
        assert updated.is_complete
        assert updated.current == 1
        assert newly == []

    def test_not_complete_below_target(self):
        (updated,), newly = update_quests([quest("workouts", 3)], week_logs(), self.stats)
        assert updated.current == 2
        assert not updated.is_complete
        assert newly == []


class TestQuestsNeedRefresh:
    def test_empty(self):
        assert quests_need_refresh([], "2026-03-04")

    def test_current_week(self):
        assert not quests_need_refresh([quest("sets", 10)], "2026-03-08")

    def test_past_week(self):
        assert quests_need_refresh([quest("sets", 10)], "2026-03-09")


class TestSuggestNextTemplate:
    ids = ["upper", "lower", "legs"]

    def test_no_templates(self):
        assert suggest_next_template([], []) is None

    def test_first_template_without_history(self):
        assert suggest_next_template([], self.ids) == "upper"

    def test_never_repeats_last_workout(self):
        logs = week_logs()
        rng = random.Random(0)
        picks = {suggest_next_template(logs, self.ids, rng) for _ in range(30)}
        # last completed workout was "lower"
        assert picks <= {"upper", "legs"}

    def test_single_template_is_repeated(self):
        assert suggest_next_template(week_logs(), ["lower"]) == "lower"


class TestWeeklySummary:
    def test_counts_only_completed_logs_of_this_week(self):
        summary = weekly_summary(week_logs(), "2026-03-06")
        assert summary.workouts == 2
        assert summary.sets == 5
        assert summary.volume == pytest.approx(4000.0)

    def test_empty_week(self):
        summary = weekly_summary(week_logs(), "2026-03-20")
        assert (summary.workouts, summary.volume, summary.sets) == (0, 0, 0)
