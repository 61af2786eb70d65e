"""
Tests for JSON profile storage, export/import and the profile registry.
"""

import json
from dataclasses import replace
from datetime import datetime

import pytest

from conftest import make_log
from liftmeup.core.models import CheckIn, PersonalRecord, Quest, UserProfileStats
from liftmeup.io import JsonProfileStore, MemoryStore, ProfileRegistry, StoreError

RECORD = PersonalRecord(
    exercise_id="bench",
    exercise_name="Bench",
    weight=120.0,
    reps=5,
    date="2026-03-03",
    estimated_1rm=140.0,
)

QUEST = Quest(
    id="2026-03-02-0",
    name="Set Machine",
    description="Log 40 sets this week",
    quest_type="sets",
    target=40,
    xp_reward=150,
    start_date="2026-03-02",
    end_date="2026-03-08",
    current=12,
)


def full_log():
    log = make_log("l1", "2026-03-02", [("bench", 10, 100), ("row", 8, 62.5)])
    log.set_entries[0] = replace(log.set_entries[0], difficulty="hard")
    log.end_time = "2026-03-02T09:45:00"
    log.duration_minutes = 45
    log.notes = "felt strong"
    log.check_in = CheckIn(fatigue=4, pain="knee", notes="left knee")
    return log


@pytest.fixture
def json_store(tmp_path):
    return JsonProfileStore(tmp_path)


class TestJsonProfileStore:
    def test_missing_files_load_empty(self, json_store):
        assert not json_store.exists("alice")
        assert json_store.load_all_logs("alice") == []
        assert json_store.load_stats("alice") == UserProfileStats()
        assert json_store.load_prs("alice") == []
        assert json_store.load_quests("alice") == []

    def test_round_trip(self, json_store):
        stats = UserProfileStats(experience_points=470, level=3, current_streak_days=2,
                                 longest_streak_days=5, last_workout_date="2026-03-04")
        json_store.save_all_logs("alice", [full_log()])
        json_store.save_stats("alice", stats)
        json_store.save_prs("alice", [RECORD])
        json_store.save_quests("alice", [QUEST])

        assert json_store.load_all_logs("alice") == [full_log()]
        assert json_store.load_stats("alice") == stats
        assert json_store.load_prs("alice") == [RECORD]
        assert json_store.load_quests("alice") == [QUEST]

    def test_files_are_snake_case_json(self, json_store, tmp_path):
        json_store.save_all_logs("alice", [full_log()])
        data = json.loads((tmp_path / "alice" / "workout_logs.json").read_text())
        assert data[0]["template_id"] == "upper"
        assert data[0]["set_entries"][0]["difficulty"] == "hard"
        assert data[0]["check_in"]["sleep_quality"] == 3
        assert "difficulty" not in data[0]["set_entries"][1]
        assert not list((tmp_path / "alice").glob("*.tmp"))

    def test_stale_total_volume_is_recomputed(self, json_store, tmp_path):
        json_store.save_all_logs("alice", [full_log()])
        path = tmp_path / "alice" / "workout_logs.json"
        data = json.loads(path.read_text())
        data[0]["total_volume"] = 1.0
        path.write_text(json.dumps(data))

        (log,) = json_store.load_all_logs("alice")

        assert log.total_volume == pytest.approx(1000 + 500)

    def test_corrupt_file_raises(self, json_store, tmp_path):
        (tmp_path / "alice").mkdir()
        (tmp_path / "alice" / "stats.json").write_text("{not json")
        with pytest.raises(StoreError):
            json_store.load_stats("alice")

    def test_invalid_item_raises(self, json_store, tmp_path):
        (tmp_path / "alice").mkdir()
        (tmp_path / "alice" / "workout_logs.json").write_text(
            json.dumps([{"id": "x", "date": "03/02/2026", "template_id": "t", "start_time": ""}])
        )
        with pytest.raises(StoreError, match="item 0"):
            json_store.load_all_logs("alice")

    def test_two_unfinished_workouts_on_disk_raise(self, json_store):
        logs = [make_log(log_id, "2026-03-02", [], complete=False) for log_id in ("a", "b")]
        json_store.save_all_logs("alice", logs)
        with pytest.raises(StoreError, match="at most one"):
            json_store.load_all_logs("alice")

    def test_non_list_file_raises(self, json_store, tmp_path):
        (tmp_path / "alice").mkdir()
        (tmp_path / "alice" / "prs.json").write_text("{}")
        with pytest.raises(StoreError, match="Expected a list"):
            json_store.load_prs("alice")

    @pytest.mark.parametrize("profile_id", ["", "../etc", "a b", "x/y"])
    def test_invalid_profile_id(self, json_store, profile_id):
        with pytest.raises(StoreError, match="Invalid profile id"):
            json_store.load_all_logs(profile_id)

    def test_clear_profile(self, json_store):
        json_store.save_all_logs("alice", [full_log()])
        json_store.save_stats("alice", UserProfileStats(experience_points=10))
        json_store.save_all_logs("bob", [full_log()])

        json_store.clear_profile("alice")

        assert json_store.load_all_logs("alice") == []
        assert json_store.load_stats("alice") == UserProfileStats()
        assert len(json_store.load_all_logs("bob")) == 1


class TestExportImport:
    def test_export_then_import_into_other_profile(self, json_store):
        json_store.save_all_logs("alice", [full_log()])
        json_store.save_stats("alice", UserProfileStats(experience_points=180, level=2))
        json_store.save_prs("alice", [RECORD])
        json_store.save_quests("alice", [QUEST])

        bundle = json.loads(json.dumps(json_store.export_profile("alice")))
        count = json_store.import_profile("bob", bundle)

        assert bundle["version"] == 1
        assert bundle["profile_id"] == "alice"
        assert count == 1
        assert json_store.load_all_logs("bob") == json_store.load_all_logs("alice")
        assert json_store.load_stats("bob").experience_points == 180
        assert json_store.load_prs("bob") == [RECORD]
        assert json_store.load_quests("bob") == [QUEST]

    def test_bad_bundle_leaves_data_untouched(self, json_store):
        json_store.save_all_logs("alice", [full_log()])
        bundle = {"workout_logs": [{"id": "x"}], "stats": {}}

        with pytest.raises(StoreError, match="Invalid import data"):
            json_store.import_profile("alice", bundle)

        assert json_store.load_all_logs("alice") == [full_log()]

    def test_non_object_bundle(self, json_store):
        with pytest.raises(StoreError, match="JSON object"):
            json_store.import_profile("alice", [])

    def test_two_unfinished_workouts_rejected(self, json_store):
        json_store.save_all_logs("alice", [full_log()])
        bundle = json.loads(json.dumps(json_store.export_profile("alice")))
        bundle["workout_logs"] = [
            {**bundle["workout_logs"][0], "id": "w1", "is_complete": False},
            {**bundle["workout_logs"][0], "id": "w2", "is_complete": False},
        ]

        with pytest.raises(StoreError, match="2 unfinished workouts"):
            json_store.import_profile("alice", bundle)

        assert json_store.load_all_logs("alice") == [full_log()]

    def test_one_unfinished_workout_accepted(self, json_store):
        wip = make_log("wip", "2026-03-03", [("bench", 10, 100)], complete=False)
        json_store.save_all_logs("alice", [full_log(), wip])
        bundle = json_store.export_profile("alice")

        assert json_store.import_profile("bob", bundle) == 2
        assert json_store.load_all_logs("bob")[1].id == "wip"


class TestMemoryStore:
    def test_loads_are_copies(self):
        store = MemoryStore()
        store.save_all_logs("p", [full_log()])

        loaded = store.load_all_logs("p")
        loaded[0].notes = "changed"

        assert store.load_all_logs("p")[0].notes == "felt strong"
        assert store.save_count == 1

    def test_clear(self):
        store = MemoryStore()
        store.save_stats("p", UserProfileStats(experience_points=5))
        store.clear_profile("p")
        assert store.load_stats("p") == UserProfileStats()


class TestProfileRegistry:
    NOW = datetime(2026, 3, 2, 9, 0, 0)

    def test_create_and_list(self, tmp_path):
        registry = ProfileRegistry(tmp_path)
        profile = registry.create("  Alex ", avatar="dumbbell", profile_id="alex", now=self.NOW)

        assert profile.name == "Alex"
        assert profile.created_at == "2026-03-02T09:00:00"
        assert [p.id for p in registry.list_profiles()] == ["alex"]
        assert registry.get("alex") == profile
        assert registry.get("nobody") is None

    def test_generated_id(self, tmp_path):
        profile = ProfileRegistry(tmp_path).create("Sam")
        assert len(profile.id) == 8

    def test_duplicate_id_rejected(self, tmp_path):
        registry = ProfileRegistry(tmp_path)
        registry.create("Alex", profile_id="alex")
        with pytest.raises(StoreError, match="already exists"):
            registry.create("Other", profile_id="alex")

    def test_blank_name_rejected(self, tmp_path):
        with pytest.raises(StoreError, match="non-empty"):
            ProfileRegistry(tmp_path).create("   ")

    def test_ensure_is_idempotent(self, tmp_path):
        registry = ProfileRegistry(tmp_path)
        first = registry.ensure("default")
        second = registry.ensure("default", name="ignored")
        assert first == second
        assert len(registry.list_profiles()) == 1

    def test_touch_and_delete(self, tmp_path):
        registry = ProfileRegistry(tmp_path)
        registry.create("Alex", profile_id="alex", now=self.NOW)

        assert registry.touch("alex", now=datetime(2026, 3, 5, 18, 30))
        assert registry.get("alex").last_accessed_at == "2026-03-05T18:30:00"
        assert not registry.touch("nobody")

        assert registry.delete("alex")
        assert not registry.delete("alex")
        assert registry.list_profiles() == []

    def test_corrupt_registry(self, tmp_path):
        (tmp_path / "profiles.json").write_text("[{")
        with pytest.raises(StoreError):
            ProfileRegistry(tmp_path).list_profiles()
