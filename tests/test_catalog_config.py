"""
Tests for YAML loading: workout templates and game tuning.

Every test points LIFTMEUP_HOME at a temporary directory so the real
~/.liftmeup is never read.
"""

import pytest
import yaml

from conftest import make_template
from liftmeup.core.catalog import (
    WorkoutCatalog,
    get_catalog,
    load_templates_from_yaml,
    save_user_template,
    template_from_dict,
)
from liftmeup.core.config import DEFAULT_REST_SECONDS, XP_REWARDS, GameConfig
from liftmeup.core.config_loader import game_config_from_dict, load_game_config

RAW_TEMPLATE = {
    "id": "push_day",
    "name": "Push Day",
    "exercises": [
        {"id": "bench_press", "name": "Bench Press", "sets": 4,
         "rep_range": [6, 10], "weight_range": [95, 185]},
        {"id": "dips", "name": "Dips", "sets": 3,
         "rep_range": [8, 12], "weight_range": [0, 45]},
    ],
}


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("LIFTMEUP_HOME", str(tmp_path / "home"))
    return tmp_path / "home"


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestTemplateFromDict:
    def test_parses_exercises_in_order(self):
        tpl = template_from_dict(RAW_TEMPLATE)
        assert tpl.template_id == "push_day"
        assert [e.exercise_id for e in tpl.exercises] == ["bench_press", "dips"]
        assert tpl.exercises[0].rep_range == (6, 10)
        assert tpl.exercises[1].weight_range == (0.0, 45.0)
        assert tpl.exercises[0].unit == "lbs"

    def test_missing_field(self):
        with pytest.raises(ValueError, match="missing fields"):
            template_from_dict({"id": "x", "name": "X"})

    def test_bad_range(self):
        raw = {**RAW_TEMPLATE, "exercises": [{**RAW_TEMPLATE["exercises"][0], "rep_range": [6]}]}
        with pytest.raises(ValueError, match="rep_range"):
            template_from_dict(raw)


class TestLoadTemplates:
    def test_bundled_templates(self):
        templates = load_templates_from_yaml()
        assert list(templates) == ["leg_day", "pull_day", "push_day"]
        assert all(len(t.exercises) == 4 for t in templates.values())

    def test_user_override_is_merged(self, tmp_path):
        bundled = tmp_path / "bundled"
        user = tmp_path / "user"
        write_yaml(bundled / "push_day.yaml", RAW_TEMPLATE)
        write_yaml(user / "push_day.yaml", {"name": "My Push"})

        templates = load_templates_from_yaml(bundled, user)

        assert templates["push_day"].name == "My Push"
        assert len(templates["push_day"].exercises) == 2

    def test_user_only_file_is_a_new_workout(self, tmp_path):
        bundled = tmp_path / "bundled"
        user = tmp_path / "user"
        write_yaml(bundled / "push_day.yaml", RAW_TEMPLATE)
        write_yaml(user / "arms.yaml", {**RAW_TEMPLATE, "id": "arms", "name": "Arms"})

        templates = load_templates_from_yaml(bundled, user)

        assert list(templates) == ["push_day", "arms"]

    def test_invalid_file_is_skipped_with_warning(self, tmp_path):
        bundled = tmp_path / "bundled"
        write_yaml(bundled / "a.yaml", RAW_TEMPLATE)
        write_yaml(bundled / "b.yaml", {"id": "b", "name": "B"})

        with pytest.warns(UserWarning, match="skipping workout 'b'"):
            templates = load_templates_from_yaml(bundled, tmp_path / "missing")

        assert list(templates) == ["push_day"]

    def test_nothing_loadable(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert load_templates_from_yaml(tmp_path / "empty", tmp_path / "missing") is None

    def test_saved_custom_workout_loads_back(self, tmp_path):
        user = tmp_path / "user"
        template = make_template("custom", sets=(2, 1))

        path = save_user_template(template, user)
        templates = load_templates_from_yaml(tmp_path / "missing", user)

        assert path.name == "custom.yaml"
        assert templates["custom"].exercises == template.exercises

    def test_catalog_follows_data_root(self, tmp_path):
        root = tmp_path / "data"
        save_user_template(make_template("custom"), root / "workouts")

        assert "custom" in get_catalog(root=root)
        assert "custom" not in get_catalog(root=tmp_path / "other")
        assert "push_day" in get_catalog(root=tmp_path / "other")


class TestWorkoutCatalog:
    def test_lookup(self):
        catalog = WorkoutCatalog([make_template("upper"), make_template("lower", sets=(2,))])
        assert catalog.get_template("upper").template_id == "upper"
        assert catalog.get_template("nope") is None
        assert "lower" in catalog
        assert len(catalog) == 2
        assert catalog.ids() == ["upper", "lower"]

    def test_exercise_names(self):
        catalog = WorkoutCatalog([make_template("upper")])
        assert catalog.exercise_name("row") == "Row"
        assert catalog.exercise_name("deadlift") == "deadlift"


class TestGameConfig:
    def test_bundled_defaults(self):
        cfg = load_game_config()
        assert cfg.rewards == XP_REWARDS
        assert cfg.default_rest_seconds == DEFAULT_REST_SECONDS
        assert cfg.level_thresholds[-1].level == 10

    def test_user_override(self, isolated_home):
        write_yaml(
            isolated_home / "config.yaml",
            {"rewards": {"complete_set": 15}, "rest": {"default_seconds": 60}},
        )
        cfg = load_game_config()
        assert cfg.reward("complete_set") == 15
        assert cfg.reward("complete_workout") == 100
        assert cfg.default_rest_seconds == 60

    def test_explicit_root_wins_over_home(self, tmp_path, isolated_home):
        write_yaml(isolated_home / "config.yaml", {"rewards": {"complete_set": 15}})
        write_yaml(tmp_path / "data" / "config.yaml", {"rewards": {"complete_set": 20}})

        assert load_game_config(tmp_path / "data").reward("complete_set") == 20
        assert load_game_config().reward("complete_set") == 15

    def test_unparseable_override_is_ignored(self, isolated_home):
        isolated_home.mkdir(parents=True)
        (isolated_home / "config.yaml").write_text("rewards: [unclosed", encoding="utf-8")

        with pytest.warns(UserWarning, match="could not parse"):
            cfg = load_game_config()

        assert cfg.rewards == XP_REWARDS

    def test_invalid_values_fall_back_to_defaults(self, isolated_home):
        write_yaml(isolated_home / "config.yaml", {"rest": {"default_seconds": 0}})

        with pytest.warns(UserWarning, match="invalid game config"):
            cfg = load_game_config()

        assert cfg == GameConfig()

    def test_unknown_action_is_worth_nothing(self):
        assert GameConfig().reward("dance") == 0

    def test_level_table_must_start_at_zero(self):
        with pytest.raises(ValueError, match="0 XP"):
            game_config_from_dict({"levels": [{"level": 1, "xp_required": 10}]})

    def test_negative_reward_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            game_config_from_dict({"rewards": {"new_pr": -1}})
