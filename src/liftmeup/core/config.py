"""
Configuration constants for the liftmeup game model.

All adjustable parameters are centralized here for easy tuning.
Values can be overridden per user through ~/.liftmeup/config.yaml
(see config_loader.py); the constants below are the defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .models import LevelThreshold

# =============================================================================
# EXPERIENCE REWARDS
# =============================================================================

XP_COMPLETE_SET: Final[int] = 10  # Every logged set
XP_COMPLETE_EXERCISE: Final[int] = 25  # Set that reaches the exercise's target count
XP_COMPLETE_WORKOUT: Final[int] = 100  # Workout completion bonus
XP_NEW_PR: Final[int] = 50  # New personal record on a set
XP_BEAT_LAST_VOLUME: Final[int] = 50  # Volume beats the last workout of the same template

XP_REWARDS: Final[dict[str, int]] = {
    "complete_set": XP_COMPLETE_SET,
    "complete_exercise": XP_COMPLETE_EXERCISE,
    "complete_workout": XP_COMPLETE_WORKOUT,
    "new_pr": XP_NEW_PR,
    "beat_last_volume": XP_BEAT_LAST_VOLUME,
}

# =============================================================================
# FULL RECALCULATION (after a historical workout is deleted)
# =============================================================================

# PR and volume bonuses are not replayed; only these three terms are.
RECALC_XP_PER_SET: Final[int] = 10
RECALC_XP_PER_EXERCISE: Final[int] = 25
RECALC_XP_PER_WORKOUT: Final[int] = 100

# =============================================================================
# LEVELS
# =============================================================================

LEVEL_THRESHOLDS: Final[list[LevelThreshold]] = [
    LevelThreshold(level=1, xp_required=0, title="Beginner"),
    LevelThreshold(level=2, xp_required=100, title="Novice"),
    LevelThreshold(level=3, xp_required=250, title="Apprentice"),
    LevelThreshold(level=4, xp_required=500, title="Regular"),
    LevelThreshold(level=5, xp_required=1000, title="Dedicated"),
    LevelThreshold(level=6, xp_required=1750, title="Strong"),
    LevelThreshold(level=7, xp_required=2750, title="Athlete"),
    LevelThreshold(level=8, xp_required=4000, title="Beast"),
    LevelThreshold(level=9, xp_required=6000, title="Champion"),
    LevelThreshold(level=10, xp_required=10000, title="Legend"),
]

# =============================================================================
# REST TIMER
# =============================================================================

DEFAULT_REST_SECONDS: Final[int] = 90
MAX_REST_SECONDS: Final[int] = 600

# =============================================================================
# WEEKLY QUESTS
# =============================================================================

QUESTS_PER_WEEK: Final[int] = 2

# (quest_type, name, description, target, xp_reward)
QUEST_TEMPLATES: Final[list[tuple[str, str, str, int, int]]] = [
    ("workouts", "Triple Threat", "Complete 3 workouts this week", 3, 150),
    ("workouts", "Consistency Counts", "Complete 4 workouts this week", 4, 250),
    ("sets", "Set Machine", "Log 40 sets this week", 40, 150),
    ("volume", "Heavy Lifter", "Move 20,000 total volume this week", 20000, 200),
    ("streak", "On Fire", "Reach a 3-day streak", 3, 150),
    ("variety", "Mix It Up", "Complete 3 different workouts this week", 3, 200),
]

# =============================================================================
# STORAGE
# =============================================================================

DEFAULT_PROFILE_ID: Final[str] = "default"


def get_data_root() -> Path:
    """Return the data directory: $LIFTMEUP_HOME or ~/.liftmeup."""
    env = os.environ.get("LIFTMEUP_HOME")
    if env:
        return Path(env).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".liftmeup"


@dataclass(frozen=True)
class GameConfig:
    """Tunable game parameters, merged from YAML over the constants above."""

    rewards: dict[str, int] = field(default_factory=lambda: dict(XP_REWARDS))
    level_thresholds: list[LevelThreshold] = field(
        default_factory=lambda: list(LEVEL_THRESHOLDS)
    )
    default_rest_seconds: int = DEFAULT_REST_SECONDS

    def reward(self, action: str) -> int:
        """XP for an action name; unknown actions are worth nothing."""
        return int(self.rewards.get(action, 0))


DEFAULT_GAME_CONFIG: Final[GameConfig] = GameConfig()
