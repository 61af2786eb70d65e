"""
YAML → GameConfig loader.

Loads game tuning (XP rewards, level table, default rest) from
liftmeup.yaml (bundled with the package) and optionally merges user
overrides from ~/.liftmeup/config.yaml.

Usage:
    from liftmeup.core.config_loader import load_game_config
    cfg = load_game_config()
    cfg.reward("complete_set")

If the bundled YAML cannot be parsed, the Python defaults from config.py
are used (no crash).  If the user override file exists but has parse
errors or invalid values, a warning is issued and the file is ignored.
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any

import yaml

from .config import (
    DEFAULT_REST_SECONDS,
    LEVEL_THRESHOLDS,
    MAX_REST_SECONDS,
    XP_REWARDS,
    GameConfig,
    get_data_root,
)
from .models import LevelThreshold

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any] | None:
    """Load a single YAML file; None when it cannot be read or parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        return None
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _parse_levels(raw: list) -> list[LevelThreshold]:
    levels = [
        LevelThreshold(
            level=int(row["level"]),
            xp_required=int(row["xp_required"]),
            title=str(row.get("title", f"Level {row['level']}")),
        )
        for row in raw
    ]
    levels.sort(key=lambda t: t.xp_required)
    if not levels:
        raise ValueError("level table is empty")
    if levels[0].xp_required != 0:
        raise ValueError("the lowest level must require 0 XP")
    for prev, cur in zip(levels, levels[1:]):
        if cur.level <= prev.level:
            raise ValueError("level numbers must increase with xp_required")
    return levels


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled liftmeup.yaml, or None if not found."""
    candidate = Path(__file__).parent.parent / "liftmeup.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path(root: Path | None = None) -> Path | None:
    """Return <root>/config.yaml if it exists, else None (root defaults to the data root)."""
    p = (root if root is not None else get_data_root()) / "config.yaml"
    return p if p.exists() else None


def game_config_from_dict(data: dict[str, Any]) -> GameConfig:
    """
    Build a GameConfig from a merged config dict.

    Missing sections fall back to the constants in config.py.

    Raises:
        ValueError: If a section is present but malformed
    """
    rewards = dict(XP_REWARDS)
    for action, amount in (data.get("rewards") or {}).items():
        amount = int(amount)
        if amount < 0:
            raise ValueError(f"reward {action!r} must be non-negative, got {amount}")
        rewards[str(action)] = amount

    raw_levels = data.get("levels")
    try:
        levels = _parse_levels(raw_levels) if raw_levels else list(LEVEL_THRESHOLDS)
    except (KeyError, TypeError) as e:
        raise ValueError(f"invalid level table: {e}") from e

    rest = int((data.get("rest") or {}).get("default_seconds", DEFAULT_REST_SECONDS))
    if not 0 < rest <= MAX_REST_SECONDS:
        raise ValueError(f"rest.default_seconds must be in 1..{MAX_REST_SECONDS}, got {rest}")

    return GameConfig(rewards=rewards, level_thresholds=levels, default_rest_seconds=rest)


def load_model_config(root: Path | None = None) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/liftmeup/liftmeup.yaml
    2. User override at <root>/config.yaml (default ~/.liftmeup/config.yaml)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled) or {})

    user = get_user_yaml_path(root)
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg is None:
            warnings.warn(
                f"liftmeup: could not parse {user}; using bundled settings.",
                stacklevel=2,
            )
        elif user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def load_game_config(root: Path | None = None) -> GameConfig:
    """Return the effective GameConfig (bundled YAML + user overrides under root)."""
    try:
        return game_config_from_dict(load_model_config(root))
    except ValueError as exc:
        warnings.warn(
            f"liftmeup: invalid game config ({exc}); using Python defaults.",
            stacklevel=2,
        )
        return GameConfig()
