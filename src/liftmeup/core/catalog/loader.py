"""
YAML → WorkoutTemplate loader.

Loads workout templates from individual YAML files in the bundled
``src/liftmeup/workouts/`` directory.  Each file (e.g. push_day.yaml)
contains one template: an id, a name, and an ordered exercise list.

User overrides: place matching files in ``~/.liftmeup/workouts/``.
A user file is deep-merged over the bundled template, so only changed
keys need to be listed.  A user file whose stem does not match any
bundled file is treated as a new (custom) workout.

Usage (internal, called by registry.py):
    from .loader import load_templates_from_yaml
    templates = load_templates_from_yaml()   # dict or None on failure
"""

from __future__ import annotations

import warnings
from pathlib import Path

from ..config import get_data_root
from ..models import ExerciseTemplate, WorkoutTemplate

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {"id", "name", "sets", "rep_range", "weight_range"}
)

_REQUIRED_TEMPLATE_FIELDS: frozenset[str] = frozenset({"id", "name", "exercises"})


def _pair(value, name: str, cast) -> tuple:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{name} must be a [low, high] pair, got {value!r}")
    return (cast(value[0]), cast(value[1]))


def exercise_from_dict(d: dict) -> ExerciseTemplate:
    """Convert a raw dict to an ExerciseTemplate, raising ValueError on missing fields."""
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"ExerciseTemplate missing fields: {sorted(missing)}")
    return ExerciseTemplate(
        exercise_id=str(d["id"]),
        name=str(d["name"]),
        sets=int(d["sets"]),
        rep_range=_pair(d["rep_range"], "rep_range", int),
        weight_range=_pair(d["weight_range"], "weight_range", float),
        unit=str(d.get("unit", "lbs")),
    )


def template_from_dict(d: dict) -> WorkoutTemplate:
    """Convert a raw dict (from YAML) to a WorkoutTemplate.

    Raises ValueError if any required field is absent or invalid.
    """
    missing = _REQUIRED_TEMPLATE_FIELDS - set(d)
    if missing:
        raise ValueError(f"WorkoutTemplate missing fields: {sorted(missing)}")
    raw_exercises = d["exercises"]
    if not isinstance(raw_exercises, list):
        raise ValueError("exercises must be a list")
    return WorkoutTemplate(
        template_id=str(d["id"]),
        name=str(d["name"]),
        description=str(d.get("description", "")),
        exercises=tuple(exercise_from_dict(e) for e in raw_exercises),
    )


def template_to_dict(template: WorkoutTemplate) -> dict:
    """Inverse of template_from_dict, used when saving custom workouts."""
    return {
        "id": template.template_id,
        "name": template.name,
        "description": template.description,
        "exercises": [
            {
                "id": e.exercise_id,
                "name": e.name,
                "sets": e.sets,
                "rep_range": list(e.rep_range),
                "weight_range": list(e.weight_range),
                "unit": e.unit,
            }
            for e in template.exercises
        ],
    }


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} on any error."""
    import yaml

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_bundled_workouts_dir() -> Path | None:
    """Return path to the bundled workouts/ data directory, or None if not found."""
    # loader.py lives at src/liftmeup/core/catalog/loader.py
    # three levels up → src/liftmeup/
    candidate = Path(__file__).parent.parent.parent / "workouts"
    return candidate if candidate.is_dir() else None


def get_user_workouts_dir(root: Path | None = None) -> Path:
    """Return <root>/workouts/, default ~/.liftmeup/workouts/ (may not exist yet)."""
    return (root if root is not None else get_data_root()) / "workouts"


def load_templates_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[str, WorkoutTemplate] | None:
    """Return {template_id: WorkoutTemplate} loaded from per-template YAML files.

    Loads each ``<name>.yaml`` from the bundled workouts/ directory.
    If a matching file exists in the user directory it is deep-merged over
    the bundled template.  User-only files are loaded as new templates.

    Returns None (rather than raising) so the registry can decide how to fail.
    """
    if bundled_dir is None:
        bundled_dir = get_bundled_workouts_dir()
    if user_dir is None:
        user_dir = get_user_workouts_dir()
    if user_dir is not None and not user_dir.is_dir():
        user_dir = None

    if bundled_dir is None and user_dir is None:
        return None

    stems: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_only: list[Path] = []
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            if p.stem not in stems:
                user_only.append(p)

    result: dict[str, WorkoutTemplate] = {}

    for stem, bundled_path in stems.items():
        raw = _load_yaml_file(bundled_path)
        if not raw:
            continue
        if user_dir is not None:
            user_path = user_dir / f"{stem}.yaml"
            if user_path.exists():
                user_raw = _load_yaml_file(user_path)
                if user_raw:
                    raw = _deep_merge(raw, user_raw)
        try:
            tpl = template_from_dict(raw)
            result[tpl.template_id] = tpl
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"liftmeup: skipping workout '{stem}': {exc}",
                stacklevel=2,
            )

    for p in user_only:
        raw = _load_yaml_file(p)
        if not raw:
            continue
        try:
            tpl = template_from_dict(raw)
            result[tpl.template_id] = tpl
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"liftmeup: skipping user workout '{p.stem}': {exc}",
                stacklevel=2,
            )

    return result if result else None


def save_user_template(template: WorkoutTemplate, user_dir: Path | None = None) -> Path:
    """Write a custom workout to the user directory and return its path."""
    import yaml

    target_dir = user_dir or get_user_workouts_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"{template.template_id}.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(template_to_dict(template), fh, sort_keys=False)
    return path
