"""
Workout catalog.

All workout templates are looked up here.  Use get_catalog() for the
process-wide catalog built from the bundled YAML files (plus user files
in ``<data root>/workouts/``), or build a WorkoutCatalog directly from
templates in tests.
"""

from pathlib import Path

from ..models import WorkoutTemplate


class WorkoutCatalog:
    """
    Read-only lookup of workout templates by id.

    A missing template is reported as None, never as an exception.
    """

    def __init__(self, templates: dict[str, WorkoutTemplate] | list[WorkoutTemplate]):
        if isinstance(templates, dict):
            self._templates = dict(templates)
        else:
            self._templates = {t.template_id: t for t in templates}
        self._exercise_names: dict[str, str] = {}
        for tpl in self._templates.values():
            for ex in tpl.exercises:
                self._exercise_names.setdefault(ex.exercise_id, ex.name)

    def get_template(self, template_id: str) -> WorkoutTemplate | None:
        return self._templates.get(template_id)

    def exercise_name(self, exercise_id: str) -> str:
        """Display name for an exercise id; the raw id when unknown."""
        return self._exercise_names.get(exercise_id, exercise_id)

    def templates(self) -> list[WorkoutTemplate]:
        return list(self._templates.values())

    def ids(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)


_DEFAULT_CATALOG: WorkoutCatalog | None = None
_DEFAULT_ROOT: Path | None = None


def _build_catalog(root: Path | None = None) -> WorkoutCatalog:
    from .loader import get_user_workouts_dir, load_templates_from_yaml

    loaded = load_templates_from_yaml(user_dir=get_user_workouts_dir(root))
    if not loaded:
        raise RuntimeError(
            "liftmeup: no workout templates could be loaded from YAML. "
            "Check that src/liftmeup/workouts/*.yaml files are present and valid."
        )
    return WorkoutCatalog(loaded)


def get_catalog(reload: bool = False, root: Path | None = None) -> WorkoutCatalog:
    """
    Return the default catalog, building it on first use.

    Args:
        reload: Rebuild from disk (e.g. after saving a custom workout)
        root: Data directory whose workouts/ holds user templates;
            asking for a different root than the cached one rebuilds

    Raises:
        RuntimeError: If no template could be loaded at all
    """
    global _DEFAULT_CATALOG, _DEFAULT_ROOT
    if _DEFAULT_CATALOG is None or reload or root != _DEFAULT_ROOT:
        _DEFAULT_CATALOG = _build_catalog(root)
        _DEFAULT_ROOT = root
    return _DEFAULT_CATALOG
