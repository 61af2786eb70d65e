"""
Workout template catalog for liftmeup.

Templates define the exercises of a workout and how many sets each one
needs; the session engine derives progress by counting logged sets
against them.
"""

from .loader import load_templates_from_yaml, save_user_template, template_from_dict
from .registry import WorkoutCatalog, get_catalog

__all__ = [
    "WorkoutCatalog",
    "get_catalog",
    "load_templates_from_yaml",
    "save_user_template",
    "template_from_dict",
]
