"""Shared Typer app object, shared option types, and tracker utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..core.catalog import WorkoutCatalog, get_catalog
from ..core.config import DEFAULT_PROFILE_ID, get_data_root
from ..core.config_loader import load_game_config
from ..core.ports import PersistenceError
from ..core.tracker import Tracker
from ..io.profile_store import JsonProfileStore, ProfileRegistry
from . import views

# Shared options used across all commands
ProfileOption = Annotated[
    str,
    typer.Option("--profile", "-P", help="Profile id (default: default)"),
]
DataDirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--data-dir",
        help="Data directory for profiles, custom workouts and config.yaml "
        "(default: $LIFTMEUP_HOME or ~/.liftmeup)",
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="liftmeup",
    help="Gamified strength-training tracker: log sets, earn XP, keep your streak.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Gamified strength-training tracker.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=views.err_console, show_path=False)],
        force=True,
    )


def data_root(data_dir: Path | None) -> Path:
    return data_dir if data_dir is not None else get_data_root()


def load_catalog(data_dir: Path | None = None) -> WorkoutCatalog:
    """Bundled workouts plus the custom ones under the data directory."""
    try:
        return get_catalog(root=data_root(data_dir))
    except RuntimeError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def get_tracker(profile: str = DEFAULT_PROFILE_ID, data_dir: Path | None = None) -> Tracker:
    """
    Open a profile, registering it on first use.

    Stores, custom workouts and config.yaml are all read from the same
    data directory.  Prints the error and exits with status 1 when the
    data cannot be loaded.
    """
    root = data_root(data_dir)
    try:
        registry = ProfileRegistry(root)
        registry.ensure(profile)
        registry.touch(profile)
        return Tracker(
            JsonProfileStore(root),
            profile,
            catalog=get_catalog(root=root),
            config=load_game_config(root),
            sink=views.print_event,
        )
    except (PersistenceError, RuntimeError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
