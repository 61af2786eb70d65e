"""Profile management commands: profiles, create-profile, export, import, reset, delete-profile."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.ports import PersistenceError
from ...io.profile_store import JsonProfileStore, ProfileRegistry
from ...io.serializers import profile_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, ProfileOption, app, data_root, get_tracker


@app.command()
def profiles(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List local profiles.
    """
    try:
        items = ProfileRegistry(data_root(data_dir)).list_profiles()
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([profile_to_dict(p) for p in items], indent=2))
        return
    if not items:
        views.print_info("No profiles yet. Any command creates the 'default' profile.")
        return
    views.console.print(views.format_profiles_table(items))


@app.command("create-profile")
def create_profile(
    name: Annotated[str, typer.Argument(help="Display name")],
    profile_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Profile id (letters, digits, - and _; default: generated)"),
    ] = None,
    avatar: Annotated[str, typer.Option("--avatar", help="Avatar (emoji or short text)")] = "",
    data_dir: DataDirOption = None,
) -> None:
    """
    Create a new profile.
    """
    try:
        created = ProfileRegistry(data_root(data_dir)).create(
            name, avatar=avatar, profile_id=profile_id
        )
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Created profile '{created.name}' (id: {created.id})")
    views.print_info(f"Use it with --profile {created.id}")


@app.command()
def export(
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to this file (default: stdout)"),
    ] = None,
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
) -> None:
    """
    Export all data of a profile as JSON.
    """
    root = data_root(data_dir)
    try:
        bundle = JsonProfileStore(root).export_profile(profile)
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    text = json.dumps(bundle, indent=2)
    if output is None:
        print(text)
        return
    output.write_text(text, encoding="utf-8")
    views.print_success(f"Exported {len(bundle['workout_logs'])} workouts to {output}")


@app.command("import")
def import_data(
    source: Annotated[Path, typer.Argument(help="JSON file created by 'export'")],
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Replace a profile's data with an exported file.
    """
    try:
        bundle = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        views.print_error(f"Cannot read {source}: {e}")
        raise typer.Exit(1)

    if not force and not views.confirm_action(
        f"Replace all data of profile '{profile}' with {source.name}?"
    ):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    root = data_root(data_dir)
    try:
        ProfileRegistry(root).ensure(profile)
        count = JsonProfileStore(root).import_profile(profile, bundle)
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Imported {count} workouts into profile '{profile}'")


@app.command()
def reset(
    profile: ProfileOption = "default",
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Delete every workout, record, quest and stat of a profile.
    """
    if not force and not views.confirm_action(
        f"Delete ALL data of profile '{profile}'? This cannot be undone."
    ):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    tracker = get_tracker(profile, data_dir)
    try:
        tracker.reset_all()
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"All data of profile '{profile}' was deleted.")


@app.command("delete-profile")
def delete_profile(
    profile_id: Annotated[str, typer.Argument(help="Profile id to delete")],
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Remove a profile and all of its data.
    """
    root = data_root(data_dir)
    registry = ProfileRegistry(root)
    store = JsonProfileStore(root)
    try:
        known = registry.get(profile_id) is not None or store.exists(profile_id)
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if not known:
        views.print_error(f"No profile '{profile_id}'.")
        raise typer.Exit(1)

    if not force and not views.confirm_action(
        f"Delete profile '{profile_id}' and ALL of its data? This cannot be undone."
    ):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.clear_profile(profile_id)
        registry.delete(profile_id)
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Profile '{profile_id}' was deleted.")
