"""
JSON file storage for liftmeup profiles.

Each profile lives in its own directory under the data root:

    <root>/profiles.json                 registry of local profiles
    <root>/<profile_id>/workout_logs.json
    <root>/<profile_id>/stats.json
    <root>/<profile_id>/prs.json
    <root>/<profile_id>/quests.json

Every save rewrites the whole file with a full snapshot, so writing the
same state twice is harmless.
"""

import copy
import json
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from ..core.config import get_data_root
from ..core.models import PersonalRecord, Profile, Quest, UserProfileStats, WorkoutLog
from ..core.ports import PersistenceError
from .serializers import (
    ValidationError,
    dict_to_personal_record,
    dict_to_profile,
    dict_to_quest,
    dict_to_stats,
    dict_to_workout_log,
    personal_record_to_dict,
    profile_to_dict,
    quest_to_dict,
    stats_to_dict,
    to_json,
    workout_log_to_dict,
)

EXPORT_VERSION = 1

_PROFILE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class StoreError(PersistenceError):
    """Raised when a profile file cannot be read, parsed, or written."""

    pass


def _check_profile_id(profile_id: str) -> str:
    if not _PROFILE_ID_RE.match(profile_id or ""):
        raise StoreError(f"Invalid profile id: {profile_id!r}")
    return profile_id


def _check_unfinished(logs: list[WorkoutLog], source: str) -> None:
    """At most one workout may be in progress per profile."""
    unfinished = [log.id for log in logs if not log.is_complete]
    if len(unfinished) > 1:
        raise StoreError(
            f"{source} has {len(unfinished)} unfinished workouts "
            f"({', '.join(unfinished)}); at most one is allowed"
        )


class JsonProfileStore:
    """
    Per-profile JSON files implementing the log, stats, PR and quest stores.

    Missing files load as empty state; unreadable or invalid files raise
    StoreError rather than being silently replaced.
    """

    LOGS_FILE = "workout_logs.json"
    STATS_FILE = "stats.json"
    PRS_FILE = "prs.json"
    QUESTS_FILE = "quests.json"

    def __init__(self, root: str | Path | None = None):
        """
        Initialize the store.

        Args:
            root: Data directory; defaults to $LIFTMEUP_HOME or ~/.liftmeup
        """
        self.root = Path(root) if root is not None else get_data_root()

    def profile_dir(self, profile_id: str) -> Path:
        return self.root / _check_profile_id(profile_id)

    def exists(self, profile_id: str) -> bool:
        return self.profile_dir(profile_id).exists()

    # ── raw file access ─────────────────────────────────────────────────────

    def _read(self, profile_id: str, filename: str) -> Any:
        path = self.profile_dir(profile_id) / filename
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Error reading {path}: {e}") from e

    def _write(self, profile_id: str, filename: str, data: Any) -> None:
        directory = self.profile_dir(profile_id)
        path = directory / filename
        tmp = path.with_suffix(".tmp")
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(to_json(data))
            tmp.replace(path)
        except OSError as e:
            raise StoreError(f"Error writing {path}: {e}") from e

    def _load_list(
        self,
        profile_id: str,
        filename: str,
        convert: Callable[[dict[str, Any]], Any],
    ) -> list:
        data = self._read(profile_id, filename)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreError(f"Expected a list in {filename} for profile {profile_id}")
        items = []
        for i, item in enumerate(data):
            try:
                items.append(convert(item))
            except (ValidationError, ValueError, TypeError, AttributeError) as e:
                raise StoreError(
                    f"Error parsing item {i} in {filename} for profile {profile_id}: {e}"
                ) from e
        return items

    # ── LogStore ────────────────────────────────────────────────────────────

    def load_all_logs(self, profile_id: str) -> list[WorkoutLog]:
        logs = self._load_list(profile_id, self.LOGS_FILE, dict_to_workout_log)
        _check_unfinished(logs, f"{self.LOGS_FILE} for profile {profile_id}")
        return logs

    def save_all_logs(self, profile_id: str, logs: list[WorkoutLog]) -> None:
        self._write(profile_id, self.LOGS_FILE, [workout_log_to_dict(log) for log in logs])

    # ── StatsStore ──────────────────────────────────────────────────────────

    def load_stats(self, profile_id: str) -> UserProfileStats:
        data = self._read(profile_id, self.STATS_FILE)
        if data is None:
            return UserProfileStats()
        try:
            return dict_to_stats(data)
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            raise StoreError(f"Error parsing stats for profile {profile_id}: {e}") from e

    def save_stats(self, profile_id: str, stats: UserProfileStats) -> None:
        self._write(profile_id, self.STATS_FILE, stats_to_dict(stats))

    # ── PRStore ─────────────────────────────────────────────────────────────

    def load_prs(self, profile_id: str) -> list[PersonalRecord]:
        return self._load_list(profile_id, self.PRS_FILE, dict_to_personal_record)

    def save_prs(self, profile_id: str, records: list[PersonalRecord]) -> None:
        self._write(profile_id, self.PRS_FILE, [personal_record_to_dict(r) for r in records])

    # ── QuestStore ──────────────────────────────────────────────────────────

    def load_quests(self, profile_id: str) -> list[Quest]:
        return self._load_list(profile_id, self.QUESTS_FILE, dict_to_quest)

    def save_quests(self, profile_id: str, quests: list[Quest]) -> None:
        self._write(profile_id, self.QUESTS_FILE, [quest_to_dict(q) for q in quests])

    # ── export / import / clear ─────────────────────────────────────────────

    def export_profile(self, profile_id: str) -> dict[str, Any]:
        """
        Bundle everything stored for a profile into one JSON-compatible dict.

        Raises:
            StoreError: If any profile file is unreadable
        """
        return {
            "version": EXPORT_VERSION,
            "exported_at": datetime.now().isoformat(timespec="seconds"),
            "profile_id": profile_id,
            "workout_logs": [workout_log_to_dict(log) for log in self.load_all_logs(profile_id)],
            "stats": stats_to_dict(self.load_stats(profile_id)),
            "prs": [personal_record_to_dict(r) for r in self.load_prs(profile_id)],
            "quests": [quest_to_dict(q) for q in self.load_quests(profile_id)],
        }

    def import_profile(self, profile_id: str, bundle: dict[str, Any]) -> int:
        """
        Replace a profile's data with an exported bundle.

        The bundle is fully validated before anything is written, so a bad
        file leaves the existing data untouched.

        Returns:
            Number of workout logs imported

        Raises:
            StoreError: If the bundle is malformed or holds more than one
                unfinished workout
        """
        if not isinstance(bundle, dict):
            raise StoreError("Import data must be a JSON object")
        try:
            logs = [dict_to_workout_log(d) for d in bundle.get("workout_logs", [])]
            stats = dict_to_stats(bundle.get("stats") or {})
            records = [dict_to_personal_record(d) for d in bundle.get("prs", [])]
            quests = [dict_to_quest(d) for d in bundle.get("quests", [])]
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            raise StoreError(f"Invalid import data: {e}") from e
        _check_unfinished(logs, "Import data")

        self.save_all_logs(profile_id, logs)
        self.save_stats(profile_id, stats)
        self.save_prs(profile_id, records)
        self.save_quests(profile_id, quests)
        return len(logs)

    def clear_profile(self, profile_id: str) -> None:
        """Delete all data files of a profile (dangerous - use with caution)."""
        directory = self.profile_dir(profile_id)
        for filename in (self.LOGS_FILE, self.STATS_FILE, self.PRS_FILE, self.QUESTS_FILE):
            path = directory / filename
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StoreError(f"Error deleting {path}: {e}") from e


class MemoryStore:
    """In-process store with the same interface as JsonProfileStore."""

    def __init__(self) -> None:
        self._logs: dict[str, list[WorkoutLog]] = {}
        self._stats: dict[str, UserProfileStats] = {}
        self._prs: dict[str, list[PersonalRecord]] = {}
        self._quests: dict[str, list[Quest]] = {}
        self.save_count = 0

    def load_all_logs(self, profile_id: str) -> list[WorkoutLog]:
        logs = copy.deepcopy(self._logs.get(profile_id, []))
        _check_unfinished(logs, f"Stored logs for profile {profile_id}")
        return logs

    def save_all_logs(self, profile_id: str, logs: list[WorkoutLog]) -> None:
        self._logs[profile_id] = copy.deepcopy(list(logs))
        self.save_count += 1

    def load_stats(self, profile_id: str) -> UserProfileStats:
        return copy.deepcopy(self._stats.get(profile_id, UserProfileStats()))

    def save_stats(self, profile_id: str, stats: UserProfileStats) -> None:
        self._stats[profile_id] = copy.deepcopy(stats)
        self.save_count += 1

    def load_prs(self, profile_id: str) -> list[PersonalRecord]:
        return copy.deepcopy(self._prs.get(profile_id, []))

    def save_prs(self, profile_id: str, records: list[PersonalRecord]) -> None:
        self._prs[profile_id] = copy.deepcopy(list(records))
        self.save_count += 1

    def load_quests(self, profile_id: str) -> list[Quest]:
        return copy.deepcopy(self._quests.get(profile_id, []))

    def save_quests(self, profile_id: str, quests: list[Quest]) -> None:
        self._quests[profile_id] = copy.deepcopy(list(quests))
        self.save_count += 1

    def clear_profile(self, profile_id: str) -> None:
        for bucket in (self._logs, self._stats, self._prs, self._quests):
            bucket.pop(profile_id, None)


class ProfileRegistry:
    """
    The list of local profiles, stored in <root>/profiles.json.
    """

    FILENAME = "profiles.json"

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root) if root is not None else get_data_root()
        self.path = self.root / self.FILENAME

    def list_profiles(self) -> list[Profile]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [dict_to_profile(d) for d in data]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError, AttributeError) as e:
            raise StoreError(f"Error reading {self.path}: {e}") from e

    def _write(self, profiles: list[Profile]) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(to_json([profile_to_dict(p) for p in profiles]))
        except OSError as e:
            raise StoreError(f"Error writing {self.path}: {e}") from e

    def get(self, profile_id: str) -> Profile | None:
        for profile in self.list_profiles():
            if profile.id == profile_id:
                return profile
        return None

    def create(
        self,
        name: str,
        avatar: str = "",
        profile_id: str | None = None,
        now: datetime | None = None,
    ) -> Profile:
        """
        Register a new profile.

        Raises:
            StoreError: If the id is invalid or already taken
        """
        if not name or not name.strip():
            raise StoreError("Profile name must be non-empty")
        profile_id = _check_profile_id(profile_id or uuid.uuid4().hex[:8])
        profiles = self.list_profiles()
        if any(p.id == profile_id for p in profiles):
            raise StoreError(f"Profile {profile_id!r} already exists")
        stamp = (now or datetime.now()).isoformat(timespec="seconds")
        profile = Profile(
            id=profile_id,
            name=name.strip(),
            avatar=avatar,
            created_at=stamp,
            last_accessed_at=stamp,
        )
        profiles.append(profile)
        self._write(profiles)
        return profile

    def ensure(self, profile_id: str, name: str | None = None) -> Profile:
        """Return the profile, registering it first if it does not exist yet."""
        existing = self.get(profile_id)
        if existing is not None:
            return existing
        return self.create(name or profile_id, profile_id=profile_id)

    def touch(self, profile_id: str, now: datetime | None = None) -> bool:
        """Update last_accessed_at. Returns False for an unknown profile."""
        profiles = self.list_profiles()
        for profile in profiles:
            if profile.id == profile_id:
                profile.last_accessed_at = (now or datetime.now()).isoformat(timespec="seconds")
                self._write(profiles)
                return True
        return False

    def delete(self, profile_id: str) -> bool:
        """Remove a profile from the registry (its data files are left alone)."""
        profiles = self.list_profiles()
        remaining = [p for p in profiles if p.id != profile_id]
        if len(remaining) == len(profiles):
            return False
        self._write(remaining)
        return True
