"""
JSON serialization for liftmeup data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.models import (
    DIFFICULTIES,
    PAIN_OPTIONS,
    QUEST_TYPES,
    CheckIn,
    PersonalRecord,
    Profile,
    Quest,
    SetEntry,
    UserProfileStats,
    WorkoutLog,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative or not a number
    """
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    validate_non_negative(value, name)
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def _require(data: dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError as e:
        raise ValidationError(f"Missing field: {key}") from e


# =============================================================================
# Workout logs
# =============================================================================


def set_entry_to_dict(entry: SetEntry) -> dict[str, Any]:
    d: dict[str, Any] = {
        "id": entry.id,
        "exercise_id": entry.exercise_id,
        "set_number": entry.set_number,
        "actual_reps": entry.actual_reps,
        "weight": entry.weight,
        "timestamp": entry.timestamp,
    }
    if entry.difficulty is not None:
        d["difficulty"] = entry.difficulty
    return d


def dict_to_set_entry(data: dict[str, Any]) -> SetEntry:
    """
    Convert dict to SetEntry.

    Raises:
        ValidationError: If data is invalid
    """
    validate_positive(_require(data, "set_number"), "set_number")
    validate_non_negative(_require(data, "actual_reps"), "actual_reps")
    validate_non_negative(_require(data, "weight"), "weight")
    difficulty = data.get("difficulty")
    if difficulty is not None and difficulty not in DIFFICULTIES:
        raise ValidationError(f"Invalid difficulty: {difficulty!r}. Must be one of {DIFFICULTIES}")

    return SetEntry(
        id=str(_require(data, "id")),
        exercise_id=str(_require(data, "exercise_id")),
        set_number=int(data["set_number"]),
        actual_reps=int(data["actual_reps"]),
        weight=float(data["weight"]),
        difficulty=difficulty,
        timestamp=str(data.get("timestamp", "")),
    )


def check_in_to_dict(check_in: CheckIn) -> dict[str, Any]:
    return {
        "fatigue": check_in.fatigue,
        "difficulty": check_in.difficulty,
        "recovery": check_in.recovery,
        "sleep_quality": check_in.sleep_quality,
        "motivation": check_in.motivation,
        "pain": check_in.pain,
        "notes": check_in.notes,
    }


def dict_to_check_in(data: dict[str, Any]) -> CheckIn:
    """
    Convert dict to CheckIn.

    Raises:
        ValidationError: If a rating is out of range or pain is unknown
    """
    pain = data.get("pain", "none")
    if pain not in PAIN_OPTIONS:
        raise ValidationError(f"Invalid pain: {pain!r}. Must be one of {PAIN_OPTIONS}")
    try:
        return CheckIn(
            fatigue=int(data.get("fatigue", 3)),
            difficulty=int(data.get("difficulty", 3)),
            recovery=int(data.get("recovery", 3)),
            sleep_quality=int(data.get("sleep_quality", 3)),
            motivation=int(data.get("motivation", 3)),
            pain=pain,
            notes=str(data.get("notes", "")),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid check-in: {e}") from e


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    """
    Convert WorkoutLog to JSON-compatible dict.

    ``check_in`` and ``end_time`` are only written when set.
    """
    d: dict[str, Any] = {
        "id": log.id,
        "date": log.date,
        "template_id": log.template_id,
        "start_time": log.start_time,
        "duration_minutes": log.duration_minutes,
        "total_volume": log.total_volume,
        "notes": log.notes,
        "is_complete": log.is_complete,
        "set_entries": [set_entry_to_dict(e) for e in log.set_entries],
    }
    if log.end_time is not None:
        d["end_time"] = log.end_time
    if log.check_in is not None:
        d["check_in"] = check_in_to_dict(log.check_in)
    return d


def dict_to_workout_log(data: dict[str, Any]) -> WorkoutLog:
    """
    Convert dict to WorkoutLog.

    A stored ``total_volume`` that disagrees with the entries is replaced
    by the recomputed sum, so a loaded log always satisfies the volume
    invariant.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(_require(data, "date"))
    validate_non_negative(data.get("duration_minutes", 0), "duration_minutes")

    entries = [dict_to_set_entry(e) for e in data.get("set_entries", [])]
    raw_check_in = data.get("check_in")

    log = WorkoutLog(
        id=str(_require(data, "id")),
        date=data["date"],
        template_id=str(_require(data, "template_id")),
        start_time=str(_require(data, "start_time")),
        end_time=data.get("end_time"),
        duration_minutes=int(data.get("duration_minutes", 0)),
        notes=str(data.get("notes") or ""),
        is_complete=bool(data.get("is_complete", False)),
        set_entries=entries,
        check_in=dict_to_check_in(raw_check_in) if raw_check_in else None,
    )
    log.total_volume = log.recomputed_volume()
    return log


# =============================================================================
# Stats, records, quests, profiles
# =============================================================================


def stats_to_dict(stats: UserProfileStats) -> dict[str, Any]:
    return {
        "experience_points": stats.experience_points,
        "level": stats.level,
        "current_streak_days": stats.current_streak_days,
        "longest_streak_days": stats.longest_streak_days,
        "last_workout_date": stats.last_workout_date,
    }


def dict_to_stats(data: dict[str, Any]) -> UserProfileStats:
    """
    Convert dict to UserProfileStats.

    Raises:
        ValidationError: If data is invalid
    """
    validate_non_negative(data.get("experience_points", 0), "experience_points")
    validate_positive(data.get("level", 1), "level")
    validate_non_negative(data.get("current_streak_days", 0), "current_streak_days")
    validate_non_negative(data.get("longest_streak_days", 0), "longest_streak_days")
    last = data.get("last_workout_date")
    if last is not None:
        validate_date(last)

    return UserProfileStats(
        experience_points=int(data.get("experience_points", 0)),
        level=int(data.get("level", 1)),
        current_streak_days=int(data.get("current_streak_days", 0)),
        longest_streak_days=int(data.get("longest_streak_days", 0)),
        last_workout_date=last,
    )


def personal_record_to_dict(record: PersonalRecord) -> dict[str, Any]:
    return {
        "exercise_id": record.exercise_id,
        "exercise_name": record.exercise_name,
        "weight": record.weight,
        "reps": record.reps,
        "date": record.date,
        "estimated_1rm": record.estimated_1rm,
    }


def dict_to_personal_record(data: dict[str, Any]) -> PersonalRecord:
    validate_date(_require(data, "date"))
    validate_non_negative(_require(data, "weight"), "weight")
    validate_non_negative(_require(data, "reps"), "reps")
    validate_non_negative(_require(data, "estimated_1rm"), "estimated_1rm")
    exercise_id = str(_require(data, "exercise_id"))
    return PersonalRecord(
        exercise_id=exercise_id,
        exercise_name=str(data.get("exercise_name") or exercise_id),
        weight=float(data["weight"]),
        reps=int(data["reps"]),
        date=data["date"],
        estimated_1rm=float(data["estimated_1rm"]),
    )


def quest_to_dict(quest: Quest) -> dict[str, Any]:
    return {
        "id": quest.id,
        "name": quest.name,
        "description": quest.description,
        "quest_type": quest.quest_type,
        "target": quest.target,
        "xp_reward": quest.xp_reward,
        "start_date": quest.start_date,
        "end_date": quest.end_date,
        "current": quest.current,
        "is_complete": quest.is_complete,
    }


def dict_to_quest(data: dict[str, Any]) -> Quest:
    quest_type = _require(data, "quest_type")
    if quest_type not in QUEST_TYPES:
        raise ValidationError(f"Invalid quest_type: {quest_type!r}. Must be one of {QUEST_TYPES}")
    validate_positive(_require(data, "target"), "target")
    validate_non_negative(data.get("xp_reward", 0), "xp_reward")
    validate_date(_require(data, "start_date"))
    validate_date(_require(data, "end_date"))
    return Quest(
        id=str(_require(data, "id")),
        name=str(data.get("name", "")),
        description=str(data.get("description", "")),
        quest_type=quest_type,
        target=int(data["target"]),
        xp_reward=int(data.get("xp_reward", 0)),
        start_date=data["start_date"],
        end_date=data["end_date"],
        current=data.get("current", 0),
        is_complete=bool(data.get("is_complete", False)),
    )


def profile_to_dict(profile: Profile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "name": profile.name,
        "avatar": profile.avatar,
        "created_at": profile.created_at,
        "last_accessed_at": profile.last_accessed_at,
    }


def dict_to_profile(data: dict[str, Any]) -> Profile:
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Invalid profile name: {name!r}")
    return Profile(
        id=str(_require(data, "id")),
        name=name,
        avatar=str(data.get("avatar", "")),
        created_at=str(data.get("created_at", "")),
        last_accessed_at=str(data.get("last_accessed_at", "")),
    )


def to_json(data: Any) -> str:
    """Pretty JSON used for every file liftmeup writes."""
    return json.dumps(data, indent=2)
