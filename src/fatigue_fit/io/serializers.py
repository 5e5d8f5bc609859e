"""
JSON serialization for training data models.

Handles conversion between dataclasses and JSON-compatible dicts.
Timestamps are stored as ISO 8601 strings; section and group keys use
their enum values ("midChest", "chest").
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.config import DEFAULT_SENSITIVITY
from ..core.models import (
    Badge,
    CoachBanner,
    CoachState,
    ExerciseEntry,
    LoggedSet,
    SectionState,
    SorenessMap,
    UserProfile,
    UserSettings,
    UserStats,
    WorkoutLocation,
    WorkoutSession,
)
from ..core.taxonomy import MuscleGroup, MuscleSection


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


# Focus groups renamed since early data files
_LEGACY_GROUPS: dict[str, tuple[str, ...]] = {
    "arms": ("biceps", "triceps"),
}


def validate_timestamp(value: Any, name: str = "timestamp") -> datetime:
    """
    Parse an ISO 8601 timestamp.

    Timestamps carrying a UTC offset are converted to naive local time,
    the form every engine compares against.

    Args:
        value: ISO string
        name: Field name for error messages

    Returns:
        Naive datetime in local time

    Raises:
        ValidationError: If the value is not a valid ISO timestamp
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {name}: {value!r}. Expected ISO 8601 string")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {name}: {value}") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def validate_optional_timestamp(value: Any, name: str) -> datetime | None:
    """Like validate_timestamp, but None passes through."""
    if value is None:
        return None
    return validate_timestamp(value, name)


def validate_section(value: Any) -> MuscleSection:
    """
    Validate a muscle section id.

    Raises:
        ValidationError: If the id is not a known section
    """
    try:
        return MuscleSection(value)
    except ValueError as e:
        raise ValidationError(f"Invalid muscle section: {value!r}") from e


def validate_soreness_level(value: Any, name: str = "soreness") -> int:
    """
    Validate a soreness level (0-4).

    Raises:
        ValidationError: If the level is not an integer between 0 and 4
    """
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 4:
        raise ValidationError(f"{name} must be an integer 0-4, got {value!r}")
    return value


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def migrate_focus_groups(values: list[Any]) -> list[MuscleGroup]:
    """
    Parse focus groups, expanding legacy names.

    "arms" becomes biceps + triceps; duplicates are dropped, order kept.

    Raises:
        ValidationError: If a name is neither a group nor a legacy alias
    """
    result: list[MuscleGroup] = []
    for value in values:
        names = _LEGACY_GROUPS.get(value, (value,))
        for name in names:
            try:
                group = MuscleGroup(name)
            except ValueError as e:
                raise ValidationError(f"Invalid muscle group: {value!r}") from e
            if group not in result:
                result.append(group)
    return result


def _timestamp_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def logged_set_to_dict(logged_set: LoggedSet) -> dict[str, Any]:
    """Convert LoggedSet to JSON-compatible dict."""
    return {
        "id": logged_set.set_id,
        "exercise_id": logged_set.exercise_id,
        "weight_kg": logged_set.weight_kg,
        "reps": logged_set.reps,
        "rpe": logged_set.rpe,
        "timestamp": logged_set.timestamp.isoformat(),
    }


def dict_to_logged_set(data: dict[str, Any]) -> LoggedSet:
    """
    Convert dict to LoggedSet.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    try:
        return LoggedSet(
            exercise_id=str(data["exercise_id"]),
            weight_kg=float(data.get("weight_kg", 0.0)),
            reps=int(data["reps"]),
            rpe=float(data["rpe"]),
            timestamp=validate_timestamp(data["timestamp"]),
            set_id=str(data.get("id", "")),
        )
    except KeyError as e:
        raise ValidationError(f"Set is missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set: {e}") from e


def exercise_entry_to_dict(entry: ExerciseEntry) -> dict[str, Any]:
    """Convert ExerciseEntry to JSON-compatible dict."""
    return {
        "id": entry.entry_id,
        "exercise_id": entry.exercise_id,
        "name": entry.name,
        "targets": [s.value for s in entry.targets],
        "sets": [logged_set_to_dict(s) for s in entry.sets],
    }


def dict_to_exercise_entry(data: dict[str, Any]) -> ExerciseEntry:
    """
    Convert dict to ExerciseEntry.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        exercise_id = str(data["exercise_id"])
        entry_id = str(data["id"])
    except KeyError as e:
        raise ValidationError(f"Exercise entry is missing field {e}") from e

    sets = [dict_to_logged_set(s) for s in data.get("sets", [])]
    for s in sets:
        if s.exercise_id != exercise_id:
            raise ValidationError(
                f"Set {s.set_id} belongs to {s.exercise_id}, not entry exercise {exercise_id}"
            )

    return ExerciseEntry(
        entry_id=entry_id,
        exercise_id=exercise_id,
        name=str(data.get("name", exercise_id)),
        targets=[validate_section(t) for t in data.get("targets", [])],
        sets=sets,
    )


def location_to_dict(location: WorkoutLocation) -> dict[str, Any]:
    """Convert WorkoutLocation to JSON-compatible dict."""
    data: dict[str, Any] = {"type": location.type}
    if location.label:
        data["label"] = location.label
    return data


def dict_to_location(data: dict[str, Any]) -> WorkoutLocation:
    """
    Convert dict to WorkoutLocation.

    Raises:
        ValidationError: If the location type is invalid
    """
    try:
        return WorkoutLocation(type=data.get("type", "gym"), label=data.get("label"))
    except ValueError as e:
        raise ValidationError(str(e)) from e


def soreness_to_dict(soreness: SorenessMap) -> dict[str, int]:
    """Convert a soreness map to {section id: level}."""
    return {s.value: level for s, level in soreness.items()}


def dict_to_soreness(data: dict[str, Any]) -> SorenessMap:
    """
    Convert {section id: level} to a soreness map.

    Raises:
        ValidationError: If a section or level is invalid
    """
    return {
        validate_section(key): validate_soreness_level(level, f"soreness[{key}]")
        for key, level in data.items()
    }


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """
    Convert WorkoutSession to JSON-compatible dict.

    Args:
        session: WorkoutSession to convert

    Returns:
        Dict representation
    """
    data: dict[str, Any] = {
        "id": session.session_id,
        "started_at": session.started_at.isoformat(),
        "ended_at": _timestamp_str(session.ended_at),
        "status": session.status,
        "focus_muscles": [g.value for g in session.focus_muscles],
        "exercise_entries": [exercise_entry_to_dict(e) for e in session.exercise_entries],
    }
    if session.pre_workout_soreness:
        data["pre_workout_soreness"] = soreness_to_dict(session.pre_workout_soreness)
    if session.location is not None:
        data["location"] = location_to_dict(session.location)
    return data


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Old records without a status are treated as ended.  Records are not
    checked for logical consistency here (e.g. end before start); the
    engines filter such sessions out.

    Args:
        data: Dict representation

    Returns:
        WorkoutSession instance

    Raises:
        ValidationError: If data is invalid
    """
    if "id" not in data or "started_at" not in data:
        raise ValidationError("Session requires 'id' and 'started_at'")

    status = data.get("status", "ended")
    if status not in ("in_progress", "ended"):
        raise ValidationError(f"Invalid session status: {status}. Must be 'in_progress' or 'ended'")

    location = data.get("location")

    return WorkoutSession(
        session_id=str(data["id"]),
        started_at=validate_timestamp(data["started_at"], "started_at"),
        ended_at=validate_optional_timestamp(data.get("ended_at"), "ended_at"),
        status=status,
        focus_muscles=migrate_focus_groups(data.get("focus_muscles", [])),
        exercise_entries=[dict_to_exercise_entry(e) for e in data.get("exercise_entries", [])],
        pre_workout_soreness=dict_to_soreness(data.get("pre_workout_soreness", {})),
        location=dict_to_location(location) if location is not None else None,
    )


def session_to_json_line(session: WorkoutSession) -> str:
    """
    Serialize a session to a single JSON line.

    Returns:
        JSON string (single line, no trailing newline)
    """
    return json.dumps(session_to_dict(session), separators=(",", ":"))


def json_line_to_session(line: str) -> WorkoutSession:
    """
    Deserialize a JSON line to a WorkoutSession.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    return dict_to_session(data)


def section_state_to_dict(state: SectionState) -> dict[str, Any]:
    """Convert SectionState to JSON-compatible dict."""
    return {
        "fatigue": round(state.fatigue, 4),
        "weekly_stimulus": state.weekly_stimulus,
        "last_trained_at": _timestamp_str(state.last_trained_at),
    }


def dict_to_section_state(data: dict[str, Any]) -> SectionState:
    """
    Convert dict to SectionState.

    Raises:
        ValidationError: If values are out of range
    """
    try:
        fatigue = float(data.get("fatigue", 0.0))
        stimulus = float(data.get("weekly_stimulus", 0.0))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid section state: {e}") from e
    if not 0 <= fatigue <= 100:
        raise ValidationError(f"fatigue must be within 0-100, got {fatigue}")
    validate_non_negative(stimulus, "weekly_stimulus")

    return SectionState(
        fatigue=fatigue,
        weekly_stimulus=stimulus,
        last_trained_at=validate_optional_timestamp(data.get("last_trained_at"), "last_trained_at"),
    )


def section_states_to_dict(states: dict[MuscleSection, SectionState]) -> dict[str, Any]:
    """Convert {section: state} to {section id: dict}."""
    return {s.value: section_state_to_dict(st) for s, st in states.items()}


def dict_to_section_states(data: dict[str, Any]) -> dict[MuscleSection, SectionState]:
    """
    Convert {section id: dict} to {section: state}.

    Sections missing from the data start fresh.
    """
    states = {section: SectionState() for section in MuscleSection}
    for key, value in data.items():
        states[validate_section(key)] = dict_to_section_state(value)
    return states


def user_profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    """Convert UserProfile to JSON-compatible dict."""
    return {
        "mode": profile.mode,
        "days_per_week": profile.days_per_week,
        "session_length_minutes": profile.session_length_minutes,
        "time_preference": profile.time_preference,
        "fatigue_sensitivity": profile.fatigue_sensitivity,
        "is_onboarded": profile.is_onboarded,
        "default_location": location_to_dict(profile.default_location),
    }


def dict_to_user_profile(data: dict[str, Any]) -> UserProfile:
    """
    Convert dict to UserProfile.

    Missing fields take their defaults (older data files predate some of
    them).

    Raises:
        ValidationError: If data is invalid
    """
    try:
        return UserProfile(
            mode=data.get("mode", "intermediate"),
            days_per_week=int(data.get("days_per_week", 4)),
            session_length_minutes=int(data.get("session_length_minutes", 60)),
            time_preference=data.get("time_preference", "afternoon"),
            fatigue_sensitivity=float(data.get("fatigue_sensitivity", DEFAULT_SENSITIVITY)),
            is_onboarded=bool(data.get("is_onboarded", False)),
            default_location=dict_to_location(data.get("default_location") or {}),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid profile: {e}") from e


def user_settings_to_dict(settings: UserSettings) -> dict[str, Any]:
    """Convert UserSettings to JSON-compatible dict."""
    return {"units": settings.units, "calibration_mode": settings.calibration_mode}


def dict_to_user_settings(data: dict[str, Any]) -> UserSettings:
    """
    Convert dict to UserSettings.

    Raises:
        ValidationError: If the unit is not "kg" or "lb"
    """
    try:
        return UserSettings(
            units=data.get("units", "kg"),
            calibration_mode=bool(data.get("calibration_mode", True)),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def coach_banner_to_dict(banner: CoachBanner) -> dict[str, Any]:
    """Convert CoachBanner to JSON-compatible dict."""
    return {
        "title": banner.title,
        "subtitle": banner.subtitle,
        "severity": banner.severity,
        "primary_cta": banner.primary_cta,
        "secondary_cta": banner.secondary_cta,
    }


def coach_state_to_dict(coach: CoachState) -> dict[str, Any]:
    """
    Convert CoachState to JSON-compatible dict.

    Coach state is always recomputed, so there is no reverse conversion.
    """
    return {
        "consistency_state": coach.consistency_state.value,
        "recovery_state": coach.recovery_state.value,
        "banner": coach_banner_to_dict(coach.banner),
        "updated_at": coach.updated_at.isoformat(),
        "last_ended_session_id": coach.last_ended_session_id,
        "last_workout_ended_at": _timestamp_str(coach.last_workout_ended_at),
        "next_recommended_start_at": _timestamp_str(coach.next_recommended_start_at),
        "rest_hours_recommended": coach.rest_hours_recommended,
        "average_interval_hours": round(coach.average_interval_hours, 2),
        "days_since_last_workout": coach.days_since_last_workout,
    }


def user_stats_to_dict(stats: UserStats) -> dict[str, Any]:
    """Convert UserStats to JSON-compatible dict."""
    return {
        "total_sessions": stats.total_sessions,
        "current_streak": stats.current_streak,
        "longest_streak": stats.longest_streak,
        "prs_unlocked": stats.prs_unlocked,
        "favorite_muscle": stats.favorite_muscle.value if stats.favorite_muscle else None,
        "recovery_score": stats.recovery_score,
    }


def badge_to_dict(badge: Badge) -> dict[str, Any]:
    """Convert Badge to JSON-compatible dict."""
    return {
        "id": badge.badge_id,
        "name": badge.name,
        "description": badge.description,
        "requirement": badge.requirement,
        "unlocked_at": _timestamp_str(badge.unlocked_at),
    }


def parse_sets_string(sets_str: str) -> list[tuple[float, int, float]]:
    """
    Parse a sets string.

    Formats (comma-separated):
        weightxreps@rpe     e.g. "80x8@9"        one set
        weightxreps@rpe*N   e.g. "80x8@9*3"      N identical sets
        repsx@rpe           e.g. "x12@8"         bodyweight (0 kg)

    Args:
        sets_str: Sets string to parse

    Returns:
        List of (weight_kg, reps, rpe) tuples

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    sets: list[tuple[float, int, float]] = []
    parts = [p.strip() for p in sets_str.split(",") if p.strip()]

    for part in parts:
        match = re.fullmatch(
            r"(\d+(?:\.\d+)?)?\s*[xX×]\s*(\d+)\s*@\s*(\d+(?:\.\d+)?)(?:\s*\*\s*(\d+))?",
            part,
        )
        if not match:
            raise ValidationError(
                f"Invalid set format: '{part}'.\n"
                f"Use: weightxreps@rpe (e.g. 80x8@9), add *N to repeat (e.g. 80x8@9*3),\n"
                f"     or xreps@rpe for bodyweight (e.g. x12@8)."
            )

        weight = float(match.group(1)) if match.group(1) else 0.0
        reps = int(match.group(2))
        rpe = float(match.group(3))
        count = int(match.group(4)) if match.group(4) else 1

        if reps < 1:
            raise ValidationError(f"Reps must be at least 1: {reps}")
        if not 1 <= rpe <= 10:
            raise ValidationError(f"RPE must be between 1 and 10: {rpe}")
        if count < 1:
            raise ValidationError(f"Set count must be at least 1: {count}")

        sets.extend([(weight, reps, rpe)] * count)

    if not sets:
        raise ValidationError("No valid sets found in sets string")

    return sets
