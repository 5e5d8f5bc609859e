"""
Session lifecycle: start, add exercises, log sets, end.

Every function takes a snapshot and returns a new one; nothing is
modified in place.  Ended sessions are frozen and refuse further edits.
"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Sequence

from .config import EngineConfig, resolve_config
from .exercises.registry import find_exercise
from .fatigue import apply_set_fatigue, clamp_fatigue
from .models import (
    ExerciseEntry,
    LoggedSet,
    SectionState,
    SorenessMap,
    WorkoutLocation,
    WorkoutSession,
)
from .readiness import clamp_soreness
from .stimulus import add_stimulus, stimulus_from_set
from .taxonomy import MuscleGroup, MuscleSection


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_in_progress(session: WorkoutSession) -> None:
    if session.is_ended:
        raise ValueError(f"Session {session.session_id} has ended and can no longer be edited")


def _copy_session(session: WorkoutSession, entries: list[ExerciseEntry]) -> WorkoutSession:
    return replace(
        session,
        focus_muscles=list(session.focus_muscles),
        exercise_entries=entries,
        pre_workout_soreness=dict(session.pre_workout_soreness),
    )


def initial_section_states() -> dict[MuscleSection, SectionState]:
    """Fresh zero state for every section."""
    return {section: SectionState() for section in MuscleSection}


def start_session(
    focus: Sequence[MuscleGroup],
    now: datetime,
    soreness: SorenessMap | None = None,
    location: WorkoutLocation | None = None,
) -> WorkoutSession:
    """
    Open a new in-progress session.

    Args:
        focus: Muscle groups selected for the session
        now: Start instant
        soreness: Pre-workout soreness snapshot (levels clamped to 0-4)
        location: Where the session takes place

    Returns:
        New WorkoutSession with status "in_progress"
    """
    snapshot = {s: clamp_soreness(level) for s, level in (soreness or {}).items()}
    return WorkoutSession(
        session_id=_new_id(),
        started_at=now,
        focus_muscles=list(focus),
        pre_workout_soreness=snapshot,
        location=location,
    )


def validate_focus(
    focus: Sequence[MuscleGroup],
    config: EngineConfig | None = None,
) -> list[MuscleGroup]:
    """
    Deduplicate focus groups and check the count.

    Raises:
        ValueError: If fewer than min_focus_muscles or more than
            max_focus_muscles distinct groups are given
    """
    cfg = resolve_config(config)
    groups = list(dict.fromkeys(focus))
    if not cfg.min_focus_muscles <= len(groups) <= cfg.max_focus_muscles:
        raise ValueError(
            f"Choose {cfg.min_focus_muscles}-{cfg.max_focus_muscles} focus groups, got {len(groups)}"
        )
    return groups


def set_focus(
    session: WorkoutSession,
    focus: Sequence[MuscleGroup],
    config: EngineConfig | None = None,
) -> WorkoutSession:
    """Replace the focus groups of an in-progress session."""
    _require_in_progress(session)
    groups = validate_focus(focus, config)
    return replace(_copy_session(session, list(session.exercise_entries)), focus_muscles=groups)


def find_entry(session: WorkoutSession, entry_id: str) -> ExerciseEntry | None:
    """Entry with *entry_id*, or None."""
    for entry in session.exercise_entries:
        if entry.entry_id == entry_id:
            return entry
    return None


def add_exercise_entry(
    session: WorkoutSession,
    exercise_id: str,
) -> tuple[WorkoutSession, ExerciseEntry | None]:
    """
    Add an exercise to a session.

    When the exercise is already present its existing entry is returned
    and the session is unchanged.  Unknown exercises give (session, None).

    Raises:
        ValueError: If the session has ended
    """
    _require_in_progress(session)

    for entry in session.exercise_entries:
        if entry.exercise_id == exercise_id:
            return session, entry

    exercise = find_exercise(exercise_id)
    if exercise is None:
        return session, None

    entry = ExerciseEntry(
        entry_id=_new_id(),
        exercise_id=exercise_id,
        name=exercise.display_name,
        targets=list(exercise.contributions),
    )
    return _copy_session(session, [*session.exercise_entries, entry]), entry


def log_set(
    session: WorkoutSession,
    entry_id: str,
    weight_kg: float,
    reps: int,
    rpe: float,
    now: datetime,
) -> tuple[WorkoutSession, LoggedSet | None]:
    """
    Append a set to an exercise entry.

    Returns:
        (new session, the logged set); (session, None) if the entry is unknown

    Raises:
        ValueError: If the session has ended or the set values are invalid
    """
    _require_in_progress(session)

    entry = find_entry(session, entry_id)
    if entry is None:
        return session, None

    logged = LoggedSet(
        exercise_id=entry.exercise_id,
        weight_kg=weight_kg,
        reps=reps,
        rpe=rpe,
        timestamp=now,
        set_id=_new_id(),
    )
    entries = [
        replace(e, sets=[*e.sets, logged]) if e.entry_id == entry_id else e
        for e in session.exercise_entries
    ]
    return _copy_session(session, entries), logged


def apply_set_to_states(
    section_states: Mapping[MuscleSection, SectionState],
    logged_set: LoggedSet,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, SectionState]:
    """
    Incrementally apply one set to section states.

    Every section the exercise targets gets its fatigue raised (clamped),
    its weekly stimulus credited, and last_trained_at set to the set time.
    Unknown exercises leave the states unchanged.
    """
    cfg = resolve_config(config)
    states = {s: replace(st) for s, st in section_states.items()}

    exercise = find_exercise(logged_set.exercise_id)
    if exercise is None:
        return states

    stimulus = stimulus_from_set(logged_set, cfg)
    for section in exercise.target_sections:
        current = states.get(section, SectionState())
        states[section] = SectionState(
            fatigue=clamp_fatigue(apply_set_fatigue(current, logged_set, section, sensitivity, cfg), cfg),
            weekly_stimulus=add_stimulus(current.weekly_stimulus, stimulus.get(section, 0.0)),
            last_trained_at=logged_set.timestamp,
        )
    return states


def update_set(
    session: WorkoutSession,
    entry_id: str,
    set_id: str,
    weight_kg: float | None = None,
    reps: int | None = None,
    rpe: float | None = None,
) -> WorkoutSession:
    """
    Change the values of a logged set; omitted values are kept.

    Unknown entry or set ids leave the session unchanged.

    Raises:
        ValueError: If the session has ended or the new values are invalid
    """
    _require_in_progress(session)

    def edit(s: LoggedSet) -> LoggedSet:
        if s.set_id != set_id:
            return s
        return replace(
            s,
            weight_kg=s.weight_kg if weight_kg is None else weight_kg,
            reps=s.reps if reps is None else reps,
            rpe=s.rpe if rpe is None else rpe,
        )

    entries = [
        replace(e, sets=[edit(s) for s in e.sets]) if e.entry_id == entry_id else e
        for e in session.exercise_entries
    ]
    return _copy_session(session, entries)


def delete_set(session: WorkoutSession, entry_id: str, set_id: str) -> WorkoutSession:
    """Remove one set from an entry."""
    _require_in_progress(session)
    entries = [
        replace(e, sets=[s for s in e.sets if s.set_id != set_id]) if e.entry_id == entry_id else e
        for e in session.exercise_entries
    ]
    return _copy_session(session, entries)


def remove_exercise_entry(session: WorkoutSession, entry_id: str) -> WorkoutSession:
    """Remove an exercise entry and all of its sets."""
    _require_in_progress(session)
    entries = [e for e in session.exercise_entries if e.entry_id != entry_id]
    return _copy_session(session, entries)


def end_session(session: WorkoutSession, now: datetime) -> WorkoutSession:
    """
    Finish a session.

    The end time is never earlier than the start time.

    Raises:
        ValueError: If the session has already ended
    """
    _require_in_progress(session)
    ended = _copy_session(session, list(session.exercise_entries))
    ended.ended_at = max(now, session.started_at)
    ended.status = "ended"
    return ended


def last_set_for_exercise(
    history: Sequence[WorkoutSession],
    exercise_id: str,
    current: WorkoutSession | None = None,
) -> LoggedSet | None:
    """
    Most recent set logged for an exercise.

    The current session is checked first, then history from the most
    recent session backwards.
    """
    sessions = list(history)
    sessions.sort(key=lambda s: s.started_at)
    if current is not None:
        sessions.append(current)

    for session in reversed(sessions):
        for entry in session.exercise_entries:
            if entry.exercise_id == exercise_id and entry.sets:
                return entry.sets[-1]
    return None
