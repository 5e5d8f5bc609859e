"""
Rebuild everything the host displays from the session log.

The session log is the only source of truth: section states, readiness,
coaching and focus suggestions are all derived here for a given instant.
"""

from datetime import datetime, timedelta
from typing import Sequence

from .coach import compute_coach_state
from .config import DEFAULT_SENSITIVITY, EngineConfig, resolve_config
from .exercises.registry import find_exercise
from .fatigue import replay_fatigue
from .metrics import session_end_time, usable_sessions
from .models import DerivedState, SectionState, SorenessMap, UserProfile, WorkoutSession
from .planner import suggested_focus
from .readiness import all_section_readiness, body_readiness, group_readiness
from .stimulus import replay_weekly_stimulus, stimulus_zone
from .taxonomy import MuscleGroup, MuscleSection


def _last_trained(
    history: Sequence[WorkoutSession],
    now: datetime,
) -> dict[MuscleSection, datetime]:
    last: dict[MuscleSection, datetime] = {}
    for session in usable_sessions(history, now):
        for logged_set in session.all_sets():
            if logged_set.timestamp > now:
                continue
            exercise = find_exercise(logged_set.exercise_id)
            if exercise is None:
                continue
            for section in exercise.target_sections:
                previous = last.get(section)
                if previous is None or logged_set.timestamp > previous:
                    last[section] = logged_set.timestamp
    return last


def replay_section_states(
    history: Sequence[WorkoutSession],
    now: datetime,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, SectionState]:
    """
    Section states at *now*, rebuilt from the session log.

    fatigue          ← replay_fatigue
    weekly_stimulus  ← sets since the current week boundary
    last_trained_at  ← latest set targeting the section

    Returns:
        {section: SectionState} for every MuscleSection
    """
    cfg = resolve_config(config)
    fatigue = replay_fatigue(history, now, sensitivity, cfg)
    stimulus = replay_weekly_stimulus(history, now, cfg)
    trained = _last_trained(history, now)
    return {
        section: SectionState(
            fatigue=fatigue[section],
            weekly_stimulus=stimulus[section],
            last_trained_at=trained.get(section),
        )
        for section in MuscleSection
    }


def last_session_end(history: Sequence[WorkoutSession], now: datetime) -> datetime | None:
    """End of the most recently finished session at or before *now*."""
    ends = [
        session_end_time(s)
        for s in usable_sessions(history, now)
        if s.is_ended and session_end_time(s) <= now
    ]
    return max(ends) if ends else None


def daily_body_readiness(
    history: Sequence[WorkoutSession],
    now: datetime,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> list[tuple[datetime, int]]:
    """
    Body readiness sampled at noon of every day from the first session to *now*.

    Returns:
        [(sample instant, readiness)] oldest first; empty without history
    """
    cfg = resolve_config(config)
    sessions = usable_sessions(history, now)
    if not sessions:
        return []

    samples: list[tuple[datetime, int]] = []
    at = sessions[0].started_at.replace(hour=12, minute=0, second=0, microsecond=0)
    while at <= now:
        states = replay_section_states(sessions, at, sensitivity, cfg)
        samples.append((at, body_readiness(states, at, last_session_end(sessions, at), cfg)))
        at += timedelta(days=1)
    return samples


def recompute(
    history: Sequence[WorkoutSession],
    now: datetime,
    profile: UserProfile | None = None,
    soreness: SorenessMap | None = None,
    current: WorkoutSession | None = None,
    config: EngineConfig | None = None,
) -> DerivedState:
    """
    Derive the full display state.

    Pure and idempotent: the same inputs always give the same result.

    Args:
        history: Session log in any order
        now: Instant to evaluate at
        profile: User profile (fatigue sensitivity); defaults apply when None
        soreness: Today's soreness levels per section
        current: In-progress session whose sets count toward load
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        DerivedState
    """
    cfg = resolve_config(config)
    sensitivity = profile.fatigue_sensitivity if profile is not None else DEFAULT_SENSITIVITY
    sessions = list(history)
    if current is not None and all(s.session_id != current.session_id for s in sessions):
        sessions.append(current)

    states = replay_section_states(sessions, now, sensitivity, cfg)
    soreness = soreness or {}

    return DerivedState(
        section_states=states,
        section_readiness=all_section_readiness(states, now, soreness, cfg),
        group_readiness={
            group: group_readiness(group, states, now, soreness, cfg) for group in MuscleGroup
        },
        stimulus_zones={s: stimulus_zone(st.weekly_stimulus, cfg) for s, st in states.items()},
        body_readiness=body_readiness(states, now, last_session_end(history, now), cfg),
        coach=compute_coach_state(history, now, cfg),
        suggested_focus=suggested_focus(states, now, soreness=soreness, config=cfg),
        computed_at=now,
    )
