"""
Per-section fatigue model.

A logged set adds fatigue to every section its exercise targets, scaled by
contribution weight, user sensitivity and effort; fatigue then recovers
linearly with elapsed time.  Replaying the session log reconstructs the
current fatigue of every section without any cached state.
"""

import math
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Sequence

from .config import EngineConfig, resolve_config
from .exercises.registry import find_exercise
from .metrics import hours_between, session_end_time, usable_sessions
from .models import LoggedSet, SectionState, WorkoutSession
from .taxonomy import MuscleSection


def effort_factor(rpe: float, config: EngineConfig | None = None) -> float:
    """
    Map RPE to an effort multiplier.

    Step function, non-decreasing in RPE:
        ≥10 → 1.5, ≥9 → 1.3, ≥8 → 1.1, ≥7 → 1.0, ≥6 → 0.85, else 0.7

    Args:
        rpe: Rate of perceived exertion (1-10)
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        Effort multiplier
    """
    cfg = resolve_config(config)
    for min_rpe, factor in cfg.effort_factors:
        if rpe >= min_rpe:
            return factor
    return cfg.effort_factor_floor


def fatigue_gain(
    logged_set: LoggedSet,
    section: MuscleSection,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> float:
    """
    Fatigue added to one section by one set.

    Δfatigue = base_gain × contribution(exercise, section) × sensitivity × E(rpe)

    Unknown exercises and untargeted sections give 0.

    Args:
        logged_set: The performed set
        section: Section receiving the fatigue
        sensitivity: User fatigue sensitivity multiplier
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        Non-negative fatigue delta
    """
    exercise = find_exercise(logged_set.exercise_id)
    if exercise is None:
        return 0.0

    weight = exercise.contribution(section)
    if weight <= 0:
        return 0.0

    cfg = resolve_config(config)
    return cfg.base_gain_per_set * weight * max(0.0, sensitivity) * effort_factor(logged_set.rpe, cfg)


def decay_fatigue(
    current_fatigue: float,
    hours_elapsed: float,
    config: EngineConfig | None = None,
) -> float:
    """
    Recover fatigue over elapsed time.

    F' = max(F_min, F − hours × recovery_per_hour)

    Negative elapsed time is treated as zero.
    """
    cfg = resolve_config(config)
    recovered = max(0.0, hours_elapsed) * cfg.recovery_per_hour
    return max(cfg.min_fatigue, current_fatigue - recovered)


def clamp_fatigue(value: float, config: EngineConfig | None = None) -> float:
    """Clamp a fatigue value into [min_fatigue, max_fatigue]."""
    cfg = resolve_config(config)
    return max(cfg.min_fatigue, min(cfg.max_fatigue, value))


def apply_set_fatigue(
    state: SectionState,
    logged_set: LoggedSet,
    section: MuscleSection,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> float:
    """
    Fatigue of *section* after adding one set.

    F' = min(F_max, F + Δfatigue)

    Returns:
        New fatigue value (the state itself is not modified)
    """
    cfg = resolve_config(config)
    gain = fatigue_gain(logged_set, section, sensitivity, cfg)
    return min(cfg.max_fatigue, state.fatigue + gain)


def set_fatigue_contributions(
    logged_set: LoggedSet,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, float]:
    """
    Fatigue a set adds to each section it targets, rounded half up to 0.1.

    Returns:
        {section: gain}; empty for unknown exercises
    """
    exercise = find_exercise(logged_set.exercise_id)
    if exercise is None:
        return {}

    return {
        section: math.floor(fatigue_gain(logged_set, section, sensitivity, config) * 10 + 0.5) / 10
        for section in exercise.target_sections
    }


def apply_recovery(
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, SectionState]:
    """
    Decay every section's fatigue by the hours since it was last trained.

    Intended for a snapshot whose fatigue was recorded at last_trained_at;
    applying it twice to the same snapshot double-counts recovery.  Use
    replay_fatigue to rebuild from history instead.

    Returns:
        New {section: SectionState}
    """
    cfg = resolve_config(config)
    result: dict[MuscleSection, SectionState] = {}
    for section, state in section_states.items():
        if state.last_trained_at is not None and state.fatigue > 0:
            hours = hours_between(state.last_trained_at, now)
            result[section] = replace(state, fatigue=decay_fatigue(state.fatigue, hours, cfg))
        else:
            result[section] = replace(state)
    return result


def replay_fatigue(
    history: Sequence[WorkoutSession],
    now: datetime,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, float]:
    """
    Reconstruct every section's fatigue from the session log.

    Sessions are walked oldest → newest: fatigue decays across the gap
    from the previous session's end to this session's start, then every
    set in the session adds its gain (capped at max_fatigue); a final
    decay runs from the last session's end to *now*.

    Malformed sessions, sessions starting after *now* and sets logged
    after *now* are ignored; the input list is not modified.

    Args:
        history: Session log in any order
        now: Instant to evaluate at
        sensitivity: User fatigue sensitivity multiplier
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        {section: fatigue} for every MuscleSection
    """
    cfg = resolve_config(config)
    fatigue: dict[MuscleSection, float] = {s: 0.0 for s in MuscleSection}
    prev_end: datetime | None = None

    for session in usable_sessions(history, now):
        if prev_end is not None:
            gap = hours_between(prev_end, session.started_at)
            fatigue = {s: decay_fatigue(f, gap, cfg) for s, f in fatigue.items()}

        for logged_set in session.all_sets():
            if logged_set.timestamp > now:
                continue
            exercise = find_exercise(logged_set.exercise_id)
            if exercise is None:
                continue
            for section in exercise.target_sections:
                gain = fatigue_gain(logged_set, section, sensitivity, cfg)
                fatigue[section] = min(cfg.max_fatigue, fatigue[section] + gain)

        end = session_end_time(session)
        prev_end = end if prev_end is None else max(prev_end, end)

    if prev_end is not None:
        tail = hours_between(prev_end, now)
        fatigue = {s: decay_fatigue(f, tail, cfg) for s, f in fatigue.items()}

    return fatigue


def replay_section_fatigue(
    history: Sequence[WorkoutSession],
    section: MuscleSection,
    now: datetime,
    sensitivity: float = 1.0,
    config: EngineConfig | None = None,
) -> float:
    """Reconstruct one section's current fatigue from the session log."""
    return replay_fatigue(history, now, sensitivity, config)[section]
