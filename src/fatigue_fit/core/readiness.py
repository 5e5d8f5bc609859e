"""
Readiness classification for sections, muscle groups and the whole body.

Section readiness is a precedence chain over effective fatigue
(fatigue plus a soreness penalty), weekly stimulus and time since the
section was last trained:

    PRIMED → RECOVERING → CAUTION → READY
"""

import math
from datetime import datetime
from typing import Iterable, Mapping

from .config import EngineConfig, resolve_config
from .metrics import hours_between
from .models import ReadinessState, SectionState, SorenessMap
from .taxonomy import MuscleGroup, MuscleSection, sections_for_group

# Higher = more concern.  Used to pick the "worst" state of a group.
_CONCERN_ORDER: dict[ReadinessState, int] = {
    ReadinessState.READY: 0,
    ReadinessState.PRIMED: 1,
    ReadinessState.CAUTION: 2,
    ReadinessState.RECOVERING: 3,
}

# Training priority: PRIMED first, RECOVERING last.
_TRAINING_PRIORITY: dict[ReadinessState, int] = {
    ReadinessState.PRIMED: 0,
    ReadinessState.READY: 1,
    ReadinessState.CAUTION: 2,
    ReadinessState.RECOVERING: 3,
}


def clamp_soreness(level: int) -> int:
    """Clamp a soreness level into 0-4."""
    return max(0, min(4, int(level)))


def soreness_penalty(level: int, config: EngineConfig | None = None) -> float:
    """
    Fatigue penalty for a soreness level.

    0 → 0, 1 → 5, 2 → 15, 3 → 30, 4 → 50
    """
    cfg = resolve_config(config)
    return cfg.soreness_penalties[clamp_soreness(level)]


def effective_fatigue(
    state: SectionState,
    soreness_level: int = 0,
    config: EngineConfig | None = None,
) -> float:
    """Fatigue plus the soreness penalty."""
    return state.fatigue + soreness_penalty(soreness_level, config)


def hours_since_trained(state: SectionState, now: datetime) -> float:
    """Hours since the section was last trained; infinite if never."""
    if state.last_trained_at is None:
        return math.inf
    return hours_between(state.last_trained_at, now)


def section_readiness(
    state: SectionState,
    now: datetime,
    soreness_level: int = 0,
    config: EngineConfig | None = None,
) -> ReadinessState:
    """
    Classify one section.

    1. PRIMED     iff F_eff ≤ primed_max_fatigue AND stimulus ≤ primed_max_stimulus
                  AND hours since trained ≥ primed_min_hours AND soreness ≤ 1
    2. RECOVERING iff F_eff ≥ recovering threshold
    3. CAUTION    iff F_eff ≥ caution threshold
    4. READY      otherwise

    Args:
        state: Current section state
        now: Reference instant
        soreness_level: Reported soreness 0-4
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        ReadinessState
    """
    cfg = resolve_config(config)
    level = clamp_soreness(soreness_level)
    f_eff = effective_fatigue(state, level, cfg)

    if (
        f_eff <= cfg.primed_max_fatigue
        and state.weekly_stimulus <= cfg.primed_max_stimulus
        and hours_since_trained(state, now) >= cfg.primed_min_hours_since_trained
        and level <= cfg.primed_max_soreness
    ):
        return ReadinessState.PRIMED

    if f_eff >= cfg.recovering_fatigue_threshold:
        return ReadinessState.RECOVERING

    if f_eff >= cfg.caution_fatigue_threshold:
        return ReadinessState.CAUTION

    return ReadinessState.READY


def worst_readiness(states: Iterable[ReadinessState]) -> ReadinessState:
    """
    Highest-concern state: RECOVERING > CAUTION > PRIMED > READY.

    An empty input gives READY.
    """
    worst = ReadinessState.READY
    for state in states:
        if _CONCERN_ORDER[state] > _CONCERN_ORDER[worst]:
            worst = state
    return worst


def all_section_readiness(
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    soreness: SorenessMap | None = None,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, ReadinessState]:
    """Readiness of every section; sections without a state are READY."""
    soreness = soreness or {}
    result: dict[MuscleSection, ReadinessState] = {}
    for section in MuscleSection:
        state = section_states.get(section)
        if state is None:
            result[section] = ReadinessState.READY
        else:
            result[section] = section_readiness(state, now, soreness.get(section, 0), config)
    return result


def group_readiness(
    group: MuscleGroup,
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    soreness: SorenessMap | None = None,
    config: EngineConfig | None = None,
) -> ReadinessState:
    """Worst readiness among a group's sections."""
    soreness = soreness or {}
    found = [
        section_readiness(section_states[s], now, soreness.get(s, 0), config)
        for s in sections_for_group(group)
        if s in section_states
    ]
    return worst_readiness(found)


def time_of_day_multiplier(now: datetime, config: EngineConfig | None = None) -> float:
    """
    Time-of-day readiness multiplier.

    05:00-11:59 morning, 12:00-17:59 afternoon, otherwise evening.
    """
    cfg = resolve_config(config)
    hour = now.hour
    if 5 <= hour < 12:
        return cfg.morning_multiplier
    if hour >= 18 or hour < 5:
        return cfg.evening_multiplier
    return cfg.afternoon_multiplier


def body_readiness(
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    last_session_end: datetime | None = None,
    config: EngineConfig | None = None,
) -> int:
    """
    Whole-body readiness percentage.

    fatigue_score = max(0, 100 − mean fatigue)
    R = w_f × fatigue_score + w_s × 100 + w_t × 100 × time_multiplier

    The time multiplier is reduced when the previous session ended less
    than 12 hours ago.  Sleep is not tracked and counts as full.

    Args:
        section_states: Current section states
        now: Reference instant
        last_session_end: End of the most recent session, if any
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        Integer percentage in [0, 100]; 100 when there are no states
    """
    cfg = resolve_config(config)
    states = list(section_states.values())
    if not states:
        return 100

    avg_fatigue = sum(s.fatigue for s in states) / len(states)
    fatigue_score = max(0.0, 100.0 - avg_fatigue)

    multiplier = time_of_day_multiplier(now, cfg)
    if last_session_end is not None:
        if hours_between(last_session_end, now) < cfg.unusual_time_window_hours:
            multiplier *= cfg.unusual_time_reduction

    readiness = (
        fatigue_score * cfg.avg_fatigue_weight
        + 100.0 * cfg.sleep_factor_weight
        + 100.0 * multiplier * cfg.time_factor_weight
    )
    # halves round up
    return math.floor(min(100.0, max(0.0, readiness)) + 0.5)


def sort_by_readiness(
    sections: Iterable[MuscleSection],
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    config: EngineConfig | None = None,
) -> list[MuscleSection]:
    """Order sections PRIMED, READY, CAUTION, RECOVERING (stable)."""

    def priority(section: MuscleSection) -> int:
        state = section_states.get(section)
        readiness = (
            section_readiness(state, now, config=config)
            if state is not None
            else ReadinessState.READY
        )
        return _TRAINING_PRIORITY[readiness]

    return sorted(sections, key=priority)
