"""
Weekly hypertrophy stimulus.

Only hard sets (RPE ≥ 7) earn stimulus credit.  Credit per section is
tiered by the exercise's contribution weight and accumulates until the
weekly reset boundary, which is checked lazily whenever state is read.
"""

from dataclasses import replace
from datetime import datetime, time, timedelta
from typing import Mapping, Sequence

from .config import EngineConfig, resolve_config
from .exercises.registry import find_exercise
from .metrics import usable_sessions
from .models import LoggedSet, SectionState, StimulusZone, WorkoutSession
from .taxonomy import MuscleSection


def is_hard_set(rpe: float, config: EngineConfig | None = None) -> bool:
    """A set counts toward hypertrophy stimulus when RPE ≥ 7."""
    return rpe >= resolve_config(config).hard_set_min_rpe


def stimulus_points(weight: float, config: EngineConfig | None = None) -> float:
    """
    Stimulus credit for one hard set at a given contribution weight.

    ≥0.5 → 1 point, ≥0.2 → 0.5 point, else 0.25 point.
    """
    cfg = resolve_config(config)
    if weight >= cfg.stimulus_primary_weight:
        return cfg.stimulus_primary_points
    if weight >= cfg.stimulus_secondary_weight:
        return cfg.stimulus_secondary_points
    return cfg.stimulus_minor_points


def stimulus_from_set(
    logged_set: LoggedSet,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, float]:
    """
    Stimulus points a set earns for each section its exercise targets.

    Args:
        logged_set: The performed set
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        {section: points}; empty for easy sets and unknown exercises
    """
    cfg = resolve_config(config)
    exercise = find_exercise(logged_set.exercise_id)
    if exercise is None or not is_hard_set(logged_set.rpe, cfg):
        return {}

    return {
        section: stimulus_points(weight, cfg)
        for section, weight in exercise.contributions.items()
        if weight > 0
    }


def stimulus_zone(weekly_stimulus: float, config: EngineConfig | None = None) -> StimulusZone:
    """
    Classify accumulated weekly stimulus.

    < min_sets_per_week → undertrained
    > max_sets_per_week → overtrained
    otherwise           → optimal
    """
    cfg = resolve_config(config)
    if weekly_stimulus < cfg.min_sets_per_week:
        return StimulusZone.UNDERTRAINED
    if weekly_stimulus > cfg.max_sets_per_week:
        return StimulusZone.OVERTRAINED
    return StimulusZone.OPTIMAL


def sets_to_optimal(weekly_stimulus: float, config: EngineConfig | None = None) -> float:
    """Hard sets still needed to reach the optimal range (0 once there)."""
    cfg = resolve_config(config)
    if weekly_stimulus >= cfg.optimal_sets_min:
        return 0.0
    return cfg.optimal_sets_min - weekly_stimulus


def stimulus_progress(weekly_stimulus: float, config: EngineConfig | None = None) -> float:
    """Progress through the optimal range as a percentage, capped at 100."""
    cfg = resolve_config(config)
    return min(100.0, weekly_stimulus / cfg.optimal_sets_max * 100.0)


def week_reset_boundary(now: datetime, config: EngineConfig | None = None) -> datetime:
    """
    Midnight at the start of the most recent reset weekday.

    If *now* falls on the reset weekday, that day's midnight is returned.
    The result keeps now's tzinfo.
    """
    cfg = resolve_config(config)
    days_since_reset = (now.weekday() - cfg.week_reset_weekday) % 7
    reset_day = (now - timedelta(days=days_since_reset)).date()
    return datetime.combine(reset_day, time.min, tzinfo=now.tzinfo)


def should_reset_weekly_stimulus(
    last_reset: datetime | None,
    now: datetime,
    config: EngineConfig | None = None,
) -> bool:
    """True when the last reset happened before the current week's boundary."""
    if last_reset is None:
        return True
    return last_reset < week_reset_boundary(now, config)


def reset_weekly_stimulus(
    section_states: Mapping[MuscleSection, SectionState],
    last_reset: datetime | None,
    now: datetime,
    config: EngineConfig | None = None,
) -> tuple[dict[MuscleSection, SectionState], datetime | None]:
    """
    Zero weekly stimulus if a reset boundary has passed since *last_reset*.

    Idempotent: calling it again in the same week changes nothing.

    Returns:
        (new states, new last-reset timestamp)
    """
    if not should_reset_weekly_stimulus(last_reset, now, config):
        return {s: replace(st) for s, st in section_states.items()}, last_reset

    states = {s: replace(st, weekly_stimulus=0.0) for s, st in section_states.items()}
    return states, now


def add_stimulus(weekly_stimulus: float, points: float) -> float:
    """Accumulate stimulus, floored at zero."""
    return max(0.0, weekly_stimulus + points)


def replay_weekly_stimulus(
    history: Sequence[WorkoutSession],
    now: datetime,
    config: EngineConfig | None = None,
) -> dict[MuscleSection, float]:
    """
    Rebuild this week's stimulus from the session log.

    Sums stimulus of every set logged between the current reset boundary
    and *now*.

    Returns:
        {section: weekly stimulus} for every MuscleSection
    """
    cfg = resolve_config(config)
    boundary = week_reset_boundary(now, cfg)
    totals: dict[MuscleSection, float] = {s: 0.0 for s in MuscleSection}

    for session in usable_sessions(history, now):
        for logged_set in session.all_sets():
            if not boundary <= logged_set.timestamp <= now:
                continue
            for section, points in stimulus_from_set(logged_set, cfg).items():
                totals[section] = add_stimulus(totals[section], points)

    return totals
