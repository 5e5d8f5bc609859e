"""
Training plan suggestions.

Given current section states and today's focus groups:
- rank exercises that push sections which are fresh or short on weekly volume
- warn about fatigued sections and offer lower-cost alternatives
- suggest which muscle groups to focus on next
"""

from datetime import datetime
from typing import Mapping, Sequence

from .config import EngineConfig, resolve_config
from .exercises.base import Exercise
from .exercises.registry import all_exercises, exercises_for_section
from .models import (
    ExerciseRecommendation,
    PlanWarning,
    ReadinessState,
    SectionState,
    SorenessMap,
    StimulusZone,
)
from .readiness import section_readiness
from .stimulus import stimulus_zone
from .taxonomy import (
    MUSCLES,
    MuscleGroup,
    MuscleSection,
    group_for_section,
    section_name,
    sections_for_group,
)

# Group-score deltas used by suggested_focus
_READINESS_SCORE: dict[ReadinessState, int] = {
    ReadinessState.PRIMED: 3,
    ReadinessState.READY: 1,
    ReadinessState.CAUTION: -1,
    ReadinessState.RECOVERING: -3,
}
_ZONE_SCORE: dict[StimulusZone, int] = {
    StimulusZone.UNDERTRAINED: 2,
    StimulusZone.OPTIMAL: 0,
    StimulusZone.OVERTRAINED: -2,
}


def _classify(
    section: MuscleSection,
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    soreness: SorenessMap,
    cfg: EngineConfig,
) -> tuple[ReadinessState, StimulusZone]:
    state = section_states.get(section)
    if state is None:
        return ReadinessState.READY, StimulusZone.UNDERTRAINED
    return (
        section_readiness(state, now, soreness.get(section, 0), cfg),
        stimulus_zone(state.weekly_stimulus, cfg),
    )


def exercise_priority(
    exercise: Exercise,
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    soreness: SorenessMap | None = None,
    config: EngineConfig | None = None,
) -> float:
    """
    Priority score of an exercise.

    priority = Σ over targets with a state of
               w × (3 if PRIMED, 2 if READY, else 0) + w × (2 if undertrained)
    """
    cfg = resolve_config(config)
    soreness = soreness or {}
    priority = 0.0
    for section, weight in exercise.contributions.items():
        if section not in section_states:
            continue
        readiness, zone = _classify(section, section_states, now, soreness, cfg)
        if readiness == ReadinessState.PRIMED:
            priority += weight * 3
        elif readiness == ReadinessState.READY:
            priority += weight * 2
        if zone == StimulusZone.UNDERTRAINED:
            priority += weight * 2
    return priority


def recommendation_reason(
    section: MuscleSection,
    readiness: ReadinessState,
    zone: StimulusZone,
) -> str:
    """Short explanation of why an exercise was picked for *section*."""
    name = section_name(section)
    primed = readiness == ReadinessState.PRIMED
    undertrained = zone == StimulusZone.UNDERTRAINED
    if primed and undertrained:
        return f"Perfect timing! {name} is primed and needs more volume."
    if primed:
        return f"{name} is fully recovered and ready for growth."
    if undertrained:
        return f"Helps fill your weekly {name} volume gap."
    return f"Good compound movement for {name}."


def recommend_exercises(
    focus_groups: Sequence[MuscleGroup],
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    soreness: SorenessMap | None = None,
    config: EngineConfig | None = None,
) -> list[ExerciseRecommendation]:
    """
    Rank exercises for today's focus groups.

    A section is eligible when it is undertrained or READY/PRIMED; sections
    in CAUTION or RECOVERING are not pushed.  Exercises hitting an eligible
    section with contribution ≥ recommend_min_contribution become candidates;
    the first occurrence of an exercise id wins.

    Args:
        focus_groups: Groups selected for today
        section_states: Current section states (missing → fresh)
        now: Reference instant
        soreness: Optional soreness levels per section
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        Recommendations sorted by priority, highest first (stable)
    """
    cfg = resolve_config(config)
    soreness = soreness or {}
    seen: set[str] = set()
    recommendations: list[ExerciseRecommendation] = []

    for group in focus_groups:
        for section in sections_for_group(group):
            readiness, zone = _classify(section, section_states, now, soreness, cfg)
            eligible = zone == StimulusZone.UNDERTRAINED or readiness in (
                ReadinessState.PRIMED,
                ReadinessState.READY,
            )
            if not eligible:
                continue

            for exercise in exercises_for_section(section):
                if exercise.exercise_id in seen:
                    continue
                if exercise.contribution(section) < cfg.recommend_min_contribution:
                    continue
                seen.add(exercise.exercise_id)
                recommendations.append(
                    ExerciseRecommendation(
                        exercise_id=exercise.exercise_id,
                        name=exercise.display_name,
                        reason=recommendation_reason(section, readiness, zone),
                        target_sections=list(exercise.contributions),
                        priority=exercise_priority(exercise, section_states, now, soreness, cfg),
                    )
                )

    recommendations.sort(key=lambda r: r.priority, reverse=True)
    return recommendations


def find_alternatives(
    section: MuscleSection,
    section_states: Mapping[MuscleSection, SectionState],
    config: EngineConfig | None = None,
) -> list[Exercise]:
    """
    Exercises that still train *section* without loading other tired sections.

    A candidate needs contribution ≥ alternative_min_contribution to the
    section; it is disqualified when any other target has fatigue above
    alternative_fatigue_limit with weight above alternative_weight_limit.
    Catalog order, at most max_alternatives.
    """
    cfg = resolve_config(config)
    result: list[Exercise] = []
    for exercise in all_exercises():
        if exercise.contribution(section) < cfg.alternative_min_contribution:
            continue

        overloaded = any(
            other != section
            and other in section_states
            and section_states[other].fatigue > cfg.alternative_fatigue_limit
            and weight > cfg.alternative_weight_limit
            for other, weight in exercise.contributions.items()
        )
        if overloaded:
            continue

        result.append(exercise)
        if len(result) >= cfg.max_alternatives:
            break
    return result


def plan_warnings(
    focus_groups: Sequence[MuscleGroup],
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    soreness: SorenessMap | None = None,
    config: EngineConfig | None = None,
) -> list[PlanWarning]:
    """
    One warning per focus section in CAUTION or RECOVERING.

    Sections without a state are skipped.
    """
    cfg = resolve_config(config)
    soreness = soreness or {}
    warnings: list[PlanWarning] = []

    for group in focus_groups:
        for section in sections_for_group(group):
            state = section_states.get(section)
            if state is None:
                continue

            readiness = section_readiness(state, now, soreness.get(section, 0), cfg)
            if readiness == ReadinessState.RECOVERING:
                message = f"{section_name(section)} is still recovering. Consider resting or lighter work."
            elif readiness == ReadinessState.CAUTION:
                message = f"{section_name(section)} is approaching fatigue. Monitor intensity."
            else:
                continue

            warnings.append(
                PlanWarning(
                    section=section,
                    state=readiness,
                    message=message,
                    alternatives=[e.exercise_id for e in find_alternatives(section, section_states, cfg)],
                )
            )

    return warnings


def group_focus_scores(
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    soreness: SorenessMap | None = None,
    config: EngineConfig | None = None,
) -> dict[MuscleGroup, int]:
    """
    Focus score per group, summed over its sections that have a state.

    +3 PRIMED, +1 READY, −1 CAUTION, −3 RECOVERING; +2 undertrained,
    −2 overtrained.  Groups with no tracked sections are omitted.
    """
    cfg = resolve_config(config)
    soreness = soreness or {}
    scores: dict[MuscleGroup, int] = {}
    for muscle in MUSCLES:
        for definition in muscle.sections:
            section = definition.section
            if section not in section_states:
                continue
            readiness, zone = _classify(section, section_states, now, soreness, cfg)
            group = group_for_section(section)
            scores[group] = scores.get(group, 0) + _READINESS_SCORE[readiness] + _ZONE_SCORE[zone]
    return scores


def suggested_focus(
    section_states: Mapping[MuscleSection, SectionState],
    now: datetime,
    top_n: int | None = None,
    soreness: SorenessMap | None = None,
    config: EngineConfig | None = None,
) -> list[MuscleGroup]:
    """
    Groups to train next, best first.

    Ties keep taxonomy order.  top_n defaults to max_focus_muscles.
    """
    cfg = resolve_config(config)
    limit = cfg.max_focus_muscles if top_n is None else top_n
    scores = group_focus_scores(section_states, now, soreness, cfg)
    ranked = sorted(scores, key=lambda g: scores[g], reverse=True)
    return ranked[:limit]
