"""
Exercise catalog for fatigue-fit.

Each exercise maps the muscle sections it trains to a contribution weight;
the fatigue and stimulus engines read those weights.
"""

from .base import Exercise
from .registry import (
    EXERCISE_REGISTRY,
    all_exercises,
    contribution_weight,
    exercises_for_group,
    exercises_for_section,
    find_exercise,
    get_exercise,
)

__all__ = [
    "Exercise",
    "EXERCISE_REGISTRY",
    "all_exercises",
    "contribution_weight",
    "exercises_for_group",
    "exercises_for_section",
    "find_exercise",
    "get_exercise",
]
