"""
Exercise registry.

All catalog exercises are registered here.  Exercises are loaded from the
bundled YAML files at import time; if nothing can be loaded a
RuntimeError is raised.

Use find_exercise() from the engines (unknown ids give None, which the
engines treat as zero contribution) and get_exercise() from user-facing
code that should reject unknown ids.
"""

from ..taxonomy import MuscleGroup, MuscleSection
from .base import Exercise


def _build_registry() -> dict[str, Exercise]:
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "fatigue-fit: no exercise definitions could be loaded from YAML. "
            "Check that src/fatigue_fit/exercises/*.yaml files are present and valid."
        )
    return loaded


EXERCISE_REGISTRY: dict[str, Exercise] = _build_registry()


def all_exercises() -> list[Exercise]:
    """All catalog exercises in catalog order."""
    return list(EXERCISE_REGISTRY.values())


def find_exercise(exercise_id: str) -> Exercise | None:
    """Return the Exercise for *exercise_id*, or None if it is not in the catalog."""
    return EXERCISE_REGISTRY.get(exercise_id)


def get_exercise(exercise_id: str) -> Exercise:
    """
    Return the Exercise for the given exercise_id.

    Args:
        exercise_id: Catalog id, e.g. "bench-press"

    Returns:
        Exercise for the requested id

    Raises:
        ValueError: If exercise_id is not in the registry
    """
    if exercise_id not in EXERCISE_REGISTRY:
        valid = ", ".join(EXERCISE_REGISTRY)
        raise ValueError(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")
    return EXERCISE_REGISTRY[exercise_id]


def exercises_for_group(group: MuscleGroup) -> list[Exercise]:
    """Exercises whose owning group is *group*."""
    return [e for e in EXERCISE_REGISTRY.values() if e.muscle_group == group]


def exercises_for_section(section: MuscleSection) -> list[Exercise]:
    """Exercises that list *section* in their contributions."""
    return [e for e in EXERCISE_REGISTRY.values() if section in e.contributions]


def contribution_weight(exercise_id: str, section: MuscleSection) -> float:
    """Contribution of an exercise to a section; 0.0 for unknown exercises."""
    exercise = EXERCISE_REGISTRY.get(exercise_id)
    if exercise is None:
        return 0.0
    return exercise.contribution(section)
