"""
Base type for exercise catalog entries.

An Exercise maps each muscle section it trains to a contribution weight
in [0, 1].  Weights for one exercise need not sum to 1.
"""

from dataclasses import dataclass, field

from ..taxonomy import MuscleGroup, MuscleSection


@dataclass(frozen=True)
class Exercise:
    """Static catalog entry."""

    # Identity
    exercise_id: str          # e.g. "bench-press"
    display_name: str         # e.g. "Bench Press"
    muscle_group: MuscleGroup

    # Section → contribution weight (0-1)
    contributions: dict[MuscleSection, float]

    # Display metadata
    equipment: tuple[str, ...] = field(default_factory=tuple)
    difficulty: str = "beginner"  # "beginner" | "intermediate" | "advanced"
    form_tip: str = ""

    def contribution(self, section: MuscleSection) -> float:
        """Contribution weight for *section*; 0.0 when not targeted."""
        return self.contributions.get(section, 0.0)

    @property
    def target_sections(self) -> list[MuscleSection]:
        """Sections with a positive contribution, in catalog order."""
        return [s for s, w in self.contributions.items() if w > 0]
