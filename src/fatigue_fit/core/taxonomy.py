"""
Muscle taxonomy: coarse muscle groups and the sections they contain.

Sections are the unit of all fatigue and stimulus bookkeeping.  Both
enumerations are closed; section-keyed dicts are always built over the
full MuscleSection set.
"""

from dataclasses import dataclass
from enum import Enum


class MuscleGroup(str, Enum):
    SHOULDERS = "shoulders"
    BACK = "back"
    CHEST = "chest"
    LEGS = "legs"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    FOREARMS = "forearms"


class MuscleSection(str, Enum):
    # Shoulders
    FRONT_DELT = "frontDelt"
    LATERAL_DELT = "lateralDelt"
    REAR_DELT = "rearDelt"
    # Back
    LATS = "lats"
    UPPER_BACK = "upperBack"
    LOWER_TRAPS = "lowerTraps"
    ERECTORS = "erectors"
    # Chest
    UPPER_CHEST = "upperChest"
    MID_CHEST = "midChest"
    LOWER_CHEST = "lowerChest"
    # Legs
    QUADS = "quads"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    # Arms (each its own group)
    BICEPS = "biceps"
    TRICEPS = "triceps"
    FOREARMS = "forearms"


@dataclass(frozen=True)
class SectionDefinition:
    """Display metadata for one section."""

    section: MuscleSection
    name: str
    group: MuscleGroup


@dataclass(frozen=True)
class MuscleDefinition:
    """Display metadata for one group and its ordered sections."""

    group: MuscleGroup
    name: str
    sections: tuple[SectionDefinition, ...]


def _group(group: MuscleGroup, name: str, *sections: tuple[MuscleSection, str]) -> MuscleDefinition:
    return MuscleDefinition(
        group=group,
        name=name,
        sections=tuple(SectionDefinition(s, n, group) for s, n in sections),
    )


MUSCLES: tuple[MuscleDefinition, ...] = (
    _group(
        MuscleGroup.SHOULDERS, "Shoulders",
        (MuscleSection.FRONT_DELT, "Front Delts"),
        (MuscleSection.LATERAL_DELT, "Lateral Delts"),
        (MuscleSection.REAR_DELT, "Rear Delts"),
    ),
    _group(
        MuscleGroup.BACK, "Back",
        (MuscleSection.LATS, "Lats"),
        (MuscleSection.UPPER_BACK, "Upper Back"),
        (MuscleSection.LOWER_TRAPS, "Lower Traps"),
        (MuscleSection.ERECTORS, "Erectors"),
    ),
    _group(
        MuscleGroup.CHEST, "Chest",
        (MuscleSection.UPPER_CHEST, "Upper Chest"),
        (MuscleSection.MID_CHEST, "Mid Chest"),
        (MuscleSection.LOWER_CHEST, "Lower Chest"),
    ),
    _group(
        MuscleGroup.LEGS, "Legs",
        (MuscleSection.QUADS, "Quads"),
        (MuscleSection.HAMSTRINGS, "Hamstrings"),
        (MuscleSection.GLUTES, "Glutes"),
        (MuscleSection.CALVES, "Calves"),
    ),
    _group(MuscleGroup.BICEPS, "Biceps", (MuscleSection.BICEPS, "Biceps")),
    _group(MuscleGroup.TRICEPS, "Triceps", (MuscleSection.TRICEPS, "Triceps")),
    _group(MuscleGroup.FOREARMS, "Forearms", (MuscleSection.FOREARMS, "Forearms")),
)

SECTIONS: tuple[SectionDefinition, ...] = tuple(s for m in MUSCLES for s in m.sections)

SECTION_GROUP: dict[MuscleSection, MuscleGroup] = {s.section: s.group for s in SECTIONS}

_MUSCLES_BY_GROUP: dict[MuscleGroup, MuscleDefinition] = {m.group: m for m in MUSCLES}
_SECTIONS_BY_ID: dict[MuscleSection, SectionDefinition] = {s.section: s for s in SECTIONS}


def get_muscle(group: MuscleGroup) -> MuscleDefinition:
    """Return the definition of a muscle group."""
    return _MUSCLES_BY_GROUP[group]


def get_section(section: MuscleSection) -> SectionDefinition:
    """Return the definition of a section."""
    return _SECTIONS_BY_ID[section]


def sections_for_group(group: MuscleGroup) -> list[MuscleSection]:
    """Return the sections of a group in taxonomy order."""
    return [s.section for s in _MUSCLES_BY_GROUP[group].sections]


def group_for_section(section: MuscleSection) -> MuscleGroup:
    """Return the group a section belongs to."""
    return SECTION_GROUP[section]


def section_name(section: MuscleSection) -> str:
    """Human-readable name, e.g. "Mid Chest"."""
    return _SECTIONS_BY_ID[section].name


def parse_group(value: str) -> MuscleGroup:
    """
    Parse a muscle group name (case-insensitive).

    Raises:
        ValueError: If the name is not a known group
    """
    try:
        return MuscleGroup(value.strip().lower())
    except ValueError:
        valid = ", ".join(g.value for g in MuscleGroup)
        raise ValueError(f"Unknown muscle group '{value}'. Valid groups: {valid}") from None


def parse_section(value: str) -> MuscleSection:
    """
    Parse a section id such as "midChest".

    Raises:
        ValueError: If the id is not a known section
    """
    try:
        return MuscleSection(value.strip())
    except ValueError:
        valid = ", ".join(s.value for s in MuscleSection)
        raise ValueError(f"Unknown muscle section '{value}'. Valid sections: {valid}") from None
