"""
YAML → Exercise loader.

Loads the exercise catalog from the YAML files in the bundled
``src/fatigue_fit/exercises/`` directory.  Each file (e.g. chest.yaml)
holds an ``exercises:`` list of flat exercise definitions.

User overrides: place YAML files in ``~/.fatigue-fit/exercises/``.  An
entry whose exercise_id matches a bundled exercise is deep-merged over it,
so only changed keys need to be listed.  Entries with a new exercise_id
are added to the catalog.

Usage (internal, called by registry.py):
    from .loader import load_exercises_from_yaml
    exercises = load_exercises_from_yaml()   # dict or None on failure
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

import yaml

from ..taxonomy import MuscleGroup, MuscleSection
from .base import Exercise

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {
        "exercise_id",
        "display_name",
        "muscle_group",
        "contributions",
    }
)

_DIFFICULTIES: frozenset[str] = frozenset({"beginner", "intermediate", "advanced"})


def _parse_contributions(raw: dict) -> dict[MuscleSection, float]:
    """Convert {sectionId: weight} to a section-keyed dict, validating weights."""
    if not isinstance(raw, dict) or not raw:
        raise ValueError("contributions must be a non-empty mapping")
    result: dict[MuscleSection, float] = {}
    for key, value in raw.items():
        try:
            section = MuscleSection(key)
        except ValueError:
            raise ValueError(f"unknown muscle section '{key}'") from None
        weight = float(value)
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"contribution for '{key}' must be within [0, 1], got {weight}")
        result[section] = weight
    return result


def exercise_from_dict(d: dict) -> Exercise:
    """Convert a raw dict (from YAML) to an Exercise.

    Raises ValueError if any required field is absent or invalid.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"Exercise missing fields: {sorted(missing)}")

    try:
        group = MuscleGroup(d["muscle_group"])
    except ValueError:
        raise ValueError(f"unknown muscle group '{d['muscle_group']}'") from None

    difficulty = str(d.get("difficulty", "beginner"))
    if difficulty not in _DIFFICULTIES:
        raise ValueError(f"invalid difficulty '{difficulty}'")

    return Exercise(
        exercise_id=str(d["exercise_id"]),
        display_name=str(d["display_name"]),
        muscle_group=group,
        contributions=_parse_contributions(d["contributions"]),
        equipment=tuple(str(e) for e in d.get("equipment") or ()),
        difficulty=difficulty,
        form_tip=str(d.get("form_tip", "")),
    )


def _load_yaml_entries(path: Path) -> list[dict]:
    """Load the ``exercises`` list of a YAML file; [] with a warning on error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"fatigue-fit: cannot read {path} ({exc})", stacklevel=2)
        return []
    if not isinstance(data, dict):
        return []
    entries = data.get("exercises") or []
    return [e for e in entries if isinstance(e, dict)]


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _get_bundled_exercises_dir() -> Path | None:
    """Return path to the bundled exercises/ data directory, or None if not found."""
    # loader.py lives at src/fatigue_fit/core/exercises/loader.py
    # three levels up → src/fatigue_fit/
    candidate = Path(__file__).parent.parent.parent / "exercises"
    return candidate if candidate.is_dir() else None


def _get_user_exercises_dir() -> Path | None:
    """Return ~/.fatigue-fit/exercises/ if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".fatigue-fit" / "exercises"
    return p if p.is_dir() else None


def _collect_raw(directory: Path) -> list[dict]:
    raw: list[dict] = []
    for p in sorted(directory.glob("*.yaml")):
        raw.extend(_load_yaml_entries(p))
    return raw


def load_exercises_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[str, Exercise] | None:
    """Return {exercise_id: Exercise} loaded from YAML files.

    Bundled entries keep their file order (files sorted by name), user-only
    entries are appended after them.  Invalid entries are skipped with a
    warning.

    Args:
        bundled_dir: Directory of bundled YAML files (default: package data)
        user_dir: Directory of user overrides (default: ~/.fatigue-fit/exercises)

    Returns:
        Ordered mapping, or None when nothing could be loaded
    """
    if bundled_dir is None:
        bundled_dir = _get_bundled_exercises_dir()
    if user_dir is None:
        user_dir = _get_user_exercises_dir()

    if bundled_dir is None and user_dir is None:
        return None

    raw_by_id: dict[str, dict] = {}
    if bundled_dir is not None:
        for entry in _collect_raw(bundled_dir):
            ex_id = entry.get("exercise_id")
            if ex_id is not None:
                raw_by_id[str(ex_id)] = entry

    if user_dir is not None:
        for entry in _collect_raw(user_dir):
            ex_id = entry.get("exercise_id")
            if ex_id is None:
                continue
            ex_id = str(ex_id)
            if ex_id in raw_by_id:
                # User contributions replace the bundled mapping wholesale
                merged = _deep_merge(raw_by_id[ex_id], entry)
                if "contributions" in entry:
                    merged["contributions"] = entry["contributions"]
                raw_by_id[ex_id] = merged
            else:
                raw_by_id[ex_id] = entry

    result: dict[str, Exercise] = {}
    for ex_id, raw in raw_by_id.items():
        try:
            result[ex_id] = exercise_from_dict(raw)
        except ValueError as exc:
            warnings.warn(
                f"fatigue-fit: skipping exercise '{ex_id}': {exc}",
                stacklevel=2,
            )

    return result if result else None
