"""
YAML → typed config loader.

Loads tuning constants from tuning.yaml (bundled with the package) and
optionally merges user overrides from ~/.fatigue-fit/tuning.yaml.

Usage:
    from fatigue_fit.core.engine.config_loader import load_engine_config
    cfg = load_engine_config()
    rate = cfg.recovery_per_hour

The YAML groups keys into sections (fatigue, stimulus, readiness, ...);
every key inside a section must be an EngineConfig field name.  Unknown
keys are ignored with a warning.  If the user override file has parse
errors, a warning is issued and the file is ignored.
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_CONFIG, EngineConfig

_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in dataclasses.fields(EngineConfig))

# Fields stored as tuples on EngineConfig
_TUPLE_FIELDS: frozenset[str] = frozenset(
    {"soreness_penalties", "consistency_offsets"}
)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; warn and return {} when it cannot be parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"fatigue-fit: ignoring {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _parse_effort_factors(raw: dict) -> tuple[tuple[float, float], ...]:
    """Convert {rpe: factor} into ((rpe, factor), ...) sorted by RPE descending."""
    pairs = [(float(rpe), float(factor)) for rpe, factor in raw.items()]
    return tuple(sorted(pairs, key=lambda p: p[0], reverse=True))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def config_from_dict(data: dict[str, Any], base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
    """
    Build an EngineConfig from a (possibly sectioned) mapping.

    Top-level dict values are treated as sections and flattened one level;
    scalar top-level values are read directly.  ``effort_factors`` is a
    mapping of minimum RPE to factor.

    Args:
        data: Raw mapping, typically parsed YAML
        base: Config supplying values for keys not present in *data*

    Returns:
        New EngineConfig

    Raises:
        ValueError: If the resulting thresholds are inconsistent
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if key == "effort_factors" and isinstance(value, dict):
            flat[key] = value
        elif isinstance(value, dict):
            flat.update(value)
        else:
            flat[key] = value

    updates: dict[str, Any] = {}
    for key, value in flat.items():
        if key not in _FIELD_NAMES:
            warnings.warn(f"fatigue-fit: unknown tuning key '{key}' ignored", stacklevel=2)
            continue
        if key == "effort_factors":
            updates[key] = _parse_effort_factors(value)
        elif key in _TUPLE_FIELDS:
            updates[key] = tuple(value)
        else:
            updates[key] = value

    return dataclasses.replace(base, **updates)


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled tuning.yaml, or None if not found."""
    ref = importlib.resources.files("fatigue_fit").joinpath("tuning.yaml")
    with importlib.resources.as_file(ref) as p:
        return p if p.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.fatigue-fit/tuning.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".fatigue-fit" / "tuning.yaml"
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge raw tuning sections from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/fatigue_fit/tuning.yaml
    2. User override at ~/.fatigue-fit/tuning.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def load_engine_config() -> EngineConfig:
    """
    Load the merged YAML tuning as an EngineConfig.

    Falls back to DEFAULT_CONFIG (with a warning) when the merged values
    are inconsistent.
    """
    raw = load_model_config()
    if not raw:
        return DEFAULT_CONFIG
    try:
        return config_from_dict(raw)
    except (TypeError, ValueError) as exc:
        warnings.warn(
            f"fatigue-fit: invalid tuning configuration ({exc}); using defaults.",
            stacklevel=2,
        )
        return DEFAULT_CONFIG
