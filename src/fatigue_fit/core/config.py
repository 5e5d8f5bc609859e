"""
Configuration constants for the fatigue/recovery model.

All adjustable parameters are centralized here for easy tuning.
Values can be overridden from YAML (see core/engine/config_loader.py);
engines take an EngineConfig and fall back to DEFAULT_CONFIG.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# FATIGUE
# =============================================================================

BASE_GAIN_PER_SET: Final[float] = 6.0  # Base fatigue added per set
RECOVERY_PER_HOUR: Final[float] = 1.5  # Fatigue recovered per hour
MAX_FATIGUE: Final[float] = 100.0
MIN_FATIGUE: Final[float] = 0.0

# =============================================================================
# RPE → EFFORT FACTOR
# =============================================================================

# (minimum RPE, factor), checked from the top; anything below 6 gets the floor.
EFFORT_FACTORS: Final[tuple[tuple[float, float], ...]] = (
    (10.0, 1.5),  # RIR 0, failure
    (9.0, 1.3),   # RIR 1
    (8.0, 1.1),   # RIR 2
    (7.0, 1.0),   # RIR 3
    (6.0, 0.85),  # RIR 4
)
EFFORT_FACTOR_FLOOR: Final[float] = 0.7  # RIR 5+

# =============================================================================
# WEEKLY STIMULUS
# =============================================================================

HARD_SET_MIN_RPE: Final[float] = 7.0
MIN_SETS_PER_WEEK: Final[float] = 6.0    # Below this: undertrained
OPTIMAL_SETS_MIN: Final[float] = 10.0
OPTIMAL_SETS_MAX: Final[float] = 20.0
MAX_SETS_PER_WEEK: Final[float] = 25.0   # Above this: overtrained
WEEK_RESET_WEEKDAY: Final[int] = 0       # Monday (datetime.weekday numbering)

# Stimulus points by contribution weight tier
STIMULUS_PRIMARY_WEIGHT: Final[float] = 0.5
STIMULUS_SECONDARY_WEIGHT: Final[float] = 0.2
STIMULUS_PRIMARY_POINTS: Final[float] = 1.0
STIMULUS_SECONDARY_POINTS: Final[float] = 0.5
STIMULUS_MINOR_POINTS: Final[float] = 0.25

# =============================================================================
# READINESS
# =============================================================================

RECOVERING_FATIGUE_THRESHOLD: Final[float] = 70.0
CAUTION_FATIGUE_THRESHOLD: Final[float] = 50.0
PRIMED_MAX_FATIGUE: Final[float] = 20.0
PRIMED_MAX_STIMULUS: Final[float] = 4.0
PRIMED_MIN_HOURS_SINCE_TRAINED: Final[float] = 48.0
PRIMED_MAX_SORENESS: Final[int] = 1

# Soreness level 0-4 → fatigue penalty
SORENESS_PENALTIES: Final[tuple[float, ...]] = (0.0, 5.0, 15.0, 30.0, 50.0)

# =============================================================================
# BODY READINESS
# =============================================================================

MORNING_MULTIPLIER: Final[float] = 0.95    # 05:00-11:59
AFTERNOON_MULTIPLIER: Final[float] = 1.0   # 12:00-17:59
EVENING_MULTIPLIER: Final[float] = 0.98    # 18:00-04:59
UNUSUAL_TIME_REDUCTION: Final[float] = 0.9
UNUSUAL_TIME_WINDOW_HOURS: Final[float] = 12.0

AVG_FATIGUE_WEIGHT: Final[float] = 0.6
SLEEP_FACTOR_WEIGHT: Final[float] = 0.2   # Sleep is not tracked; assumed 100
TIME_FACTOR_WEIGHT: Final[float] = 0.2

# =============================================================================
# COACH / CONSISTENCY
# =============================================================================

RECOMMENDED_REST_HOURS: Final[float] = 24.0
DEFAULT_AVERAGE_INTERVAL_HOURS: Final[float] = 48.0
CONSISTENCY_WINDOW_INTERVALS: Final[int] = 5

# Days past the average cadence allowed for ON_TRACK / MISSED / DRIFTING.
CONSISTENCY_OFFSETS: Final[tuple[int, int, int]] = (1, 2, 3)

# =============================================================================
# PLAN
# =============================================================================

RECOMMEND_MIN_CONTRIBUTION: Final[float] = 0.3
ALTERNATIVE_MIN_CONTRIBUTION: Final[float] = 0.2
ALTERNATIVE_FATIGUE_LIMIT: Final[float] = 50.0
ALTERNATIVE_WEIGHT_LIMIT: Final[float] = 0.2
MAX_ALTERNATIVES: Final[int] = 3
MAX_FOCUS_MUSCLES: Final[int] = 3
MIN_FOCUS_MUSCLES: Final[int] = 1

# =============================================================================
# PROFILE DEFAULTS
# =============================================================================

DEFAULT_SENSITIVITY: Final[float] = 1.0
MIN_SENSITIVITY: Final[float] = 0.5
MAX_SENSITIVITY: Final[float] = 2.0


@dataclass(frozen=True)
class EngineConfig:
    """
    Complete set of tuning values used by the engines.

    Defaults mirror the module constants above. Instances are immutable;
    build a new one (or use dataclasses.replace) to change a value.
    """

    base_gain_per_set: float = BASE_GAIN_PER_SET
    recovery_per_hour: float = RECOVERY_PER_HOUR
    max_fatigue: float = MAX_FATIGUE
    min_fatigue: float = MIN_FATIGUE

    effort_factors: tuple[tuple[float, float], ...] = EFFORT_FACTORS
    effort_factor_floor: float = EFFORT_FACTOR_FLOOR

    hard_set_min_rpe: float = HARD_SET_MIN_RPE
    min_sets_per_week: float = MIN_SETS_PER_WEEK
    optimal_sets_min: float = OPTIMAL_SETS_MIN
    optimal_sets_max: float = OPTIMAL_SETS_MAX
    max_sets_per_week: float = MAX_SETS_PER_WEEK
    week_reset_weekday: int = WEEK_RESET_WEEKDAY
    stimulus_primary_weight: float = STIMULUS_PRIMARY_WEIGHT
    stimulus_secondary_weight: float = STIMULUS_SECONDARY_WEIGHT
    stimulus_primary_points: float = STIMULUS_PRIMARY_POINTS
    stimulus_secondary_points: float = STIMULUS_SECONDARY_POINTS
    stimulus_minor_points: float = STIMULUS_MINOR_POINTS

    recovering_fatigue_threshold: float = RECOVERING_FATIGUE_THRESHOLD
    caution_fatigue_threshold: float = CAUTION_FATIGUE_THRESHOLD
    primed_max_fatigue: float = PRIMED_MAX_FATIGUE
    primed_max_stimulus: float = PRIMED_MAX_STIMULUS
    primed_min_hours_since_trained: float = PRIMED_MIN_HOURS_SINCE_TRAINED
    primed_max_soreness: int = PRIMED_MAX_SORENESS
    soreness_penalties: tuple[float, ...] = SORENESS_PENALTIES

    morning_multiplier: float = MORNING_MULTIPLIER
    afternoon_multiplier: float = AFTERNOON_MULTIPLIER
    evening_multiplier: float = EVENING_MULTIPLIER
    unusual_time_reduction: float = UNUSUAL_TIME_REDUCTION
    unusual_time_window_hours: float = UNUSUAL_TIME_WINDOW_HOURS
    avg_fatigue_weight: float = AVG_FATIGUE_WEIGHT
    sleep_factor_weight: float = SLEEP_FACTOR_WEIGHT
    time_factor_weight: float = TIME_FACTOR_WEIGHT

    recommended_rest_hours: float = RECOMMENDED_REST_HOURS
    default_average_interval_hours: float = DEFAULT_AVERAGE_INTERVAL_HOURS
    consistency_window_intervals: int = CONSISTENCY_WINDOW_INTERVALS
    consistency_offsets: tuple[int, int, int] = CONSISTENCY_OFFSETS

    recommend_min_contribution: float = RECOMMEND_MIN_CONTRIBUTION
    alternative_min_contribution: float = ALTERNATIVE_MIN_CONTRIBUTION
    alternative_fatigue_limit: float = ALTERNATIVE_FATIGUE_LIMIT
    alternative_weight_limit: float = ALTERNATIVE_WEIGHT_LIMIT
    max_alternatives: int = MAX_ALTERNATIVES
    max_focus_muscles: int = MAX_FOCUS_MUSCLES
    min_focus_muscles: int = MIN_FOCUS_MUSCLES

    def __post_init__(self) -> None:
        """Validate the thresholds that must stay ordered."""
        if self.min_fatigue > self.max_fatigue:
            raise ValueError("min_fatigue must not exceed max_fatigue")
        if self.recovery_per_hour < 0:
            raise ValueError("recovery_per_hour must be non-negative")
        if self.min_sets_per_week > self.max_sets_per_week:
            raise ValueError("min_sets_per_week must not exceed max_sets_per_week")
        if not 0 <= self.week_reset_weekday <= 6:
            raise ValueError("week_reset_weekday must be 0 (Monday) .. 6 (Sunday)")
        if len(self.soreness_penalties) != 5:
            raise ValueError("soreness_penalties must list levels 0-4")
        on_track, missed, drifting = self.consistency_offsets
        if not on_track <= missed <= drifting:
            raise ValueError("consistency_offsets must be non-decreasing")


DEFAULT_CONFIG: Final[EngineConfig] = EngineConfig()


def resolve_config(config: EngineConfig | None) -> EngineConfig:
    """Return *config*, or DEFAULT_CONFIG when it is None."""
    return config if config is not None else DEFAULT_CONFIG
