"""
Data models for fatigue-fit.

Dataclasses for logged training data, per-section state, and the derived
outputs of the engines.  Constructors validate their own fields; the
engines themselves never raise on well-typed input.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal

from .config import DEFAULT_SENSITIVITY, MAX_SENSITIVITY, MIN_SENSITIVITY
from .taxonomy import MuscleGroup, MuscleSection

SessionStatus = Literal["in_progress", "ended"]
Severity = Literal["default", "success", "warning", "destructive"]
TimePreference = Literal["morning", "afternoon", "evening"]
UserMode = Literal["beginner", "intermediate"]
WeightUnit = Literal["kg", "lb"]
LocationType = Literal["home", "gym", "other"]

SorenessMap = dict[MuscleSection, int]  # 0-4 per section


class ReadinessState(str, Enum):
    RECOVERING = "RECOVERING"
    CAUTION = "CAUTION"
    READY = "READY"
    PRIMED = "PRIMED"


class StimulusZone(str, Enum):
    UNDERTRAINED = "undertrained"
    OPTIMAL = "optimal"
    OVERTRAINED = "overtrained"


class ConsistencyState(str, Enum):
    ON_TRACK = "ON_TRACK"
    MISSED = "MISSED"
    DRIFTING = "DRIFTING"
    RESET = "RESET"


class RecoveryState(str, Enum):
    REST = "REST"
    READY = "READY"


@dataclass(frozen=True)
class LoggedSet:
    """
    One performed set.

    The atomic unit of training-load evidence; immutable once created.
    """

    exercise_id: str
    weight_kg: float
    reps: int
    rpe: float  # 1-10
    timestamp: datetime
    set_id: str = ""

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        if self.reps < 1:
            raise ValueError("reps must be at least 1")
        if not 1 <= self.rpe <= 10:
            raise ValueError(f"rpe must be between 1 and 10, got {self.rpe}")


@dataclass
class SectionState:
    """
    Per-section aggregate of fatigue and weekly stimulus.

    fatigue stays within 0-100; engines return new instances rather than
    mutating existing ones.
    """

    fatigue: float = 0.0
    weekly_stimulus: float = 0.0
    last_trained_at: datetime | None = None


@dataclass
class ExerciseEntry:
    """An exercise performed within a session and the sets logged for it."""

    entry_id: str
    exercise_id: str
    name: str
    targets: list[MuscleSection] = field(default_factory=list)
    sets: list[LoggedSet] = field(default_factory=list)


@dataclass
class WorkoutLocation:
    """Where a session took place."""

    type: LocationType = "gym"
    label: str | None = None

    def __post_init__(self) -> None:
        if self.type not in ("home", "gym", "other"):
            raise ValueError(f"Invalid location type: {self.type}")


@dataclass
class WorkoutSession:
    """
    A training session.

    Created in progress, mutated only through core.workout while in
    progress, and frozen (status="ended") once finished.  The session log
    is the sole source of truth for section state.
    """

    session_id: str
    started_at: datetime
    ended_at: datetime | None = None
    status: SessionStatus = "in_progress"
    focus_muscles: list[MuscleGroup] = field(default_factory=list)
    exercise_entries: list[ExerciseEntry] = field(default_factory=list)
    pre_workout_soreness: SorenessMap = field(default_factory=dict)
    location: WorkoutLocation | None = None

    @property
    def duration_seconds(self) -> int:
        """Seconds between start and end; 0 while in progress."""
        if self.ended_at is None:
            return 0
        return max(0, round((self.ended_at - self.started_at).total_seconds()))

    @property
    def is_ended(self) -> bool:
        return self.status == "ended"

    def all_sets(self) -> list[LoggedSet]:
        """All logged sets across entries, in entry order."""
        return [s for entry in self.exercise_entries for s in entry.sets]


@dataclass
class CoachBanner:
    """User-facing coaching message."""

    title: str
    subtitle: str
    severity: Severity
    primary_cta: str
    secondary_cta: str | None = None


@dataclass
class CoachState:
    """
    Derived coaching state.

    Fully recomputable from session history and "now"; safe to discard.
    """

    consistency_state: ConsistencyState
    recovery_state: RecoveryState
    banner: CoachBanner
    updated_at: datetime
    last_ended_session_id: str | None = None
    last_workout_ended_at: datetime | None = None
    next_recommended_start_at: datetime | None = None
    rest_hours_recommended: float = 24.0
    average_interval_hours: float = 48.0
    days_since_last_workout: int = 0


@dataclass
class UserProfile:
    """
    Training preferences.

    ``fatigue_sensitivity`` scales every fatigue gain (1.0 = neutral).
    """

    mode: UserMode = "intermediate"
    days_per_week: int = 4
    session_length_minutes: int = 60
    time_preference: TimePreference = "afternoon"
    fatigue_sensitivity: float = DEFAULT_SENSITIVITY
    is_onboarded: bool = False
    default_location: WorkoutLocation = field(default_factory=WorkoutLocation)

    def __post_init__(self) -> None:
        """Validate profile data."""
        if self.mode not in ("beginner", "intermediate"):
            raise ValueError(f"Invalid mode: {self.mode}")
        if not 1 <= self.days_per_week <= 7:
            raise ValueError("days_per_week must be between 1 and 7")
        if not 15 <= self.session_length_minutes <= 180:
            raise ValueError("session_length_minutes must be between 15 and 180")
        if self.time_preference not in ("morning", "afternoon", "evening"):
            raise ValueError(f"Invalid time_preference: {self.time_preference}")
        if not MIN_SENSITIVITY <= self.fatigue_sensitivity <= MAX_SENSITIVITY:
            raise ValueError(
                f"fatigue_sensitivity must be between {MIN_SENSITIVITY} and {MAX_SENSITIVITY}"
            )


@dataclass
class UserSettings:
    """Display settings."""

    units: WeightUnit = "kg"
    calibration_mode: bool = True

    def __post_init__(self) -> None:
        if self.units not in ("kg", "lb"):
            raise ValueError(f"Invalid units: {self.units}. Must be 'kg' or 'lb'")


@dataclass
class ExerciseRecommendation:
    """An exercise suggested for today's focus, with its priority score."""

    exercise_id: str
    name: str
    reason: str
    target_sections: list[MuscleSection]
    priority: float


@dataclass
class PlanWarning:
    """A focus section that is fatigued, with lower-cost alternatives."""

    section: MuscleSection
    state: ReadinessState
    message: str
    alternatives: list[str] = field(default_factory=list)  # exercise ids


@dataclass
class WeeklyStats:
    """Summary of the last seven days of sessions."""

    session_count: int
    total_duration_seconds: int
    top_muscles: list[MuscleGroup]

    @property
    def hours(self) -> int:
        return self.total_duration_seconds // 3600

    @property
    def minutes(self) -> int:
        return (self.total_duration_seconds % 3600) // 60


@dataclass
class DerivedState:
    """Everything the host application displays, recomputed from history."""

    section_states: dict[MuscleSection, SectionState]
    section_readiness: dict[MuscleSection, ReadinessState]
    group_readiness: dict[MuscleGroup, ReadinessState]
    stimulus_zones: dict[MuscleSection, StimulusZone]
    body_readiness: int
    coach: CoachState
    suggested_focus: list[MuscleGroup]
    computed_at: datetime


@dataclass
class UserStats:
    """Lifetime training summary derived from history."""

    total_sessions: int = 0
    current_streak: int = 0  # consecutive training days
    longest_streak: int = 0
    prs_unlocked: int = 0
    favorite_muscle: MuscleGroup | None = None
    recovery_score: int = 100


@dataclass(frozen=True)
class Badge:
    """An achievement; locked while unlocked_at is None."""

    badge_id: str
    name: str
    description: str
    requirement: str
    unlocked_at: datetime | None = None

    @property
    def unlocked(self) -> bool:
        return self.unlocked_at is not None
