"""
Formula-focused unit tests for the core engines.

Each test verifies one formula or classification rule:
- effort factor, fatigue gain and linear decay
- stimulus tiers, zones and the weekly reset boundary
- section readiness precedence, soreness penalty and body readiness
- consistency classification and coach banners
- unit conversion

Values are hand-computed from the formulas so the tests pin the arithmetic.
"""

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from fatigue_fit.core.coach import (
    average_interval_hours,
    classify_consistency,
    compute_coach_state,
    compute_consistency_state,
    compute_recovery_state,
    days_since_last_workout,
    ended_sessions,
    format_time_until,
    generate_coach_banner,
)
from fatigue_fit.core.config import (
    BASE_GAIN_PER_SET,
    DEFAULT_CONFIG,
    EFFORT_FACTOR_FLOOR,
    MAX_SETS_PER_WEEK,
    MIN_SETS_PER_WEEK,
    EngineConfig,
)
from fatigue_fit.core.exercises import all_exercises
from fatigue_fit.core.fatigue import (
    clamp_fatigue,
    decay_fatigue,
    effort_factor,
    fatigue_gain,
    set_fatigue_contributions,
)
from fatigue_fit.core.models import (
    ConsistencyState,
    LoggedSet,
    ReadinessState,
    RecoveryState,
    SectionState,
    StimulusZone,
    WorkoutSession,
)
from fatigue_fit.core.readiness import (
    body_readiness,
    effective_fatigue,
    group_readiness,
    section_readiness,
    soreness_penalty,
    sort_by_readiness,
    time_of_day_multiplier,
    worst_readiness,
)
from fatigue_fit.core.stimulus import (
    add_stimulus,
    is_hard_set,
    reset_weekly_stimulus,
    sets_to_optimal,
    should_reset_weekly_stimulus,
    stimulus_from_set,
    stimulus_points,
    stimulus_progress,
    stimulus_zone,
    week_reset_boundary,
)
from fatigue_fit.core.taxonomy import MuscleGroup, MuscleSection
from fatigue_fit.core.units import format_weight, parse_weight_input, round_weight, to_kg

# 2024-01-08 is a Monday
MONDAY = datetime(2024, 1, 8, 0, 0)
WEDNESDAY_AFTERNOON = datetime(2024, 1, 10, 14, 0)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _set(exercise_id: str = "bench-press", rpe: float = 9.0, at: datetime = WEDNESDAY_AFTERNOON) -> LoggedSet:
    return LoggedSet(exercise_id=exercise_id, weight_kg=80.0, reps=8, rpe=rpe, timestamp=at)


def _ended(ended_at: datetime, duration_hours: float = 1.0, session_id: str = "") -> WorkoutSession:
    started = ended_at - timedelta(hours=duration_hours)
    return WorkoutSession(
        session_id=session_id or ended_at.isoformat(),
        started_at=started,
        ended_at=ended_at,
        status="ended",
    )


# ---------------------------------------------------------------------------
# Effort factor
# ---------------------------------------------------------------------------

class TestEffortFactor:
    """E(rpe): ≥10 → 1.5, ≥9 → 1.3, ≥8 → 1.1, ≥7 → 1.0, ≥6 → 0.85, else 0.7."""

    @pytest.mark.parametrize(
        "rpe, expected",
        [(10, 1.5), (9.5, 1.3), (9, 1.3), (8, 1.1), (7.5, 1.0), (7, 1.0), (6, 0.85), (5.5, 0.7), (1, 0.7)],
    )
    def test_step_values(self, rpe, expected):
        assert effort_factor(rpe) == pytest.approx(expected)

    def test_non_decreasing_from_5_to_10(self):
        rpes = [5 + 0.5 * i for i in range(11)]
        factors = [effort_factor(r) for r in rpes]
        assert factors == sorted(factors)

    def test_floor_below_lowest_step(self):
        assert effort_factor(3) == EFFORT_FACTOR_FLOOR


# ---------------------------------------------------------------------------
# Fatigue gain and decay
# ---------------------------------------------------------------------------

class TestFatigueGain:
    """Δfatigue = base × contribution × sensitivity × E(rpe)."""

    def test_bench_press_rpe9_mid_chest(self):
        # 6 × 0.6 × 1.0 × 1.3 = 4.68
        gain = fatigue_gain(_set(rpe=9), MuscleSection.MID_CHEST)
        assert gain == pytest.approx(4.68)

    def test_bench_press_secondary_sections_smaller(self):
        s = _set(rpe=9)
        mid = fatigue_gain(s, MuscleSection.MID_CHEST)
        triceps = fatigue_gain(s, MuscleSection.TRICEPS)
        front = fatigue_gain(s, MuscleSection.FRONT_DELT)
        assert triceps == pytest.approx(6 * 0.25 * 1.3)
        assert front == pytest.approx(6 * 0.15 * 1.3)
        assert mid > triceps > front

    def test_sensitivity_scales_linearly(self):
        # 6 × 0.6 × 1.5 × 1.3 = 7.02
        gain = fatigue_gain(_set(rpe=9), MuscleSection.MID_CHEST, sensitivity=1.5)
        assert gain == pytest.approx(7.02)

    def test_untargeted_section_is_zero(self):
        assert fatigue_gain(_set(), MuscleSection.QUADS) == 0.0

    def test_unknown_exercise_is_zero(self):
        assert fatigue_gain(_set("no-such-exercise"), MuscleSection.MID_CHEST) == 0.0

    def test_gain_bounded_for_every_catalog_entry(self):
        upper = BASE_GAIN_PER_SET * 1.0 * 1.0 * effort_factor(10)
        for exercise in all_exercises():
            s = _set(exercise.exercise_id, rpe=10)
            for section in MuscleSection:
                assert 0.0 <= fatigue_gain(s, section) <= upper

    def test_calf_raise_at_failure_hits_upper_bound(self):
        # weight 1.0 → 6 × 1.0 × 1.5 = 9
        assert fatigue_gain(_set("calf-raise", rpe=10), MuscleSection.CALVES) == pytest.approx(9.0)

    def test_contributions_rounded(self):
        gains = set_fatigue_contributions(_set(rpe=9))
        assert set(gains) == {MuscleSection.MID_CHEST, MuscleSection.TRICEPS, MuscleSection.FRONT_DELT}
        assert gains[MuscleSection.MID_CHEST] == pytest.approx(4.7)
        assert gains[MuscleSection.FRONT_DELT] == pytest.approx(1.2)
        # 1.95 rounds to one decimal either way
        assert gains[MuscleSection.TRICEPS] == pytest.approx(1.95, abs=0.051)


class TestDecay:
    """F' = max(0, F − hours × 1.5)."""

    def test_linear_recovery(self):
        assert decay_fatigue(80, 10) == pytest.approx(65.0)

    def test_floors_at_zero(self):
        assert decay_fatigue(10, 100) == 0.0

    @pytest.mark.parametrize("fatigue", [0.0, 12.5, 50.0, 100.0])
    @pytest.mark.parametrize("hours", [0.0, 0.5, 7.0, 48.0, 500.0])
    def test_stays_within_zero_and_start(self, fatigue, hours):
        result = decay_fatigue(fatigue, hours)
        assert 0.0 <= result <= fatigue

    def test_negative_elapsed_is_zero(self):
        assert decay_fatigue(40, -5) == 40

    def test_clamp(self):
        assert clamp_fatigue(140) == 100
        assert clamp_fatigue(-3) == 0


# ---------------------------------------------------------------------------
# Stimulus
# ---------------------------------------------------------------------------

class TestStimulus:
    """Hard sets (RPE ≥ 7) earn 1 / 0.5 / 0.25 points by contribution tier."""

    def test_easy_set_earns_nothing(self):
        assert stimulus_from_set(_set(rpe=6.5)) == {}
        assert not is_hard_set(6.9)
        assert is_hard_set(7)

    def test_bench_press_rpe9_points(self):
        points = stimulus_from_set(_set(rpe=9))
        assert points[MuscleSection.MID_CHEST] == 1.0  # 0.6 ≥ 0.5
        assert points[MuscleSection.TRICEPS] == 0.5  # 0.25 ≥ 0.2
        assert points[MuscleSection.FRONT_DELT] == 0.25  # 0.15 < 0.2
        assert MuscleSection.QUADS not in points

    @pytest.mark.parametrize(
        "weight, expected",
        [(1.0, 1.0), (0.5, 1.0), (0.49, 0.5), (0.2, 0.5), (0.19, 0.25), (0.05, 0.25)],
    )
    def test_tiers(self, weight, expected):
        assert stimulus_points(weight) == expected

    def test_unknown_exercise(self):
        assert stimulus_from_set(_set("mystery", rpe=10)) == {}

    def test_zone_boundaries(self):
        assert stimulus_zone(MIN_SETS_PER_WEEK - 1) == StimulusZone.UNDERTRAINED
        assert stimulus_zone(MIN_SETS_PER_WEEK) == StimulusZone.OPTIMAL
        assert stimulus_zone(MAX_SETS_PER_WEEK) == StimulusZone.OPTIMAL
        assert stimulus_zone(MAX_SETS_PER_WEEK + 0.25) == StimulusZone.OVERTRAINED

    def test_sets_to_optimal(self):
        assert sets_to_optimal(4) == 6
        assert sets_to_optimal(12) == 0

    def test_stimulus_progress(self):
        assert stimulus_progress(5) == 25.0  # 5 / 20
        assert stimulus_progress(30) == 100.0

    def test_add_stimulus_floors_at_zero(self):
        assert add_stimulus(1.0, -3.0) == 0.0
        assert add_stimulus(1.0, 0.5) == 1.5


class TestWeeklyReset:
    """Stimulus resets at Monday 00:00 (local)."""

    def test_boundary_midweek(self):
        assert week_reset_boundary(WEDNESDAY_AFTERNOON) == MONDAY

    def test_boundary_on_reset_day(self):
        assert week_reset_boundary(MONDAY + timedelta(minutes=30)) == MONDAY

    def test_boundary_sunday_night(self):
        sunday = MONDAY - timedelta(minutes=1)
        assert week_reset_boundary(sunday) == MONDAY - timedelta(days=7)

    def test_custom_weekday(self):
        cfg = EngineConfig(week_reset_weekday=6)  # Sunday
        assert week_reset_boundary(WEDNESDAY_AFTERNOON, cfg) == datetime(2024, 1, 7)

    def test_should_reset(self):
        assert should_reset_weekly_stimulus(None, WEDNESDAY_AFTERNOON)
        assert should_reset_weekly_stimulus(MONDAY - timedelta(hours=1), WEDNESDAY_AFTERNOON)
        assert not should_reset_weekly_stimulus(MONDAY + timedelta(hours=1), WEDNESDAY_AFTERNOON)

    def test_reset_is_idempotent(self):
        states = {MuscleSection.MID_CHEST: SectionState(fatigue=30, weekly_stimulus=8)}
        once, last = reset_weekly_stimulus(states, MONDAY - timedelta(days=2), WEDNESDAY_AFTERNOON)
        assert once[MuscleSection.MID_CHEST].weekly_stimulus == 0
        assert once[MuscleSection.MID_CHEST].fatigue == 30
        assert last == WEDNESDAY_AFTERNOON

        once[MuscleSection.MID_CHEST].weekly_stimulus = 3
        twice, last2 = reset_weekly_stimulus(once, last, WEDNESDAY_AFTERNOON + timedelta(hours=5))
        assert twice[MuscleSection.MID_CHEST].weekly_stimulus == 3
        assert last2 == last

    def test_reset_does_not_mutate_input(self):
        states = {MuscleSection.QUADS: SectionState(weekly_stimulus=5)}
        reset_weekly_stimulus(states, None, WEDNESDAY_AFTERNOON)
        assert states[MuscleSection.QUADS].weekly_stimulus == 5


# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------

class TestSectionReadiness:
    """PRIMED → RECOVERING (≥70) → CAUTION (≥50) → READY."""

    def test_decayed_fatigue_gives_caution(self):
        # 80 − 10 × 1.5 = 65 → CAUTION
        now = WEDNESDAY_AFTERNOON
        trained = now - timedelta(hours=10)
        state = SectionState(fatigue=decay_fatigue(80, 10), weekly_stimulus=3, last_trained_at=trained)
        assert state.fatigue == pytest.approx(65)
        assert section_readiness(state, now) == ReadinessState.CAUTION

    @pytest.mark.parametrize(
        "fatigue, expected",
        [(70, ReadinessState.RECOVERING), (69.9, ReadinessState.CAUTION), (50, ReadinessState.CAUTION),
         (49.9, ReadinessState.READY), (25, ReadinessState.READY)],
    )
    def test_thresholds(self, fatigue, expected):
        now = WEDNESDAY_AFTERNOON
        state = SectionState(fatigue=fatigue, weekly_stimulus=10, last_trained_at=now - timedelta(hours=2))
        assert section_readiness(state, now) == expected

    def test_primed_requires_rest_low_fatigue_and_low_volume(self):
        now = WEDNESDAY_AFTERNOON
        rested = SectionState(fatigue=10, weekly_stimulus=2, last_trained_at=now - timedelta(hours=72))
        assert section_readiness(rested, now) == ReadinessState.PRIMED

        too_recent = replace(rested, last_trained_at=now - timedelta(hours=47))
        assert section_readiness(too_recent, now) == ReadinessState.READY

        too_much_volume = replace(rested, weekly_stimulus=4.5)
        assert section_readiness(too_much_volume, now) == ReadinessState.READY

    def test_never_trained_is_primed(self):
        assert section_readiness(SectionState(), WEDNESDAY_AFTERNOON) == ReadinessState.PRIMED

    def test_soreness_blocks_primed(self):
        now = WEDNESDAY_AFTERNOON
        rested = SectionState(fatigue=0, weekly_stimulus=0, last_trained_at=now - timedelta(days=4))
        assert section_readiness(rested, now, soreness_level=1) == ReadinessState.PRIMED
        # level 2: F_eff = 15 but soreness > 1
        assert section_readiness(rested, now, soreness_level=2) == ReadinessState.READY

    def test_soreness_penalty_pushes_into_caution(self):
        # 10 + 50 = 60 → CAUTION
        now = WEDNESDAY_AFTERNOON
        state = SectionState(fatigue=10, weekly_stimulus=0, last_trained_at=now - timedelta(days=4))
        assert effective_fatigue(state, 4) == 60
        assert section_readiness(state, now, soreness_level=4) == ReadinessState.CAUTION

    @pytest.mark.parametrize("level, penalty", [(0, 0), (1, 5), (2, 15), (3, 30), (4, 50), (9, 50), (-2, 0)])
    def test_soreness_penalty_table(self, level, penalty):
        assert soreness_penalty(level) == penalty

    def test_primed_wins_over_caution(self):
        # With a caution threshold below the primed limit both rules match.
        cfg = EngineConfig(caution_fatigue_threshold=10.0)
        now = WEDNESDAY_AFTERNOON
        state = SectionState(fatigue=15, weekly_stimulus=0, last_trained_at=now - timedelta(days=3))
        assert section_readiness(state, now, config=cfg) == ReadinessState.PRIMED


class TestAggregateReadiness:
    def test_worst_ordering(self):
        assert worst_readiness([]) == ReadinessState.READY
        assert worst_readiness([ReadinessState.READY, ReadinessState.PRIMED]) == ReadinessState.PRIMED
        assert worst_readiness([ReadinessState.PRIMED, ReadinessState.CAUTION]) == ReadinessState.CAUTION
        assert worst_readiness(
            [ReadinessState.CAUTION, ReadinessState.RECOVERING, ReadinessState.READY]
        ) == ReadinessState.RECOVERING

    def test_group_takes_worst_section(self):
        now = WEDNESDAY_AFTERNOON
        recent = now - timedelta(hours=1)
        states = {
            MuscleSection.UPPER_CHEST: SectionState(fatigue=10, last_trained_at=recent),
            MuscleSection.MID_CHEST: SectionState(fatigue=75, last_trained_at=recent),
        }
        assert group_readiness(MuscleGroup.CHEST, states, now) == ReadinessState.RECOVERING
        assert group_readiness(MuscleGroup.LEGS, states, now) == ReadinessState.READY

    def test_sort_by_readiness(self):
        now = WEDNESDAY_AFTERNOON
        recent = now - timedelta(hours=1)
        states = {
            MuscleSection.QUADS: SectionState(fatigue=80, last_trained_at=recent),
            MuscleSection.GLUTES: SectionState(fatigue=55, last_trained_at=recent),
            MuscleSection.HAMSTRINGS: SectionState(),
            MuscleSection.CALVES: SectionState(fatigue=30, last_trained_at=recent),
        }
        order = sort_by_readiness(
            [MuscleSection.QUADS, MuscleSection.GLUTES, MuscleSection.HAMSTRINGS, MuscleSection.CALVES],
            states,
            now,
        )
        assert order == [
            MuscleSection.HAMSTRINGS,
            MuscleSection.CALVES,
            MuscleSection.GLUTES,
            MuscleSection.QUADS,
        ]


class TestBodyReadiness:
    """R = 0.6 × (100 − mean F) + 0.2 × 100 + 0.2 × 100 × time multiplier."""

    def test_empty_is_100(self):
        assert body_readiness({}, WEDNESDAY_AFTERNOON) == 100

    def test_fresh_afternoon(self):
        states = {s: SectionState() for s in MuscleSection}
        assert body_readiness(states, WEDNESDAY_AFTERNOON) == 100

    def test_morning_multiplier(self):
        # 60 + 20 + 19 = 99
        states = {s: SectionState() for s in MuscleSection}
        assert body_readiness(states, datetime(2024, 1, 10, 9, 0)) == 99

    def test_average_fatigue(self):
        # mean 50 → 30 + 20 + 20 = 70
        states = {MuscleSection.QUADS: SectionState(fatigue=100), MuscleSection.LATS: SectionState(fatigue=0)}
        assert body_readiness(states, WEDNESDAY_AFTERNOON) == 70

    def test_half_rounds_up(self):
        # 0.6 × 97.5 + 20 + 20 = 98.5 → 99
        states = {s: SectionState(fatigue=2.5) for s in MuscleSection}
        assert body_readiness(states, WEDNESDAY_AFTERNOON) == 99

    def test_compressed_schedule_reduces_time_factor(self):
        # 60 + 20 + 20 × 0.9 = 98
        states = {s: SectionState() for s in MuscleSection}
        last_end = WEDNESDAY_AFTERNOON - timedelta(hours=2)
        assert body_readiness(states, WEDNESDAY_AFTERNOON, last_end) == 98
        assert body_readiness(states, WEDNESDAY_AFTERNOON, last_end - timedelta(hours=12)) == 100

    @pytest.mark.parametrize(
        "hour, expected",
        [(5, 0.95), (11, 0.95), (12, 1.0), (17, 1.0), (18, 0.98), (23, 0.98), (3, 0.98)],
    )
    def test_time_of_day(self, hour, expected):
        assert time_of_day_multiplier(datetime(2024, 1, 10, hour, 0)) == expected


# ---------------------------------------------------------------------------
# Consistency / coach
# ---------------------------------------------------------------------------

class TestConsistency:
    """avg_days = max(1, ceil(avg_h / 24)); offsets +1 / +2 / +3."""

    def test_no_sessions_is_reset(self):
        assert compute_consistency_state([], WEDNESDAY_AFTERNOON) == ConsistencyState.RESET

    def test_daily_cadence_on_track(self):
        now = WEDNESDAY_AFTERNOON
        history = [_ended(now - timedelta(days=d, hours=1)) for d in range(5)]
        assert average_interval_hours(ended_sessions(history)) == pytest.approx(24.0)
        assert compute_consistency_state(history, now) == ConsistencyState.ON_TRACK

    def test_six_day_gap_after_two_day_cadence_is_reset(self):
        now = WEDNESDAY_AFTERNOON
        last = now - timedelta(days=6, hours=1)
        history = [_ended(last - timedelta(days=2 * i)) for i in range(4)]
        assert average_interval_hours(ended_sessions(history)) == pytest.approx(48.0)
        assert compute_consistency_state(history, now) == ConsistencyState.RESET

    @pytest.mark.parametrize(
        "days, expected",
        [(0, ConsistencyState.ON_TRACK), (3, ConsistencyState.ON_TRACK), (4, ConsistencyState.MISSED),
         (5, ConsistencyState.DRIFTING), (6, ConsistencyState.RESET)],
    )
    def test_two_day_cadence_bands(self, days, expected):
        assert classify_consistency(days, 48.0) == expected

    def test_short_intervals_count_as_one_day(self):
        assert classify_consistency(2, 10.0) == ConsistencyState.ON_TRACK
        assert classify_consistency(3, 10.0) == ConsistencyState.MISSED
        assert classify_consistency(4, 10.0) == ConsistencyState.DRIFTING
        assert classify_consistency(5, 10.0) == ConsistencyState.RESET

    def test_configurable_offsets(self):
        cfg = EngineConfig(consistency_offsets=(1, 2, 5))
        assert classify_consistency(6, 48.0, cfg) == ConsistencyState.DRIFTING

    def test_single_session_uses_default_interval(self):
        assert average_interval_hours([_ended(WEDNESDAY_AFTERNOON)]) == DEFAULT_CONFIG.default_average_interval_hours

    def test_average_uses_six_most_recent_sessions(self):
        now = WEDNESDAY_AFTERNOON
        recent = [_ended(now - timedelta(days=i)) for i in range(6)]  # 5 daily gaps
        old = _ended(now - timedelta(days=30))
        assert average_interval_hours(ended_sessions(recent + [old])) == pytest.approx(24.0)

    def test_days_since(self):
        now = WEDNESDAY_AFTERNOON
        assert days_since_last_workout(None, now) == 0
        assert days_since_last_workout(now - timedelta(hours=47), now) == 1
        assert days_since_last_workout(now - timedelta(hours=48), now) == 2

    def test_malformed_sessions_are_ignored(self):
        now = WEDNESDAY_AFTERNOON
        broken = WorkoutSession(session_id="x", started_at=now - timedelta(hours=3), status="ended")
        backwards = WorkoutSession(
            session_id="y",
            started_at=now - timedelta(hours=1),
            ended_at=now - timedelta(hours=2),
            status="ended",
        )
        assert ended_sessions([broken, backwards]) == []


class TestCoach:
    def test_rest_window(self):
        now = WEDNESDAY_AFTERNOON
        last_end = now - timedelta(hours=10)
        state, next_start = compute_recovery_state(last_end, now)
        assert state == RecoveryState.REST
        assert next_start == last_end + timedelta(hours=24)

    def test_ready_after_rest(self):
        now = WEDNESDAY_AFTERNOON
        state, _ = compute_recovery_state(now - timedelta(hours=30), now)
        assert state == RecoveryState.READY

    def test_no_history_is_ready(self):
        assert compute_recovery_state(None, WEDNESDAY_AFTERNOON) == (RecoveryState.READY, None)

    def test_rest_banner_overrides_consistency(self):
        now = WEDNESDAY_AFTERNOON
        banner = generate_coach_banner(
            RecoveryState.REST, ConsistencyState.ON_TRACK, now + timedelta(hours=3), now
        )
        assert banner.title == "Recovery Window"
        assert banner.severity == "warning"
        assert banner.primary_cta == "Recover (recommended)"
        assert banner.secondary_cta == "Start anyway"

    @pytest.mark.parametrize(
        "consistency, title, severity",
        [
            (ConsistencyState.ON_TRACK, "You’re Ready", "success"),
            (ConsistencyState.MISSED, "Back on Track Today", "default"),
            (ConsistencyState.DRIFTING, "Let’s Rebuild Your Rhythm", "warning"),
            (ConsistencyState.RESET, "Reset Day", "default"),
        ],
    )
    def test_consistency_banners(self, consistency, title, severity):
        banner = generate_coach_banner(RecoveryState.READY, consistency, None, WEDNESDAY_AFTERNOON)
        assert banner.title == title
        assert banner.severity == severity

    def test_coach_state_fields(self):
        now = WEDNESDAY_AFTERNOON
        history = [
            _ended(now - timedelta(hours=5), session_id="b"),
            _ended(now - timedelta(hours=29), session_id="a"),
        ]
        coach = compute_coach_state(history, now)
        assert coach.last_ended_session_id == "b"
        assert coach.recovery_state == RecoveryState.REST
        assert coach.next_recommended_start_at == now + timedelta(hours=19)
        assert coach.average_interval_hours == pytest.approx(24.0)
        assert coach.days_since_last_workout == 0
        assert coach.consistency_state == ConsistencyState.ON_TRACK
        assert coach.banner.title == "Recovery Window"

    def test_coach_state_is_idempotent(self):
        now = WEDNESDAY_AFTERNOON
        history = [_ended(now - timedelta(days=3))]
        assert compute_coach_state(history, now) == compute_coach_state(history, now)

    def test_format_time_until(self):
        now = WEDNESDAY_AFTERNOON
        assert format_time_until(now + timedelta(hours=5, minutes=12, seconds=40), now) == "5h 12m"
        assert format_time_until(now - timedelta(hours=1), now) == "0h 0m"


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

class TestUnits:
    def test_lb_to_kg(self):
        assert to_kg(100, "lb") == pytest.approx(45.3592)
        assert to_kg(100, "kg") == 100

    def test_rounding_steps(self):
        assert round_weight(101.3, "kg") == 101.5
        assert round_weight(221.0, "lb") == 220.0
        # 162.5 steps → 163
        assert round_weight(81.25, "kg") == 81.5

    def test_format(self):
        assert format_weight(100, "kg") == "100kg"
        assert format_weight(62.4, "kg") == "62.5kg"
        assert format_weight(100, "lb") == "220lb"

    def test_parse(self):
        assert parse_weight_input("100", "lb") == pytest.approx(45.3592)
        assert parse_weight_input(" 60 ", "kg") == 60
        assert parse_weight_input("abc", "kg") == 0
        assert parse_weight_input("nan", "kg") == 0
