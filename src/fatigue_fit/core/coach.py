"""
Consistency and recovery coaching.

Classifies training rhythm from the gaps between recent sessions,
decides whether the user is inside the recommended rest window, and
picks the banner to show.  Everything here is recomputed from the
session log and "now"; nothing is cached.
"""

import math
from datetime import datetime, timedelta
from typing import Sequence

from .config import EngineConfig, resolve_config
from .metrics import hours_between, is_usable_session
from .models import (
    CoachBanner,
    CoachState,
    ConsistencyState,
    RecoveryState,
    WorkoutSession,
)


def ended_sessions(history: Sequence[WorkoutSession]) -> list[WorkoutSession]:
    """
    Finished sessions, most recently ended first.

    Malformed and in-progress sessions are dropped.
    """
    ended = [
        s for s in history
        if is_usable_session(s) and s.is_ended and s.ended_at is not None
    ]
    ended.sort(key=lambda s: (s.ended_at, s.session_id), reverse=True)
    return ended


def average_interval_hours(
    ended: Sequence[WorkoutSession],
    config: EngineConfig | None = None,
) -> float:
    """
    Mean gap between consecutive session ends.

    Uses up to consistency_window_intervals gaps from the most recent
    sessions.  Falls back to the default interval with fewer than two
    sessions.

    Args:
        ended: Ended sessions, most recent first
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        Average interval in hours
    """
    cfg = resolve_config(config)
    if len(ended) < 2:
        return cfg.default_average_interval_hours

    recent = ended[: cfg.consistency_window_intervals + 1]
    gaps = [
        hours_between(older.ended_at, newer.ended_at)
        for newer, older in zip(recent, recent[1:])
    ]
    return sum(gaps) / len(gaps)


def days_since_last_workout(last_end: datetime | None, now: datetime) -> int:
    """Whole days since the last session ended (0 when there is none)."""
    if last_end is None:
        return 0
    return max(0, math.floor(hours_between(last_end, now) / 24))


def classify_consistency(
    days_since: int,
    average_hours: float,
    config: EngineConfig | None = None,
) -> ConsistencyState:
    """
    Classify rhythm against the user's own cadence.

    avg_days = max(1, ceil(average_hours / 24))

        days_since ≤ avg_days + on_track offset → ON_TRACK
        days_since ≤ avg_days + missed offset   → MISSED
        days_since ≤ avg_days + drifting offset → DRIFTING
        otherwise                               → RESET
    """
    cfg = resolve_config(config)
    avg_days = max(1, math.ceil(average_hours / 24))
    on_track, missed, drifting = cfg.consistency_offsets

    if days_since <= avg_days + on_track:
        return ConsistencyState.ON_TRACK
    if days_since <= avg_days + missed:
        return ConsistencyState.MISSED
    if days_since <= avg_days + drifting:
        return ConsistencyState.DRIFTING
    return ConsistencyState.RESET


def compute_consistency_state(
    history: Sequence[WorkoutSession],
    now: datetime,
    config: EngineConfig | None = None,
) -> ConsistencyState:
    """Consistency state of a session log; RESET when nothing has ended."""
    ended = ended_sessions(history)
    if not ended:
        return ConsistencyState.RESET

    days = days_since_last_workout(ended[0].ended_at, now)
    return classify_consistency(days, average_interval_hours(ended, config), config)


def compute_recovery_state(
    last_end: datetime | None,
    now: datetime,
    config: EngineConfig | None = None,
) -> tuple[RecoveryState, datetime | None]:
    """
    Whether the user is still inside the recommended rest window.

    Returns:
        (REST or READY, next recommended start or None without history)
    """
    if last_end is None:
        return RecoveryState.READY, None

    cfg = resolve_config(config)
    next_start = last_end + timedelta(hours=cfg.recommended_rest_hours)
    if now < next_start:
        return RecoveryState.REST, next_start
    return RecoveryState.READY, next_start


_CONSISTENCY_BANNERS: dict[ConsistencyState, CoachBanner] = {
    ConsistencyState.ON_TRACK: CoachBanner(
        title="You’re Ready",
        subtitle="Keep your rhythm going",
        severity="success",
        primary_cta="Start Session",
        secondary_cta="View Plan",
    ),
    ConsistencyState.MISSED: CoachBanner(
        title="Back on Track Today",
        subtitle="Missed yesterday? No stress, a short session keeps momentum",
        severity="default",
        primary_cta="Start Session",
        secondary_cta="View Focus",
    ),
    ConsistencyState.DRIFTING: CoachBanner(
        title="Let’s Rebuild Your Rhythm",
        subtitle="Start light today, just show up",
        severity="warning",
        primary_cta="Start Light Session",
        secondary_cta="View Focus",
    ),
    ConsistencyState.RESET: CoachBanner(
        title="Reset Day",
        subtitle="We’ll start small and build again",
        severity="default",
        primary_cta="Start Fresh",
        secondary_cta="View Focus",
    ),
}


def generate_coach_banner(
    recovery: RecoveryState,
    consistency: ConsistencyState,
    next_start: datetime | None,
    now: datetime,
) -> CoachBanner:
    """
    Pick the banner for the current coaching state.

    A rest window in progress overrides the consistency message.
    """
    if recovery == RecoveryState.REST and next_start is not None and next_start > now:
        return CoachBanner(
            title="Recovery Window",
            subtitle="Next recommended session in",
            severity="warning",
            primary_cta="Recover (recommended)",
            secondary_cta="Start anyway",
        )

    template = _CONSISTENCY_BANNERS[consistency]
    return CoachBanner(
        title=template.title,
        subtitle=template.subtitle,
        severity=template.severity,
        primary_cta=template.primary_cta,
        secondary_cta=template.secondary_cta,
    )


def compute_coach_state(
    history: Sequence[WorkoutSession],
    now: datetime,
    config: EngineConfig | None = None,
) -> CoachState:
    """
    Full coaching state for a session log.

    Pure and idempotent: the same history and instant always give the
    same result.

    Args:
        history: Session log in any order
        now: Reference instant
        config: Tuning values (default: DEFAULT_CONFIG)

    Returns:
        CoachState
    """
    cfg = resolve_config(config)
    ended = ended_sessions(history)
    last = ended[0] if ended else None
    last_end = last.ended_at if last is not None else None

    recovery, next_start = compute_recovery_state(last_end, now, cfg)
    average = average_interval_hours(ended, cfg)
    days = days_since_last_workout(last_end, now)

    if last is None:
        consistency = ConsistencyState.RESET
    else:
        consistency = classify_consistency(days, average, cfg)

    return CoachState(
        consistency_state=consistency,
        recovery_state=recovery,
        banner=generate_coach_banner(recovery, consistency, next_start, now),
        updated_at=now,
        last_ended_session_id=last.session_id if last is not None else None,
        last_workout_ended_at=last_end,
        next_recommended_start_at=next_start,
        rest_hours_recommended=cfg.recommended_rest_hours,
        average_interval_hours=average,
        days_since_last_workout=days,
    )


def format_time_until(next_start: datetime | None, now: datetime) -> str:
    """Countdown text such as "5h 12m"; "0h 0m" once the time has passed."""
    if next_start is None:
        return "0h 0m"
    remaining = max(0, int((next_start - now).total_seconds()))
    hours, rest = divmod(remaining, 3600)
    return f"{hours}h {rest // 60}m"
