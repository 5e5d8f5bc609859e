"""
Pure metric computation functions over session history.

Includes the filtering rules every engine shares: which sessions are
usable, when a session ends, and how far apart two instants are.  Lifetime
stats and badges are derived here too, so they never drift from the log.
"""

from collections import Counter
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Final, Sequence

from .exercises.registry import find_exercise
from .models import Badge, LoggedSet, UserStats, WeeklyStats, WorkoutSession
from .taxonomy import MuscleGroup, group_for_section

SECONDS_PER_HOUR = 3600.0

STREAK_BADGE_DAYS: Final[int] = 7
FULL_BODY_WINDOW: Final[timedelta] = timedelta(days=7)
RECOVERY_BADGE_READINESS: Final[int] = 80
RECOVERY_BADGE_DAYS: Final[int] = 7

BADGE_CATALOG: Final[tuple[Badge, ...]] = (
    Badge("first-workout", "First Steps", "Complete your first workout", "Complete 1 workout"),
    Badge("consistency-7", "Week Warrior", "Train for 7 days straight", "7 day streak"),
    Badge(
        "full-body",
        "Full Body Focus",
        "Hit all muscle groups in one week",
        "Train every muscle group within 7 days",
    ),
    Badge("pr-crusher", "PR Crusher", "Set a new personal record", "Beat a previous best"),
    Badge(
        "recovery-master",
        "Recovery Master",
        "Maintain high body readiness for a week",
        "Keep readiness above 80% for 7 days",
    ),
)


def hours_between(start: datetime, end: datetime) -> float:
    """
    Elapsed hours from *start* to *end*.

    Args:
        start: Earlier instant
        end: Later instant

    Returns:
        Hours (negative if end precedes start)
    """
    return (end - start).total_seconds() / SECONDS_PER_HOUR


def is_usable_session(session: WorkoutSession) -> bool:
    """
    Check whether a session can take part in computations.

    A session is dropped when its status is unknown, or when it is marked
    ended but has no end time or ends before it starts.
    """
    if session.status not in ("in_progress", "ended"):
        return False
    if session.status == "ended":
        if session.ended_at is None:
            return False
        if session.ended_at < session.started_at:
            return False
    return True


def usable_sessions(
    history: Sequence[WorkoutSession],
    now: datetime | None = None,
) -> list[WorkoutSession]:
    """
    Filter malformed sessions and sort the rest oldest → newest.

    Args:
        history: Sessions in any order
        now: If given, sessions starting after this instant are dropped

    Returns:
        New list sorted by (started_at, session_id)
    """
    result = [
        s for s in history
        if is_usable_session(s) and (now is None or s.started_at <= now)
    ]
    result.sort(key=lambda s: (s.started_at, s.session_id))
    return result


def session_end_time(session: WorkoutSession) -> datetime:
    """
    Instant a session's load is considered applied.

    ended_at for finished sessions; for sessions still in progress the
    latest set timestamp, or started_at when nothing was logged.
    """
    if session.ended_at is not None:
        return session.ended_at
    sets = session.all_sets()
    if sets:
        return max(s.timestamp for s in sets)
    return session.started_at


def session_set_count(session: WorkoutSession) -> int:
    """Number of sets logged in a session."""
    return sum(len(e.sets) for e in session.exercise_entries)


def session_volume_kg(session: WorkoutSession) -> float:
    """
    Total volume load of a session.

    volume = Σ weight_kg × reps
    """
    return sum(s.weight_kg * s.reps for s in session.all_sets())


def heaviest_lift(history: Sequence[WorkoutSession]) -> LoggedSet | None:
    """Heaviest logged set across history; earliest wins on ties."""
    best: LoggedSet | None = None
    for session in usable_sessions(history):
        for s in session.all_sets():
            if best is None or s.weight_kg > best.weight_kg:
                best = s
    return best


def weekly_stats(
    history: Sequence[WorkoutSession],
    now: datetime,
    top_n: int = 3,
) -> WeeklyStats:
    """
    Summarize ended sessions that started within the last seven days.

    Args:
        history: Session history
        now: Reference instant
        top_n: How many focus groups to report

    Returns:
        WeeklyStats with count, total duration and most frequent focus groups
    """
    week_ago = now - timedelta(days=7)
    recent = [
        s for s in usable_sessions(history, now)
        if s.is_ended and s.started_at >= week_ago
    ]

    counts: Counter[MuscleGroup] = Counter()
    for session in recent:
        counts.update(session.focus_muscles)

    # Counter.most_common keeps first-seen order on ties
    top = [group for group, _ in counts.most_common(top_n)]

    return WeeklyStats(
        session_count=len(recent),
        total_duration_seconds=sum(s.duration_seconds for s in recent),
        top_muscles=top,
    )


def _ended_sessions(history: Sequence[WorkoutSession], now: datetime) -> list[WorkoutSession]:
    return [s for s in usable_sessions(history, now) if s.is_ended]


def _streak_lengths(sessions: Sequence[WorkoutSession]) -> list[tuple[WorkoutSession, int]]:
    """Pair each session (sorted by start) with the day streak it belongs to."""
    result: list[tuple[WorkoutSession, int]] = []
    streak = 0
    last_day: date | None = None
    for session in sessions:
        day = session.started_at.date()
        if day != last_day:
            consecutive = last_day is not None and day - last_day == timedelta(days=1)
            streak = streak + 1 if consecutive else 1
            last_day = day
        result.append((session, streak))
    return result


def personal_records(history: Sequence[WorkoutSession], now: datetime) -> list[LoggedSet]:
    """
    Sets that raised the all-time heaviest weight, oldest first.

    Bodyweight (0 kg) sets never count.
    """
    best = 0.0
    records: list[LoggedSet] = []
    for session in usable_sessions(history, now):
        for s in sorted(session.all_sets(), key=lambda s: s.timestamp):
            if s.timestamp > now:
                continue
            if s.weight_kg > best:
                best = s.weight_kg
                records.append(s)
    return records


def user_stats(
    history: Sequence[WorkoutSession],
    now: datetime,
    recovery_score: int = 100,
) -> UserStats:
    """
    Lifetime stats.

    A streak counts consecutive calendar days with at least one ended
    session.  The current streak is still alive when the last training
    day is today or yesterday.

    Args:
        history: Session history
        now: Reference instant
        recovery_score: Current body readiness (clamped to 0-100)

    Returns:
        UserStats
    """
    ended = _ended_sessions(history, now)
    streaks = _streak_lengths(ended)

    current = 0
    if streaks:
        last_session, last_streak = streaks[-1]
        if last_session.started_at.date() >= now.date() - timedelta(days=1):
            current = last_streak

    counts: Counter[MuscleGroup] = Counter()
    for session in ended:
        counts.update(session.focus_muscles)
    favorite = counts.most_common(1)[0][0] if counts else None

    return UserStats(
        total_sessions=len(ended),
        current_streak=current,
        longest_streak=max((n for _, n in streaks), default=0),
        prs_unlocked=len(personal_records(history, now)),
        favorite_muscle=favorite,
        recovery_score=min(100, max(0, recovery_score)),
    )


def _full_body_unlock(history: Sequence[WorkoutSession], now: datetime) -> datetime | None:
    last_hit: dict[MuscleGroup, datetime] = {}
    sets = [s for session in usable_sessions(history, now) for s in session.all_sets()]
    for s in sorted(sets, key=lambda s: s.timestamp):
        if s.timestamp > now:
            continue
        exercise = find_exercise(s.exercise_id)
        if exercise is None:
            continue
        for section in exercise.target_sections:
            last_hit[group_for_section(section)] = s.timestamp
        if len(last_hit) == len(MuscleGroup) and all(
            s.timestamp - t <= FULL_BODY_WINDOW for t in last_hit.values()
        ):
            return s.timestamp
    return None


def _recovery_unlock(samples: Sequence[tuple[datetime, int]]) -> datetime | None:
    run = 0
    previous = None
    for at, readiness in sorted(samples):
        if readiness <= RECOVERY_BADGE_READINESS:
            run = 0
        elif previous is not None and run and at.date() - previous.date() == timedelta(days=1):
            run += 1
        else:
            run = 1
        previous = at
        if run >= RECOVERY_BADGE_DAYS:
            return at
    return None


def badges(
    history: Sequence[WorkoutSession],
    now: datetime,
    readiness_samples: Sequence[tuple[datetime, int]] = (),
) -> list[Badge]:
    """
    Every catalog badge with its unlock instant.

    first-workout    end of the first ended session
    consistency-7    end of the session that completes a 7-day streak
    full-body        set that brings every muscle group within 7 days
    pr-crusher       first record that beats an earlier record
    recovery-master  7th consecutive daily readiness sample above 80

    Args:
        history: Session history
        now: Reference instant
        readiness_samples: (instant, body readiness) pairs, one per day

    Returns:
        Badges in catalog order; locked ones have unlocked_at None
    """
    ended = _ended_sessions(history, now)
    records = personal_records(history, now)

    unlocks: dict[str, datetime | None] = {
        "first-workout": session_end_time(ended[0]) if ended else None,
        "consistency-7": next(
            (session_end_time(s) for s, n in _streak_lengths(ended) if n >= STREAK_BADGE_DAYS),
            None,
        ),
        "full-body": _full_body_unlock(history, now),
        "pr-crusher": records[1].timestamp if len(records) > 1 else None,
        "recovery-master": _recovery_unlock(readiness_samples),
    }
    return [replace(b, unlocked_at=unlocks.get(b.badge_id)) for b in BADGE_CATALOG]
