"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of readiness, coaching and
session data.
"""

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.coach import format_time_until
from ..core.config import EngineConfig
from ..core.exercises.base import Exercise
from ..core.metrics import session_set_count, session_volume_kg
from ..core.models import (
    Badge,
    CoachState,
    DerivedState,
    ExerciseRecommendation,
    LoggedSet,
    PlanWarning,
    ReadinessState,
    StimulusZone,
    UserStats,
    WeeklyStats,
    WeightUnit,
    WorkoutSession,
)
from ..core.stimulus import sets_to_optimal, stimulus_progress
from ..core.taxonomy import MUSCLES, MuscleSection, get_muscle, section_name
from ..core.units import format_weight

console = Console()

READINESS_STYLES: dict[ReadinessState, str] = {
    ReadinessState.PRIMED: "bold green",
    ReadinessState.READY: "green",
    ReadinessState.CAUTION: "yellow",
    ReadinessState.RECOVERING: "red",
}

ZONE_STYLES: dict[StimulusZone, str] = {
    StimulusZone.UNDERTRAINED: "cyan",
    StimulusZone.OPTIMAL: "green",
    StimulusZone.OVERTRAINED: "red",
}

SEVERITY_STYLES: dict[str, str] = {
    "default": "blue",
    "success": "green",
    "warning": "yellow",
    "destructive": "red",
}


def _readiness_cell(state: ReadinessState) -> str:
    style = READINESS_STYLES[state]
    return f"[{style}]{state.value}[/{style}]"


def _zone_cell(zone: StimulusZone) -> str:
    style = ZONE_STYLES[zone]
    return f"[{style}]{zone.value}[/{style}]"


def _fmt_time(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


def format_readiness_table(derived: DerivedState) -> Table:
    """
    Create a Rich table of every section's state, grouped by muscle.

    Args:
        derived: Recomputed state

    Returns:
        Rich Table object
    """
    table = Table(title="Section Readiness")

    table.add_column("Group", style="bold")
    table.add_column("Section", style="cyan")
    table.add_column("Fatigue", justify="right")
    table.add_column("Stimulus", justify="right")
    table.add_column("Zone")
    table.add_column("Readiness")
    table.add_column("Last trained", style="dim")

    for muscle in MUSCLES:
        for i, definition in enumerate(muscle.sections):
            section = definition.section
            state = derived.section_states[section]
            table.add_row(
                muscle.name if i == 0 else "",
                definition.name,
                f"{state.fatigue:.1f}",
                f"{state.weekly_stimulus:g}",
                _zone_cell(derived.stimulus_zones[section]),
                _readiness_cell(derived.section_readiness[section]),
                _fmt_time(state.last_trained_at),
            )
        table.add_section()

    return table


def format_group_summary(derived: DerivedState) -> str:
    """
    Format group readiness and body readiness as a text block.

    Args:
        derived: Recomputed state

    Returns:
        Formatted string
    """
    lines = [f"Body readiness: [bold]{derived.body_readiness}%[/bold]"]
    for group, state in derived.group_readiness.items():
        lines.append(f"- {get_muscle(group).name}: {_readiness_cell(state)}")

    if derived.suggested_focus:
        names = ", ".join(get_muscle(g).name for g in derived.suggested_focus)
        lines.append(f"Suggested focus: [bold]{names}[/bold]")

    return "\n".join(lines)


def print_status(derived: DerivedState) -> None:
    """Print the full readiness overview."""
    console.print()
    console.print(format_group_summary(derived))
    console.print()
    console.print(format_readiness_table(derived))
    console.print()


def print_coach_banner(coach: CoachState, now: datetime) -> None:
    """
    Print the coach banner as a panel.

    During a rest window the countdown is appended to the subtitle.
    """
    banner = coach.banner
    subtitle = banner.subtitle
    if coach.next_recommended_start_at is not None and coach.next_recommended_start_at > now:
        if banner.title == "Recovery Window":
            subtitle = f"{subtitle} {format_time_until(coach.next_recommended_start_at, now)}"

    actions = f"[bold]{banner.primary_cta}[/bold]"
    if banner.secondary_cta:
        actions += f"   [dim]{banner.secondary_cta}[/dim]"

    console.print(
        Panel(
            f"{subtitle}\n\n{actions}",
            title=banner.title,
            border_style=SEVERITY_STYLES.get(banner.severity, "blue"),
        )
    )


def format_coach_details(coach: CoachState) -> str:
    """Format the numbers behind the coach banner."""
    lines = [
        f"- Consistency: {coach.consistency_state.value}",
        f"- Recovery: {coach.recovery_state.value}",
        f"- Last workout ended: {_fmt_time(coach.last_workout_ended_at)}",
        f"- Days since last workout: {coach.days_since_last_workout}",
        f"- Average interval: {coach.average_interval_hours:.1f} h",
        f"- Next recommended start: {_fmt_time(coach.next_recommended_start_at)}",
    ]
    return "\n".join(lines)


def format_session_table(sessions: list[WorkoutSession], units: WeightUnit = "kg") -> Table:
    """
    Create a Rich table displaying session history.

    Args:
        sessions: List of sessions to display
        units: Display unit for volume

    Returns:
        Rich Table object
    """
    table = Table(title="Session History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Started", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("Focus", style="magenta")
    table.add_column("Exercises")
    table.add_column("Sets", justify="right")
    table.add_column("Volume", justify="right", style="bold")

    for i, session in enumerate(sessions, 1):
        minutes = session.duration_seconds // 60
        table.add_row(
            str(i),
            _fmt_time(session.started_at),
            f"{minutes} min" if session.is_ended else "in progress",
            ", ".join(g.value for g in session.focus_muscles) or "-",
            ", ".join(e.name for e in session.exercise_entries) or "-",
            str(session_set_count(session)),
            format_weight(session_volume_kg(session), units),
        )

    return table


def print_history(sessions: list[WorkoutSession], units: WeightUnit = "kg") -> None:
    """
    Print session history to console.

    Args:
        sessions: Sessions to display
        units: Display unit
    """
    if not sessions:
        console.print("[yellow]No sessions recorded yet.[/yellow]")
        return

    console.print(format_session_table(sessions, units))


def format_weekly_stats(stats: WeeklyStats) -> str:
    """Format the last-seven-days summary."""
    top = ", ".join(g.value for g in stats.top_muscles) or "-"
    return (
        f"This week: {stats.session_count} sessions, "
        f"{stats.hours}h {stats.minutes}m trained, top muscles: {top}"
    )


def format_user_stats(stats: UserStats) -> str:
    """Format lifetime stats as a few lines of text."""
    favorite = stats.favorite_muscle.value if stats.favorite_muscle else "-"
    return (
        f"Sessions: {stats.total_sessions}\n"
        f"Streak: {stats.current_streak} days (best {stats.longest_streak})\n"
        f"PRs unlocked: {stats.prs_unlocked}\n"
        f"Favorite muscle: {favorite}\n"
        f"Recovery score: {stats.recovery_score}%"
    )


def format_badge_table(badges: list[Badge]) -> Table:
    """Unlocked badges first, then the locked ones with their requirement."""
    table = Table(title="Badges")

    table.add_column("Badge", style="bold")
    table.add_column("Description")
    table.add_column("Unlocked", style="green")

    for badge in sorted(badges, key=lambda b: not b.unlocked):
        table.add_row(
            badge.name,
            badge.description,
            _fmt_time(badge.unlocked_at) if badge.unlocked else f"[dim]{badge.requirement}[/dim]",
        )

    return table


def print_current_session(session: WorkoutSession, units: WeightUnit = "kg") -> None:
    """
    Print the in-progress session with its logged sets.

    Args:
        session: Current session
        units: Display unit
    """
    focus = ", ".join(g.value for g in session.focus_muscles) or "-"
    console.print(f"[bold]Session in progress[/bold] since {_fmt_time(session.started_at)} (focus: {focus})")

    if not session.exercise_entries:
        console.print("[dim]No exercises added yet.[/dim]")
        return

    table = Table(show_header=True, header_style="dim")
    table.add_column("Exercise", style="cyan")
    table.add_column("Set", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("RPE", justify="right")

    for entry in session.exercise_entries:
        if not entry.sets:
            table.add_row(entry.name, "-", "-", "-", "-")
            continue
        for i, s in enumerate(entry.sets, 1):
            table.add_row(
                entry.name if i == 1 else "",
                str(i),
                format_weight(s.weight_kg, units),
                str(s.reps),
                f"{s.rpe:g}",
            )

    console.print(table)


def print_set_logged(
    logged_set: LoggedSet,
    gains: dict[MuscleSection, float],
    units: WeightUnit = "kg",
) -> None:
    """Print a confirmation for a logged set and the fatigue it added."""
    print_success(
        f"Logged {format_weight(logged_set.weight_kg, units)} × {logged_set.reps} @ RPE {logged_set.rpe:g}"
    )
    if gains:
        parts = [f"{section_name(s)} +{g:.1f}" for s, g in gains.items()]
        console.print(f"[dim]Fatigue: {', '.join(parts)}[/dim]")


def format_recommendation_table(recommendations: list[ExerciseRecommendation]) -> Table:
    """
    Create a Rich table of recommended exercises.

    Args:
        recommendations: Ranked recommendations

    Returns:
        Rich Table object
    """
    table = Table(title="Recommended Exercises")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("Priority", justify="right", style="bold")
    table.add_column("Targets", style="dim")
    table.add_column("Why")

    for i, rec in enumerate(recommendations, 1):
        table.add_row(
            str(i),
            rec.name,
            f"{rec.priority:.2f}",
            ", ".join(section_name(s) for s in rec.target_sections),
            rec.reason,
        )

    return table


def print_plan_warnings(warnings: list[PlanWarning], names: dict[str, str]) -> None:
    """
    Print fatigue warnings with alternatives.

    Args:
        warnings: Warnings to print
        names: Exercise id → display name
    """
    for warning in warnings:
        style = READINESS_STYLES[warning.state]
        console.print(f"[{style}]⚠ {warning.message}[/{style}]")
        if warning.alternatives:
            alts = ", ".join(names.get(a, a) for a in warning.alternatives)
            console.print(f"  [dim]Alternatives: {alts}[/dim]")


def format_exercise_table(exercises: list[Exercise]) -> Table:
    """
    Create a Rich table of catalog exercises.

    Args:
        exercises: Exercises to list

    Returns:
        Rich Table object
    """
    table = Table(title="Exercise Catalog")

    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Group", style="magenta")
    table.add_column("Contributions")
    table.add_column("Difficulty", style="dim")

    for exercise in exercises:
        contributions = ", ".join(
            f"{section_name(s)} {w:.0%}" for s, w in exercise.contributions.items()
        )
        table.add_row(
            exercise.exercise_id,
            exercise.display_name,
            exercise.muscle_group.value,
            contributions,
            exercise.difficulty,
        )

    return table


def format_volume_gaps(derived: DerivedState, config: EngineConfig | None = None) -> str:
    """List sections still short of the optimal weekly range."""
    lines = []
    for section, state in derived.section_states.items():
        remaining = sets_to_optimal(state.weekly_stimulus, config)
        if remaining > 0 and derived.stimulus_zones[section] == StimulusZone.UNDERTRAINED:
            progress = stimulus_progress(state.weekly_stimulus, config)
            lines.append(f"- {section_name(section)}: {remaining:g} hard sets to optimal ({progress:.0f}% of weekly max)")
    return "\n".join(lines)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
