"""Session commands: start, add-exercise, focus, log-set, end, discard, history, reset-week."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_SENSITIVITY
from ...core.engine.config_loader import load_engine_config
from ...core.exercises.registry import find_exercise, get_exercise
from ...core.fatigue import set_fatigue_contributions
from ...core.metrics import heaviest_lift, weekly_stats
from ...core.models import WorkoutLocation, WorkoutSession
from ...core.recompute import replay_section_states
from ...core.stimulus import reset_weekly_stimulus, week_reset_boundary
from ...core.taxonomy import parse_group
from ...core.units import format_weight, parse_weight_input, to_kg
from ...core.workout import (
    add_exercise_entry,
    apply_set_to_states,
    end_session,
    last_set_for_exercise,
    log_set as log_set_to_session,
    set_focus,
    start_session,
    validate_focus,
)
from ...io.history_store import HistoryStore
from ...io.serializers import ValidationError, parse_sets_string, session_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, require_store


def _load_current(store: HistoryStore) -> WorkoutSession:
    """Load the in-progress session or exit with an error."""
    try:
        current = store.load_current_session()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if current is None:
        views.print_error("No session in progress. Run 'start' first.")
        raise typer.Exit(1)
    return current


@app.command()
def start(
    focus: Annotated[
        Optional[list[str]],
        typer.Option("--focus", "-f", help="Focus muscle group (repeatable), e.g. -f chest -f triceps"),
    ] = None,
    data_dir: DataDirOption = None,
    location: Annotated[
        Optional[str],
        typer.Option("--location", "-l", help="home, gym or other (default: profile location)"),
    ] = None,
) -> None:
    """
    Start a training session.

    Today's reported soreness is snapshotted into the session.
    """
    store = require_store(data_dir)
    config = load_engine_config()

    try:
        if store.load_current_session() is not None:
            views.print_error("A session is already in progress. Run 'end' or 'discard' first.")
            raise typer.Exit(1)
        groups = [parse_group(g) for g in focus or []]
        if groups:
            groups = validate_focus(groups, config)
        profile = store.load_profile()
        soreness = store.load_soreness()
    except (ValueError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        where = (
            WorkoutLocation(type=location)  # type: ignore[arg-type]
            if location is not None
            else (profile.default_location if profile is not None else None)
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    session = start_session(groups, datetime.now(), soreness=soreness, location=where)
    store.save_current_session(session)

    names = ", ".join(g.value for g in groups) or "none"
    views.print_success(f"Session started (focus: {names})")


@app.command("add-exercise")
def add_exercise(
    exercise_id: Annotated[str, typer.Argument(help="Catalog exercise ID, e.g. bench-press")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Add an exercise to the current session.
    """
    store = require_store(data_dir)
    current = _load_current(store)

    try:
        get_exercise(exercise_id)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    updated, entry = add_exercise_entry(current, exercise_id)
    if entry is None:
        views.print_error(f"Unknown exercise '{exercise_id}'")
        raise typer.Exit(1)

    if updated is current:
        views.print_info(f"{entry.name} is already in this session.")
        return

    store.save_current_session(updated)
    views.print_success(f"Added {entry.name}")


@app.command("focus")
def change_focus(
    focus: Annotated[
        list[str],
        typer.Argument(help="New focus muscle groups, e.g. chest triceps"),
    ],
    data_dir: DataDirOption = None,
) -> None:
    """
    Replace the focus groups of the current session.
    """
    store = require_store(data_dir)
    current = _load_current(store)

    try:
        updated = set_focus(current, [parse_group(g) for g in focus], load_engine_config())
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_current_session(updated)
    views.print_success(f"Focus: {', '.join(g.value for g in updated.focus_muscles)}")


@app.command("log-set")
def log_set(
    exercise_id: Annotated[str, typer.Argument(help="Catalog exercise ID, e.g. bench-press")],
    data_dir: DataDirOption = None,
    weight: Annotated[
        Optional[str],
        typer.Option("--weight", "-w", help="Weight in your display unit (kg or lb)"),
    ] = None,
    reps: Annotated[
        Optional[int],
        typer.Option("--reps", "-r", help="Repetitions performed"),
    ] = None,
    rpe: Annotated[
        Optional[float],
        typer.Option("--rpe", help="Rate of perceived exertion (1-10)"),
    ] = None,
    sets: Annotated[
        Optional[str],
        typer.Option("--sets", "-s", help="Several sets at once, e.g. '80x8@9*3, 75x10@9'"),
    ] = None,
) -> None:
    """
    Log one or more sets for an exercise in the current session.

    The exercise is added to the session if it is not there yet. Without
    --weight the last weight logged for the exercise is reused.

    Examples:
      fatigue-fit log-set bench-press -w 80 -r 8 --rpe 9
      fatigue-fit log-set squat --sets "100x5@8*3"
    """
    store = require_store(data_dir)
    current = _load_current(store)

    try:
        get_exercise(exercise_id)
        settings = store.load_settings()
        profile = store.load_profile()
        past_sessions = store.load_sessions()
    except (ValueError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    units = settings.units

    if sets is not None:
        try:
            parsed = [(to_kg(w, units), r, p) for w, r, p in parse_sets_string(sets)]
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
    else:
        if reps is None or rpe is None:
            views.print_error("Provide --reps and --rpe (and optionally --weight), or --sets")
            raise typer.Exit(1)
        if weight:
            weight_kg = parse_weight_input(weight, units)
        else:
            previous = last_set_for_exercise(past_sessions, exercise_id, current)
            weight_kg = previous.weight_kg if previous is not None else 0.0
        parsed = [(weight_kg, reps, rpe)]

    current, entry = add_exercise_entry(current, exercise_id)
    if entry is None:
        views.print_error(f"Unknown exercise '{exercise_id}'")
        raise typer.Exit(1)

    sensitivity = profile.fatigue_sensitivity if profile is not None else DEFAULT_SENSITIVITY

    try:
        cached = store.load_section_states()
        last_reset = store.load_last_weekly_reset()
    except ValidationError as e:
        views.print_warning(f"Rebuilding section cache ({e})")
        cached, last_reset = None, None

    config = load_engine_config()
    now = datetime.now()
    if cached is None:
        cached = replay_section_states(past_sessions, now, sensitivity, config)
        last_reset = now
    else:
        cached, last_reset = reset_weekly_stimulus(cached, last_reset, now, config)

    for weight_kg, n_reps, n_rpe in parsed:
        try:
            current, logged = log_set_to_session(current, entry.entry_id, weight_kg, n_reps, n_rpe, now)
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        if logged is None:
            views.print_error(f"Exercise entry for '{exercise_id}' not found")
            raise typer.Exit(1)

        cached = apply_set_to_states(cached, logged, sensitivity, config)
        views.print_set_logged(logged, set_fatigue_contributions(logged, sensitivity, config), units)

    store.save_current_session(current)
    store.save_section_states(cached)
    store.save_last_weekly_reset(last_reset)


@app.command()
def end(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Finish the current session and add it to the history.
    """
    store = require_store(data_dir)
    current = _load_current(store)

    ended = end_session(current, datetime.now())

    try:
        store.append_session(ended)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    store.clear_current_session()

    if json_out:
        print(json.dumps(session_to_dict(ended), indent=2))
        return

    settings = store.load_settings()
    views.print_success(f"Session ended after {ended.duration_seconds // 60} min")
    views.print_current_session(ended, settings.units)


@app.command()
def discard(
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Throw away the current session without saving it.
    """
    store = require_store(data_dir)
    _load_current(store)

    if not force and not views.confirm_action("Discard the current session?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.clear_current_session()
    views.print_success("Session discarded.")


@app.command()
def history(
    data_dir: DataDirOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Show only the most recent N sessions"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show past sessions and this week's summary.
    """
    store = require_store(data_dir)

    try:
        sessions = store.load_sessions()
        current = store.load_current_session()
        settings = store.load_settings()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    shown = sessions[-limit:] if limit else sessions

    if json_out:
        print(json.dumps([session_to_dict(s) for s in shown], indent=2))
        return

    views.print_history(shown, settings.units)
    views.console.print(views.format_weekly_stats(weekly_stats(sessions, datetime.now())))
    best = heaviest_lift(sessions)
    if best is not None and best.weight_kg > 0:
        exercise = find_exercise(best.exercise_id)
        name = exercise.display_name if exercise is not None else best.exercise_id
        views.console.print(f"Heaviest lift: {name} {format_weight(best.weight_kg, settings.units)}")
    if current is not None:
        views.console.print()
        views.print_current_session(current, settings.units)


@app.command("reset-week")
def reset_week(
    data_dir: DataDirOption = None,
) -> None:
    """
    Apply the weekly stimulus reset to the cached section states.

    Stimulus resets at the start of each week; this is a no-op when the
    reset for the current week has already happened.
    """
    store = require_store(data_dir)

    try:
        cached = store.load_section_states()
        last_reset = store.load_last_weekly_reset()
        profile = store.load_profile()
        sessions = store.load_sessions()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    config = load_engine_config()
    now = datetime.now()
    if cached is None:
        sensitivity = profile.fatigue_sensitivity if profile is not None else DEFAULT_SENSITIVITY
        cached = replay_section_states(sessions, now, sensitivity, config)

    states, new_reset = reset_weekly_stimulus(cached, last_reset, now, config)
    store.save_section_states(states)
    store.save_last_weekly_reset(new_reset)

    if new_reset != last_reset:
        views.print_success(f"Weekly stimulus reset (week starting {week_reset_boundary(now, config):%Y-%m-%d}).")
    else:
        views.print_info("Weekly stimulus already reset for this week.")
