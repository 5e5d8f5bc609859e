"""Profile management commands: init, profile, soreness, stats."""

import json
from dataclasses import replace
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_SENSITIVITY
from ...core.engine.config_loader import load_engine_config
from ...core.metrics import badges, user_stats
from ...core.models import UserProfile, UserSettings, WorkoutLocation
from ...core.readiness import clamp_soreness
from ...core.recompute import daily_body_readiness
from ...core.taxonomy import parse_section, section_name
from ...io.serializers import (
    ValidationError,
    badge_to_dict,
    soreness_to_dict,
    user_profile_to_dict,
    user_stats_to_dict,
)
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store, require_store
from .analysis import load_derived_state


@app.command()
def init(
    data_dir: DataDirOption = None,
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help="Experience level: beginner or intermediate"),
    ] = "intermediate",
    days_per_week: Annotated[
        int,
        typer.Option("--days-per-week", help="Planned training days per week (1-7)"),
    ] = 4,
    session_length: Annotated[
        int,
        typer.Option("--session-length", help="Typical session length in minutes (15-180)"),
    ] = 60,
    time_preference: Annotated[
        str,
        typer.Option("--time-preference", help="morning, afternoon or evening"),
    ] = "afternoon",
    sensitivity: Annotated[
        float,
        typer.Option("--sensitivity", "-s", help="Fatigue sensitivity multiplier (0.5-2.0)"),
    ] = 1.0,
    units: Annotated[
        str,
        typer.Option("--units", "-u", help="Weight unit: kg or lb"),
    ] = "kg",
    location: Annotated[
        str,
        typer.Option("--location", "-l", help="Default location: home, gym or other"),
    ] = "gym",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing profile without prompting"),
    ] = False,
) -> None:
    """
    Initialize profile, settings and data files.

    Existing session history is always kept; only the profile and
    settings are replaced.
    """
    store = get_store(data_dir)

    try:
        profile = UserProfile(
            mode=mode,  # type: ignore[arg-type]
            days_per_week=days_per_week,
            session_length_minutes=session_length,
            time_preference=time_preference,  # type: ignore[arg-type]
            fatigue_sensitivity=sensitivity,
            is_onboarded=True,
            default_location=WorkoutLocation(type=location),  # type: ignore[arg-type]
        )
        settings = UserSettings(units=units)  # type: ignore[arg-type]
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        existing = store.load_profile() if store.state_path.exists() else None
    except ValidationError:
        existing = None

    if existing is not None and not force:
        if not views.confirm_action("A profile already exists. Overwrite it?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    store.init()
    store.save_profile(profile)
    store.save_settings(settings)

    views.print_success(f"Initialized fatigue-fit in {store.data_dir}")
    views.console.print(
        f"Mode: {profile.mode}, {profile.days_per_week} days/week, "
        f"sensitivity {profile.fatigue_sensitivity:g}, units {settings.units}"
    )


@app.command("profile")
def show_profile(
    data_dir: DataDirOption = None,
    sensitivity: Annotated[
        Optional[float],
        typer.Option("--sensitivity", "-s", help="New fatigue sensitivity (0.5-2.0)"),
    ] = None,
    units: Annotated[
        Optional[str],
        typer.Option("--units", "-u", help="New weight unit: kg or lb"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show or update the profile.

    Changing sensitivity affects every fatigue value, since all section
    state is replayed from history.
    """
    store = require_store(data_dir)

    try:
        current = store.load_profile() or UserProfile()
        settings = store.load_settings()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        if sensitivity is not None:
            current = replace(current, fatigue_sensitivity=sensitivity)
            store.save_profile(current)
        if units is not None:
            settings = UserSettings(units=units, calibration_mode=settings.calibration_mode)  # type: ignore[arg-type]
            store.save_settings(settings)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        data = user_profile_to_dict(current)
        data["units"] = settings.units
        print(json.dumps(data, indent=2))
        return

    views.console.print(f"Mode: {current.mode}")
    views.console.print(f"Days per week: {current.days_per_week}")
    views.console.print(f"Session length: {current.session_length_minutes} min")
    views.console.print(f"Time preference: {current.time_preference}")
    views.console.print(f"Fatigue sensitivity: {current.fatigue_sensitivity:g}")
    views.console.print(f"Default location: {current.default_location.type}")
    views.console.print(f"Units: {settings.units}")


@app.command()
def soreness(
    entries: Annotated[
        Optional[list[str]],
        typer.Argument(help="SECTION=LEVEL pairs, e.g. midChest=2 quads=1 (levels 0-4)"),
    ] = None,
    data_dir: DataDirOption = None,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Forget all reported soreness"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Report today's soreness per section.

    Soreness raises effective fatigue when readiness is computed and is
    snapshotted into the next session you start.
    """
    store = require_store(data_dir)

    try:
        levels = {} if clear else store.load_soreness()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    for entry in entries or []:
        key, sep, value = entry.partition("=")
        if not sep:
            views.print_error(f"Expected SECTION=LEVEL, got '{entry}'")
            raise typer.Exit(1)
        try:
            section = parse_section(key)
            level = int(value)
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        if level != clamp_soreness(level) and not json_out:
            views.print_warning(f"Soreness level {level} clamped to {clamp_soreness(level)}")
        levels[section] = clamp_soreness(level)

    if entries or clear:
        store.save_soreness(levels)

    if json_out:
        print(json.dumps(soreness_to_dict(levels), indent=2))
        return

    if not levels:
        views.print_info("No soreness reported.")
        return

    for section, level in levels.items():
        views.console.print(f"- {section_name(section)}: {level}")


@app.command()
def stats(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show lifetime stats and badges.

    Everything is derived from the session log, so badges can never get
    out of step with your history.
    """
    store = require_store(data_dir)

    try:
        sessions = store.load_sessions()
        current = store.load_current_session()
        profile = store.load_profile()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    config = load_engine_config()
    now = datetime.now()
    derived = load_derived_state(store, now, config)
    history = [*sessions, current] if current is not None else sessions
    sensitivity = profile.fatigue_sensitivity if profile is not None else DEFAULT_SENSITIVITY

    summary = user_stats(history, now, recovery_score=derived.body_readiness)
    earned = badges(history, now, daily_body_readiness(sessions, now, sensitivity, config))

    if json_out:
        print(json.dumps(
            {"stats": user_stats_to_dict(summary), "badges": [badge_to_dict(b) for b in earned]},
            indent=2,
        ))
        return

    views.console.print(views.format_user_stats(summary))
    views.console.print()
    views.console.print(views.format_badge_table(earned))
