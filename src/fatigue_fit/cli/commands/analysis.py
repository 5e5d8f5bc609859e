"""Analysis commands: status, coach, exercises."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.coach import compute_coach_state
from ...core.config import EngineConfig
from ...core.engine.config_loader import load_engine_config
from ...core.exercises.registry import all_exercises, exercises_for_group
from ...core.models import DerivedState
from ...core.recompute import recompute
from ...core.taxonomy import parse_group
from ...io.history_store import HistoryStore
from ...io.serializers import ValidationError, coach_state_to_dict, section_state_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, require_store


def load_derived_state(store: HistoryStore, now: datetime, config: EngineConfig) -> DerivedState:
    """
    Recompute the display state from everything in the store.

    The in-progress session counts toward load.  Exits on unreadable data.
    """
    try:
        sessions = store.load_sessions()
        current = store.load_current_session()
        profile = store.load_profile()
        soreness = store.load_soreness()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    return recompute(sessions, now, profile=profile, soreness=soreness, current=current, config=config)


@app.command()
def status(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show readiness of every muscle section and group.
    """
    store = require_store(data_dir)
    config = load_engine_config()
    now = datetime.now()
    derived = load_derived_state(store, now, config)
    store.save_section_states(derived.section_states)

    if json_out:
        print(json.dumps({
            "computed_at": derived.computed_at.isoformat(),
            "body_readiness": derived.body_readiness,
            "groups": {g.value: r.value for g, r in derived.group_readiness.items()},
            "sections": {
                s.value: {
                    **section_state_to_dict(st),
                    "readiness": derived.section_readiness[s].value,
                    "zone": derived.stimulus_zones[s].value,
                }
                for s, st in derived.section_states.items()
            },
            "suggested_focus": [g.value for g in derived.suggested_focus],
        }, indent=2))
        return

    views.print_status(derived)
    gaps = views.format_volume_gaps(derived, config)
    if gaps:
        views.console.print("[bold]Weekly volume gaps[/bold]")
        views.console.print(gaps)
        views.console.print()


@app.command()
def coach(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the coaching banner: rest window and training rhythm.
    """
    store = require_store(data_dir)

    try:
        sessions = store.load_sessions()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    config = load_engine_config()
    now = datetime.now()
    state = compute_coach_state(sessions, now, config=config)

    if json_out:
        print(json.dumps(coach_state_to_dict(state), indent=2))
        return

    views.console.print()
    views.print_coach_banner(state, now)
    views.console.print(views.format_coach_details(state))
    views.console.print()


@app.command()
def exercises(
    group: Annotated[
        Optional[str],
        typer.Option("--group", "-g", help="Only exercises owned by this muscle group"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the exercise catalog with per-section contributions.
    """
    try:
        listed = exercises_for_group(parse_group(group)) if group else all_exercises()
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([
            {
                "id": e.exercise_id,
                "name": e.display_name,
                "group": e.muscle_group.value,
                "contributions": {s.value: w for s, w in e.contributions.items()},
                "equipment": list(e.equipment),
                "difficulty": e.difficulty,
            }
            for e in listed
        ], indent=2))
        return

    views.console.print(views.format_exercise_table(listed))
