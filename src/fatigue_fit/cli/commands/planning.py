"""Planning commands: plan."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_engine_config
from ...core.exercises.registry import all_exercises
from ...core.models import ReadinessState
from ...core.planner import plan_warnings, recommend_exercises
from ...core.taxonomy import get_muscle, parse_group, section_name, sections_for_group
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, JsonOption, app, require_store
from .analysis import load_derived_state


@app.command()
def plan(
    focus: Annotated[
        Optional[list[str]],
        typer.Option("--focus", "-f", help="Focus muscle group (repeatable); default: current session or suggested"),
    ] = None,
    data_dir: DataDirOption = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of recommendations"),
    ] = 8,
    json_out: JsonOption = False,
) -> None:
    """
    Recommend exercises for today's focus and flag fatigued sections.

    Focus groups come from --focus, else the session in progress, else the
    suggested focus.
    """
    store = require_store(data_dir)
    config = load_engine_config()
    now = datetime.now()
    derived = load_derived_state(store, now, config)

    try:
        if focus:
            groups = [parse_group(g) for g in focus]
        else:
            current = store.load_current_session()
            groups = list(current.focus_muscles) if current and current.focus_muscles else []
        soreness = store.load_soreness()
    except (ValueError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not groups:
        groups = list(derived.suggested_focus)

    recommendations = recommend_exercises(groups, derived.section_states, now, soreness, config=config)[:limit]
    warnings = plan_warnings(groups, derived.section_states, now, soreness, config=config)

    if json_out:
        print(json.dumps({
            "focus": [g.value for g in groups],
            "recommendations": [
                {
                    "exercise_id": r.exercise_id,
                    "name": r.name,
                    "priority": round(r.priority, 4),
                    "reason": r.reason,
                    "target_sections": [s.value for s in r.target_sections],
                }
                for r in recommendations
            ],
            "warnings": [
                {
                    "section": w.section.value,
                    "state": w.state.value,
                    "message": w.message,
                    "alternatives": w.alternatives,
                }
                for w in warnings
            ],
            "suggested_focus": [g.value for g in derived.suggested_focus],
        }, indent=2))
        return

    names = ", ".join(get_muscle(g).name for g in groups) or "none"
    views.console.print()
    views.console.print(f"[bold]Focus:[/bold] {names}")

    if recommendations:
        views.console.print(views.format_recommendation_table(recommendations))
    else:
        views.print_info("Nothing to push today; every focus section is fatigued and well trained.")

    if warnings:
        views.console.print()
        views.print_plan_warnings(warnings, {e.exercise_id: e.display_name for e in all_exercises()})

    fresh = [
        section_name(s)
        for g in groups
        for s in sections_for_group(g)
        if derived.section_readiness[s] == ReadinessState.PRIMED
    ]
    if fresh:
        views.console.print(f"[green]Primed: {', '.join(fresh)}[/green]")
    views.console.print()
