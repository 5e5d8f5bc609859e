"""
CLI entry point using Typer.

Provides commands for tracking training load:
- init: Create profile and data files
- start / add-exercise / focus / log-set / end: Run a session
- status: Section and group readiness
- coach: Consistency and recovery banner
- plan: Exercise recommendations for today's focus
- history: Past sessions
- stats: Lifetime stats and badges
- soreness: Report today's soreness
- exercises: Browse the exercise catalog
- reset-week: Apply the weekly stimulus reset
"""

import typer

from .app import app
from .commands import analysis, planning, profile, sessions  # noqa: F401  (register commands)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Per-muscle fatigue and recovery tracker for strength training.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


if __name__ == "__main__":
    app()
