"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.history_store import HistoryStore, get_default_store

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Directory holding sessions.jsonl and state.json"),
]

# Shared --json option type
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="fatigue-fit",
    help="Per-muscle fatigue and recovery tracker for strength training.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(data_dir: Path | None) -> HistoryStore:
    """Get a store for the given directory or the default location."""
    if data_dir is None:
        return get_default_store()
    return HistoryStore(data_dir)


def require_store(data_dir: Path | None) -> HistoryStore:
    """Get the store, exiting with an error if 'init' has not been run."""
    from . import views

    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"Session log not found: {store.sessions_path}")
        views.print_info("Run 'init' first to create profile and data files.")
        raise typer.Exit(1)
    return store
